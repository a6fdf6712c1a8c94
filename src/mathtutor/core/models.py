"""
mathtutor Conversation Models

Types shared by the conversation loop and the API layer. Conversation
data is immutable: the loop never edits a turn, it builds new request
lists from it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mathtutor.tools.models import ToolOutput


class Role(str, Enum):
    """Author of a chat message."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class ConversationTurn(BaseModel):
    """Prior history plus the message being answered now."""

    model_config = ConfigDict(frozen=True)

    history: tuple[Message, ...] = ()
    current: Message

    @model_validator(mode="after")
    def _current_is_user(self) -> ConversationTurn:
        if self.current.role != Role.USER:
            raise ValueError("the current message must come from the user")
        return self

    @classmethod
    def from_messages(cls, messages: list[Message]) -> ConversationTurn:
        """Split a chat transcript into history and the final user message."""
        if not messages:
            raise ValueError("at least one message is required")
        return cls(history=tuple(messages[:-1]), current=messages[-1])

    def system_notes(self) -> list[str]:
        """Contents of system messages found in the history."""
        return [m.content for m in self.history if m.role == Role.SYSTEM and m.content.strip()]

    def to_request_messages(self) -> list[dict[str, Any]]:
        """User/assistant messages in request format, ending with the current one.

        System messages are excluded (they travel in the system prompt)
        and so are empty ones, which the API rejects.
        """
        request = [
            {"role": m.role.value, "content": m.content}
            for m in self.history
            if m.role != Role.SYSTEM and m.content.strip()
        ]
        request.append({"role": self.current.role.value, "content": self.current.content})
        return request


class ChatReply(BaseModel):
    """Final product of one orchestration turn."""
    reply: str
    side_output: ToolOutput | None = None
    tool_rounds: int = Field(default=0, ge=0)
