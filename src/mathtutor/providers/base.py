"""
mathtutor Model Service Base

Abstract interface for the model service. The conversation loop only
talks to LLMProvider, so the hosted API behind it can be swapped (or
faked in tests) without touching orchestration logic.

Key design decisions:
- Async-first
- Messages use the Anthropic content-block format as the common shape
- Provider-agnostic response model (LLMResponse)
- Retries are opt-in (max_retries=1 means a single attempt)
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mathtutor.exceptions import ProviderError
from mathtutor.logging import get_logger

logger = get_logger("mathtutor.providers")


class ContentBlock(BaseModel):
    """A single content block in a model response.

    Abstracts over provider-specific formats into a unified structure.
    """
    type: str = "text"  # "text" or "tool_use"
    text: str = ""
    tool_name: str = ""
    tool_input: dict[str, Any] = Field(default_factory=dict)
    tool_use_id: str = ""

    def to_message_block(self) -> dict[str, Any]:
        """Render the block back into request format."""
        if self.type == "tool_use":
            return {
                "type": "tool_use",
                "id": self.tool_use_id,
                "name": self.tool_name,
                "input": self.tool_input,
            }
        return {"type": "text", "text": self.text}


class LLMResponse(BaseModel):
    """Unified response from the model service."""
    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: str = "end_turn"
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def text(self) -> str:
        """Extract concatenated text from all text blocks."""
        return "".join(b.text for b in self.content if b.type == "text")

    @property
    def tool_calls(self) -> list[ContentBlock]:
        """Extract all tool_use blocks, in the order the model emitted them."""
        return [b for b in self.content if b.type == "tool_use"]

    @property
    def has_tool_use(self) -> bool:
        """Check if the response contains any tool_use blocks."""
        return any(b.type == "tool_use" for b in self.content)

    def to_assistant_message(self) -> dict[str, Any]:
        """The assistant turn to append to history before sending tool results.

        Empty text blocks are dropped; the API rejects them.
        """
        return {
            "role": "assistant",
            "content": [
                b.to_message_block()
                for b in self.content
                if b.type == "tool_use" or b.text
            ],
        }


class ProviderConfig(BaseModel):
    """Configuration for a model service provider."""

    model_config = ConfigDict(frozen=True)

    api_key: str | None = None
    model: str = ""
    base_url: str | None = None
    max_retries: int = Field(default=1, ge=1)
    timeout_seconds: float = 60.0
    retry_base_delay: float = 1.0  # exponential backoff base (1s, 2s, 4s)


class LLMProvider(ABC):
    """Abstract base class for model service providers.

    Subclasses implement _create_message_impl(). The base class wraps it
    with optional retry and converts unexpected failures to ProviderError.
    """

    def __init__(self, config: ProviderConfig | None = None):
        self._config = config or ProviderConfig()

    @property
    def name(self) -> str:
        """Human-readable provider name."""
        return self.__class__.__name__

    @property
    def model(self) -> str:
        """Current model name."""
        return self._config.model

    @abstractmethod
    async def _create_message_impl(
        self,
        messages: list[dict[str, Any]],
        *,
        max_tokens: int = 4096,
        system: str | None = None,
        tools: list[dict] | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Provider-specific implementation of message creation."""
        ...

    async def create_message(
        self,
        messages: list[dict[str, Any]],
        *,
        max_tokens: int = 4096,
        system: str | None = None,
        tools: list[dict] | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Create a message, retrying up to max_retries attempts in total.

        Args:
            messages: List of message dicts (role + content).
            max_tokens: Maximum tokens in response.
            system: Optional system prompt.
            tools: Optional tool declarations.
            temperature: Optional temperature override.

        Raises:
            ProviderError: every attempt failed.
        """
        last_error: Exception | None = None
        for attempt in range(self._config.max_retries):
            try:
                return await self._create_message_impl(
                    messages,
                    max_tokens=max_tokens,
                    system=system,
                    tools=tools,
                    temperature=temperature,
                )
            except Exception as e:
                last_error = e
                logger.warning(
                    "Model request failed (attempt %d/%d): %s",
                    attempt + 1, self._config.max_retries, e,
                    extra={"provider": self.name},
                )
                if attempt < self._config.max_retries - 1:
                    await asyncio.sleep(self._config.retry_base_delay * (2 ** attempt))

        if isinstance(last_error, ProviderError):
            raise last_error
        raise ProviderError(
            self.name,
            f"failed after {self._config.max_retries} attempt(s): {last_error}",
        ) from last_error
