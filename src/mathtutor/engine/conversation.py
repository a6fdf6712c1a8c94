"""
mathtutor Conversation Loop

Drives one chat turn against the model service:

    AWAITING_MODEL_RESPONSE → INSPECTING_RESPONSE
        → DISPATCHING_TOOLS → AWAITING_FOLLOWUP_RESPONSE → INSPECTING_RESPONSE ...
        → DONE

Tool invocations are dispatched one at a time, in the order the model
emitted them, and the follow-up request is only formed once every
result of that round is in. A loop instance serves exactly one request;
the configuration, provider and registry it is built from are shared
and read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from mathtutor.config import TutorConfig
from mathtutor.core.models import ChatReply, ConversationTurn
from mathtutor.exceptions import ConversationError, ProviderError
from mathtutor.logging import get_logger
from mathtutor.observability.tracing import get_tracer
from mathtutor.providers.base import LLMProvider, LLMResponse
from mathtutor.tools.models import TextOutput, ToolInvocation, ToolOutput
from mathtutor.tools.registry import ToolRegistry

logger = get_logger("mathtutor.engine")

ROUND_LIMIT_REPLY = "Tool round limit reached before a final answer."


class LoopState(str, Enum):
    AWAITING_MODEL_RESPONSE = "AWAITING_MODEL_RESPONSE"
    INSPECTING_RESPONSE = "INSPECTING_RESPONSE"
    DISPATCHING_TOOLS = "DISPATCHING_TOOLS"
    AWAITING_FOLLOWUP_RESPONSE = "AWAITING_FOLLOWUP_RESPONSE"
    DONE = "DONE"


@dataclass(frozen=True)
class ToolExchange:
    """One invocation and what the registry made of it (None: unknown tool)."""
    invocation: ToolInvocation
    output: ToolOutput | None

    def to_result_block(self) -> dict[str, Any]:
        """tool_result block answering this invocation.

        The API requires an answer for every tool_use id, so dropped
        unknown tools are answered with an error note.
        """
        if self.output is None:
            content = f"Unknown tool: {self.invocation.name}"
            is_error = True
        else:
            content = self.output.to_model_content()
            is_error = isinstance(self.output, TextOutput) and self.output.is_error
        return {
            "type": "tool_result",
            "tool_use_id": self.invocation.tool_use_id,
            "content": content,
            "is_error": is_error,
        }


class ConversationLoop:
    """Per-request state machine between the user, the model and the tools."""

    def __init__(
        self,
        config: TutorConfig,
        provider: LLMProvider,
        registry: ToolRegistry,
    ):
        self._config = config
        self._provider = provider
        self._registry = registry
        self._state = LoopState.AWAITING_MODEL_RESPONSE

    @property
    def state(self) -> LoopState:
        return self._state

    async def run(self, turn: ConversationTurn) -> ChatReply:
        """Answer the turn's current message.

        Raises:
            ConversationError: a model request failed. Not retried here.
        """
        system = self._system_prompt(turn)
        messages = turn.to_request_messages()

        response = await self._ask(messages, system, round_index=0)
        side_output: ToolOutput | None = None
        rounds = 0

        while True:
            self._transition(LoopState.INSPECTING_RESPONSE, rounds)
            if not response.has_tool_use or rounds >= self._config.max_tool_rounds:
                break

            self._transition(LoopState.DISPATCHING_TOOLS, rounds)
            exchanges = await self._dispatch_all(
                tuple(
                    ToolInvocation(name=b.tool_name, arguments=b.tool_input, tool_use_id=b.tool_use_id)
                    for b in response.tool_calls
                )
            )
            produced = [e.output for e in exchanges if e.output is not None]
            if not produced:
                # Only unknown tools: fall back to whatever text came with them
                break

            side_output = produced[-1]
            rounds += 1
            messages = [
                *messages,
                response.to_assistant_message(),
                {"role": "user", "content": [e.to_result_block() for e in exchanges]},
            ]
            self._transition(LoopState.AWAITING_FOLLOWUP_RESPONSE, rounds)
            response = await self._ask(messages, system, round_index=rounds)

        reply = response.text
        if not reply and response.has_tool_use and rounds >= self._config.max_tool_rounds:
            logger.warning(
                "Tool round limit reached with no text reply",
                extra={"round": rounds},
            )
            reply = ROUND_LIMIT_REPLY

        self._transition(LoopState.DONE, rounds)
        return ChatReply(reply=reply, side_output=side_output, tool_rounds=rounds)

    async def _dispatch_all(self, invocations: tuple[ToolInvocation, ...]) -> tuple[ToolExchange, ...]:
        """Dispatch sequentially, preserving emission order."""
        exchanges: tuple[ToolExchange, ...] = ()
        for invocation in invocations:
            output = await self._registry.dispatch(invocation)
            exchanges = (*exchanges, ToolExchange(invocation=invocation, output=output))
        return exchanges

    async def _ask(self, messages: list[dict[str, Any]], system: str, round_index: int) -> LLMResponse:
        with get_tracer().start_as_current_span("mathtutor.model.request") as span:
            span.set_attribute("mathtutor.round", round_index)
            try:
                return await self._provider.create_message(
                    messages,
                    max_tokens=self._config.max_tokens,
                    system=system,
                    tools=self._registry.get_schemas() or None,
                    temperature=self._config.temperature,
                )
            except ProviderError as e:
                logger.error(
                    "Model request failed: %s", e,
                    extra={"provider": self._provider.name, "round": round_index},
                )
                raise ConversationError(round_index, str(e)) from e

    def _system_prompt(self, turn: ConversationTurn) -> str:
        notes = turn.system_notes()
        if not notes:
            return self._config.system_prompt
        return "\n\n".join([self._config.system_prompt, *notes])

    def _transition(self, state: LoopState, rounds: int) -> None:
        self._state = state
        logger.debug("Loop state %s", state.value, extra={"state": state.value, "round": rounds})
