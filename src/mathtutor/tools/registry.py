"""
mathtutor Tool Registry

Maps tool names to a declaration, an argument model and a handler.
dispatch() is the single entry point for executing a model-requested
tool call:

    ToolInvocation → lookup → argument validation → handler → ToolOutput

Unknown tools yield None (no output, not an error). Malformed arguments
and handler faults become error TextOutputs, so a bad tool call never
escapes into the conversation loop as an exception.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from mathtutor.exceptions import ToolArgumentError
from mathtutor.logging import get_logger
from mathtutor.observability.metrics import record_tool_call
from mathtutor.observability.tracing import get_tracer
from mathtutor.tools.models import TextOutput, ToolDefinition, ToolInvocation, ToolOutput

logger = get_logger("mathtutor.tools")

ToolHandler = Callable[[Any], ToolOutput] | Callable[[Any], Awaitable[ToolOutput]]


class RegisteredTool:
    """A tool registered in the system.

    Combines the model-facing declaration, the pydantic model its
    arguments must satisfy, and the handler that produces its output.
    """

    def __init__(
        self,
        name: str,
        description: str,
        args_model: type[BaseModel],
        handler: ToolHandler,
    ):
        self.args_model = args_model
        self.handler = handler
        self.definition = ToolDefinition(
            name=name,
            description=description,
            input_schema=_input_schema(args_model),
        )

    @property
    def name(self) -> str:
        return self.definition.name

    def parse_arguments(self, arguments: dict[str, Any]) -> BaseModel:
        """Validate raw arguments, raising ToolArgumentError on mismatch."""
        try:
            return self.args_model.model_validate(arguments)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            raise ToolArgumentError(self.name, problems) from e


class ToolRegistry:
    """Static table of the tools offered to the model service.

    Tools are registered once at startup; the registry is read-only
    afterwards and safe to share across concurrent requests.
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def register(self, tool: RegisteredTool) -> None:
        """Register a tool.

        Raises ValueError if a tool with the same name already exists.
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def get(self, name: str) -> RegisteredTool | None:
        """Look up a registered tool by name."""
        return self._tools.get(name)

    def get_all(self) -> list[RegisteredTool]:
        """Return all registered tools."""
        return list(self._tools.values())

    def get_schemas(self) -> list[dict]:
        """Tool declarations in the model service's tools parameter format."""
        return [t.definition.to_schema() for t in self._tools.values()]

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools.keys())

    async def dispatch(self, invocation: ToolInvocation) -> ToolOutput | None:
        """Run one tool invocation.

        Returns None for unknown tool names. Every other outcome,
        including malformed arguments and handler faults, is a ToolOutput.
        """
        tool = self._tools.get(invocation.name)
        if tool is None:
            logger.info(
                "Dropping invocation of unknown tool",
                extra={"tool_name": invocation.name, "tool_use_id": invocation.tool_use_id},
            )
            record_tool_call(tool_name=invocation.name, outcome="unknown")
            return None

        with get_tracer().start_as_current_span("mathtutor.tool.dispatch") as span:
            span.set_attribute("mathtutor.tool_name", tool.name)
            start = time.monotonic()
            output = await self._run(tool, invocation)
            duration_ms = (time.monotonic() - start) * 1000
            failed = isinstance(output, TextOutput) and output.is_error
            span.set_attribute("mathtutor.tool_error", failed)

        logger.info(
            "Tool '%s' dispatched", tool.name,
            extra={
                "tool_name": tool.name,
                "tool_use_id": invocation.tool_use_id,
                "duration_ms": round(duration_ms, 2),
            },
        )
        record_tool_call(tool_name=tool.name, outcome="error" if failed else "ok")
        return output

    async def _run(self, tool: RegisteredTool, invocation: ToolInvocation) -> ToolOutput:
        try:
            args = tool.parse_arguments(invocation.arguments)
        except ToolArgumentError as e:
            logger.info(str(e), extra={"tool_name": tool.name, "tool_use_id": invocation.tool_use_id})
            return TextOutput(text=str(e), is_error=True)

        try:
            result = tool.handler(args)
            # Support both sync and async handlers
            if asyncio.iscoroutine(result):
                result = await result
            return result
        except Exception:
            logger.exception(
                "Tool handler failed",
                extra={"tool_name": tool.name, "tool_use_id": invocation.tool_use_id},
            )
            return TextOutput(text=f"Tool '{tool.name}' failed to run", is_error=True)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools


def _input_schema(args_model: type[BaseModel]) -> dict[str, Any]:
    schema = args_model.model_json_schema()
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    return schema
