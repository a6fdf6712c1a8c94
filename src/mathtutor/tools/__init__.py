"""
mathtutor Tool System

Every tool call from the model service is dispatched through the
registry:

    Model (tool_use) → ToolRegistry.dispatch → handler → ToolOutput

Components:
- policy: static allow/deny check applied to every snippet
- SandboxedExecutor: bounded child-process execution of checked snippets
- ToolRegistry / RegisteredTool: name → argument model + handler
- Built-in tools: run_python, get_chart, generate_diagram, generate_quiz
"""

from mathtutor.tools.models import (
    ChartOutput,
    DiagramOutput,
    QuizOutput,
    QuizSpec,
    TextOutput,
    ToolDefinition,
    ToolInvocation,
    ToolOutput,
)
from mathtutor.tools.registry import RegisteredTool, ToolRegistry
from mathtutor.tools.sandbox import ErrorKind, ExecutionResult, SandboxConfig, SandboxedExecutor

__all__ = [
    "ChartOutput",
    "DiagramOutput",
    "ErrorKind",
    "ExecutionResult",
    "QuizOutput",
    "QuizSpec",
    "RegisteredTool",
    "SandboxConfig",
    "SandboxedExecutor",
    "TextOutput",
    "ToolDefinition",
    "ToolInvocation",
    "ToolOutput",
    "ToolRegistry",
]
