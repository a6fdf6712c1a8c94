"""
mathtutor Built-in Tools

The four tools offered to the model service: sandboxed Python, charts,
Mermaid diagrams and quizzes.
"""

from mathtutor.tools.registry import ToolRegistry
from mathtutor.tools.sandbox import SandboxedExecutor

from mathtutor.tools.builtin.chart import CHART_TOOL, build_chart
from mathtutor.tools.builtin.code_exec import create_code_exec_tool
from mathtutor.tools.builtin.diagram import DIAGRAM_HEADERS, DIAGRAM_TOOL, normalize_diagram
from mathtutor.tools.builtin.quiz import QUIZ_TOOL

__all__ = [
    "CHART_TOOL",
    "DIAGRAM_HEADERS",
    "DIAGRAM_TOOL",
    "QUIZ_TOOL",
    "build_chart",
    "create_code_exec_tool",
    "create_default_registry",
    "normalize_diagram",
]


def create_default_registry(executor: SandboxedExecutor) -> ToolRegistry:
    """Create a registry holding all built-in tools."""
    registry = ToolRegistry()
    registry.register(create_code_exec_tool(executor))
    registry.register(CHART_TOOL)
    registry.register(DIAGRAM_TOOL)
    registry.register(QUIZ_TOOL)
    return registry
