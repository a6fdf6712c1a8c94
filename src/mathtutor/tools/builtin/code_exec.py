"""Code execution tool: policy-checked Python in the sandbox.

The executor validates every snippet before running it, so this tool
has no way to reach the child process with unchecked code.
"""

from __future__ import annotations

from mathtutor.tools.models import RunPythonArgs, TextOutput
from mathtutor.tools.registry import RegisteredTool
from mathtutor.tools.sandbox import SandboxedExecutor

RUN_PYTHON = "run_python"


def create_code_exec_tool(executor: SandboxedExecutor) -> RegisteredTool:
    """Build the run_python tool bound to a specific executor."""

    async def _run_python(args: RunPythonArgs) -> TextOutput:
        result = await executor.execute(args.code)
        return TextOutput(text=result.text, is_error=not result.success)

    modules = ", ".join(executor.config.allowed_modules)
    return RegisteredTool(
        name=RUN_PYTHON,
        description=(
            "Executes AI-generated Python code for mathematical demonstrations, "
            "calculations and numeric solutions. Not for user-provided code. "
            f"Only these modules may be imported: {modules}. "
            "File, process, network and eval-style access is rejected. "
            f"Runs for at most {executor.config.timeout_seconds:g} seconds; "
            "print the values you want returned."
        ),
        args_model=RunPythonArgs,
        handler=_run_python,
    )
