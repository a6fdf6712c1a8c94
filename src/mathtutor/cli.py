"""
mathtutor CLI

Command-line interface for the tutor backend.

Commands:
    mathtutor serve                  Start the API server
    mathtutor execute [FILE]         Run a snippet through the sandbox
    mathtutor chat "message"         Run one tutor turn
    mathtutor status                 Show version, dependencies and environment

Usage:
    echo 'import math; print(math.pi)' | mathtutor execute
    mathtutor chat "What is the derivative of x^2?"
"""

from __future__ import annotations

import asyncio
import importlib
import json
import os
import sys

import click

from mathtutor import __version__
from mathtutor.config import TutorConfig
from mathtutor.core.models import ConversationTurn, Message, Role
from mathtutor.engine.conversation import ConversationLoop
from mathtutor.exceptions import MathTutorError
from mathtutor.logging import configure_logging
from mathtutor.providers.claude import ClaudeProvider
from mathtutor.tools.builtin import create_default_registry
from mathtutor.tools.sandbox import SandboxedExecutor


@click.group()
@click.version_option(version=__version__, prog_name="mathtutor")
def cli() -> None:
    """mathtutor: a tool-using math tutor backend"""
    configure_logging()


@cli.command()
@click.option("--host", default="0.0.0.0", help="Bind address")
@click.option("--port", default=8000, type=int, help="Port number")
@click.option("--reload", is_flag=True, help="Auto-reload on changes")
def serve(host: str, port: int, reload: bool) -> None:
    """Start the mathtutor API server."""
    import uvicorn

    _print_header("mathtutor API Server")
    click.echo(f"  Binding: {host}:{port}")
    click.echo(f"  Reload: {'enabled' if reload else 'disabled'}")
    click.echo()

    uvicorn.run(
        "mathtutor.api.server:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@cli.command()
@click.argument("file", type=click.File("r"), default="-")
def execute(file) -> None:
    """Run a Python snippet (FILE or stdin) in the sandbox."""
    code = file.read()
    config = TutorConfig.from_env()
    executor = SandboxedExecutor(config.sandbox)
    try:
        result = asyncio.run(executor.execute(code))
    finally:
        executor.close()

    if not result.success:
        click.echo(f"Error ({result.reason.value}): {result.detail}", err=True)
        sys.exit(1)
    click.echo(result.output)


@cli.command()
@click.argument("message")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def chat(message: str, json_output: bool) -> None:
    """Ask the tutor a single question."""
    config = TutorConfig.from_env()
    try:
        reply = asyncio.run(_chat(config, message))
    except MathTutorError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if json_output:
        payload: dict = {"response": reply.reply}
        if reply.side_output is not None:
            payload["functionOutput"] = reply.side_output.to_client_payload()
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(reply.reply)
    if reply.side_output is not None:
        _print_header(f"Tool output ({reply.side_output.kind})")
        output = reply.side_output.to_client_payload()
        click.echo(output if isinstance(output, str) else json.dumps(output, indent=2))


async def _chat(config: TutorConfig, message: str):
    executor = SandboxedExecutor(config.sandbox)
    try:
        loop = ConversationLoop(
            config,
            ClaudeProvider(config.provider),
            create_default_registry(executor),
        )
        return await loop.run(ConversationTurn.from_messages([Message(role=Role.USER, content=message)]))
    finally:
        executor.close()


@cli.command()
def status() -> None:
    """Show mathtutor version, dependencies and environment."""
    _print_header("mathtutor Status")

    click.echo(f"  Version: {__version__}")
    click.echo(f"  Python: {sys.version.split()[0]}")

    deps = {
        "anthropic": "Model service SDK",
        "fastapi": "API Server",
        "uvicorn": "ASGI server",
        "pydantic": "Models",
        "opentelemetry.sdk": "Tracing export",
    }

    click.echo("\n  Dependencies:")
    for pkg, label in deps.items():
        try:
            mod = importlib.import_module(pkg)
            version = getattr(mod, "__version__", "installed")
            click.echo(f"    {label:24s} {pkg:20s} {version}")
        except ImportError:
            click.echo(f"    {label:24s} {pkg:20s} NOT INSTALLED")

    click.echo("\n  Environment:")
    env_vars = [
        "ANTHROPIC_API_KEY",
        "MATHTUTOR_MODEL",
        "MATHTUTOR_SANDBOX_TIMEOUT",
        "MATHTUTOR_PYTHON",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
    ]
    for var in env_vars:
        value = os.environ.get(var)
        if value and not var.endswith("_KEY"):
            click.echo(f"    {var:30s} {value}")
        elif value:
            masked = value[:4] + "..." + value[-4:] if len(value) > 10 else "***"
            click.echo(f"    {var:30s} {masked}")
        else:
            click.echo(f"    {var:30s} NOT SET")


def _print_header(title: str) -> None:
    """Print a formatted header."""
    click.echo(f"\n  {'=' * 60}")
    click.echo(f"  {title}")
    click.echo(f"  {'=' * 60}\n")


if __name__ == "__main__":
    cli()
