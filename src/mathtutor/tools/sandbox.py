"""
mathtutor Sandboxed Executor

Runs policy-checked Python snippets in a child process:
- Every snippet passes the code policy first; rejected code never runs
- Snippet written to an ephemeral artifact with a random name inside a
  private (0700) temporary directory
- Wall-clock timeout enforced with asyncio.wait_for + process kill
- Combined stdout/stderr capped; the child is killed once the cap is hit
  and the snippet fails like any other runtime error
- Clean environment, isolated interpreter mode (-I), CPU rlimit on POSIX
- Artifact deleted on every exit path

Note: this is process isolation, not a security boundary. The child runs
as the same user; the code policy is the primary guard.
"""

from __future__ import annotations

import asyncio
import os
import secrets
import shutil
import subprocess
import sys
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from mathtutor.logging import get_logger
from mathtutor.observability.metrics import record_execution
from mathtutor.tools import policy

logger = get_logger("mathtutor.sandbox")

ARTIFACT_PREFIX = "snippet-"
TIMEOUT_MESSAGE = "execution timed out"
_READ_CHUNK = 64 * 1024


class SandboxConfig(BaseModel):
    """Configuration for sandboxed snippet execution."""

    model_config = ConfigDict(frozen=True)

    timeout_seconds: float = Field(default=5.0, gt=0.0, le=300.0)
    max_output_bytes: int = Field(default=1024 * 1024, ge=1024, le=64 * 1024 * 1024)
    interpreter: str = sys.executable or "python3"
    interpreter_args: tuple[str, ...] = ("-I",)
    artifact_dir: str | None = None
    cpu_limit: bool = True
    allowed_modules: tuple[str, ...] = policy.ALLOWED_MODULES
    denied_substrings: tuple[str, ...] = policy.DENIED_SUBSTRINGS


class ErrorKind(str, Enum):
    """Why a snippet did not produce output."""
    VALIDATION_REJECTED = "VALIDATION_REJECTED"
    TIMEOUT = "TIMEOUT"
    RUNTIME_ERROR = "RUNTIME_ERROR"
    INFRASTRUCTURE_ERROR = "INFRASTRUCTURE_ERROR"


class ExecutionResult(BaseModel):
    """Outcome of one executor invocation: Success{output} or Failure{reason, detail}."""

    model_config = ConfigDict(frozen=True)

    success: bool
    output: str = ""
    reason: ErrorKind | None = None
    detail: str = ""
    runtime_ms: float = 0.0

    @classmethod
    def ok(cls, output: str, runtime_ms: float = 0.0) -> ExecutionResult:
        return cls(success=True, output=output, runtime_ms=runtime_ms)

    @classmethod
    def failure(cls, reason: ErrorKind, detail: str, runtime_ms: float = 0.0) -> ExecutionResult:
        return cls(success=False, reason=reason, detail=detail, runtime_ms=runtime_ms)

    @property
    def text(self) -> str:
        """User-visible text: the output on success, the detail otherwise."""
        return self.output if self.success else self.detail


class _OutputBudget:
    """Byte budget shared by the stdout and stderr readers of one child."""

    def __init__(self, limit: int):
        self.remaining = limit
        self.exceeded = False

    def take(self, size: int) -> bool:
        self.remaining -= size
        if self.remaining < 0:
            self.exceeded = True
        return not self.exceeded


@contextmanager
def snippet_artifact(code: str, directory: Path) -> Iterator[Path]:
    """Materialize code as a uniquely named file, removed when the block exits.

    The name carries 48 random bits; creation is exclusive, so a collision
    raises instead of clobbering another invocation's artifact.
    """
    path = directory / f"{ARTIFACT_PREFIX}{secrets.token_hex(6)}.py"
    handle = path.open("x", encoding="utf-8")
    try:
        with handle:
            handle.write(code)
        yield path
    finally:
        _discard(path)


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except OSError as e:
        logger.warning(
            "Failed to remove sandbox artifact: %s", e,
            extra={"artifact": path.name},
        )


class SandboxedExecutor:
    """Validates and executes snippets, one child process per call.

    Instances hold no per-call state, so concurrent execute() calls are
    independent and never wait on each other.
    """

    def __init__(self, config: SandboxConfig | None = None):
        self._config = config or SandboxConfig()
        self._private_dir: Path | None = None

    @property
    def config(self) -> SandboxConfig:
        return self._config

    def validate(self, code: str) -> bool:
        """Apply the configured code policy."""
        return policy.validate(
            code,
            allowed_modules=self._config.allowed_modules,
            denied_substrings=self._config.denied_substrings,
        )

    async def execute(self, code: str) -> ExecutionResult:
        """Validate and run a snippet. Never raises for snippet-level problems."""
        violation = policy.find_violation(
            code,
            allowed_modules=self._config.allowed_modules,
            denied_substrings=self._config.denied_substrings,
        )
        if violation is not None:
            logger.info(
                "Snippet rejected by code policy: %s", violation,
                extra={"error_kind": ErrorKind.VALIDATION_REJECTED.value},
            )
            result = ExecutionResult.failure(ErrorKind.VALIDATION_REJECTED, policy.REJECTION_MESSAGE)
        else:
            result = await self._run_validated(code)

        record_execution(
            success=result.success,
            reason=result.reason.value if result.reason else "NONE",
            duration_seconds=result.runtime_ms / 1000,
        )
        return result

    async def _run_validated(self, code: str) -> ExecutionResult:
        start = time.perf_counter()
        try:
            with snippet_artifact(code, self._workspace()) as artifact:
                result = await self._run_artifact(artifact, start)
        except (OSError, subprocess.SubprocessError) as e:
            logger.error(
                "Sandbox infrastructure failure: %s", e,
                extra={"error_kind": ErrorKind.INFRASTRUCTURE_ERROR.value},
            )
            return ExecutionResult.failure(
                ErrorKind.INFRASTRUCTURE_ERROR, str(e), _elapsed_ms(start)
            )
        return result

    async def _run_artifact(self, artifact: Path, start: float) -> ExecutionResult:
        cfg = self._config
        env = {
            "PATH": os.environ.get("PATH", "/usr/bin:/usr/local/bin:/bin"),
            "HOME": str(artifact.parent),
            "LANG": "en_US.UTF-8",
            "PYTHONIOENCODING": "utf-8",
        }
        proc = await asyncio.create_subprocess_exec(
            cfg.interpreter,
            *cfg.interpreter_args,
            str(artifact),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
            cwd=str(artifact.parent),
            preexec_fn=self._limit_resources() if cfg.cpu_limit and os.name != "nt" else None,
        )

        budget = _OutputBudget(cfg.max_output_bytes)
        try:
            stdout, stderr = await asyncio.wait_for(
                _communicate(proc, budget),
                timeout=cfg.timeout_seconds,
            )
        except TimeoutError:
            await _terminate(proc)
            logger.warning(
                "Snippet exceeded %.1fs limit", cfg.timeout_seconds,
                extra={"error_kind": ErrorKind.TIMEOUT.value, "artifact": artifact.name},
            )
            return ExecutionResult.failure(ErrorKind.TIMEOUT, TIMEOUT_MESSAGE, _elapsed_ms(start))
        finally:
            _kill(proc)

        runtime_ms = _elapsed_ms(start)
        if budget.exceeded:
            logger.warning(
                "Snippet output exceeded %d bytes", cfg.max_output_bytes,
                extra={"error_kind": ErrorKind.RUNTIME_ERROR.value, "artifact": artifact.name},
            )
            return ExecutionResult.failure(
                ErrorKind.RUNTIME_ERROR,
                f"Output exceeded {cfg.max_output_bytes} bytes",
                runtime_ms,
            )

        diagnostics = stderr.decode("utf-8", errors="replace")
        if diagnostics.strip():
            logger.info(
                "Snippet wrote diagnostics",
                extra={
                    "error_kind": ErrorKind.RUNTIME_ERROR.value,
                    "exit_code": proc.returncode,
                    "artifact": artifact.name,
                },
            )
            return ExecutionResult.failure(ErrorKind.RUNTIME_ERROR, diagnostics, runtime_ms)

        if proc.returncode != 0:
            return ExecutionResult.failure(
                ErrorKind.RUNTIME_ERROR,
                f"Process exited with code {proc.returncode}",
                runtime_ms,
            )

        output = stdout.decode("utf-8", errors="replace").strip()
        logger.debug(
            "Snippet executed",
            extra={"artifact": artifact.name, "duration_ms": round(runtime_ms, 2)},
        )
        return ExecutionResult.ok(output, runtime_ms)

    def _workspace(self) -> Path:
        """Directory that holds artifacts; a private mkdtemp unless configured."""
        if self._config.artifact_dir:
            return Path(self._config.artifact_dir)
        if self._private_dir is None or not self._private_dir.exists():
            self._private_dir = Path(tempfile.mkdtemp(prefix="mathtutor-"))
        return self._private_dir

    def close(self) -> None:
        """Remove the private artifact directory, if one was created."""
        if self._private_dir is not None:
            shutil.rmtree(self._private_dir, ignore_errors=True)
            self._private_dir = None

    def _limit_resources(self):
        """Return a preexec_fn that caps child CPU time on POSIX."""
        cpu_seconds = max(1, int(self._config.timeout_seconds) + 1)

        def _apply_limits():
            import resource

            resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds + 1))

        return _apply_limits


async def _communicate(
    proc: asyncio.subprocess.Process,
    budget: _OutputBudget,
) -> tuple[bytes, bytes]:
    stdout, stderr = await asyncio.gather(
        _drain(proc.stdout, budget, proc),
        _drain(proc.stderr, budget, proc),
    )
    await proc.wait()
    return stdout, stderr


async def _drain(
    stream: asyncio.StreamReader | None,
    budget: _OutputBudget,
    proc: asyncio.subprocess.Process,
) -> bytes:
    """Read a pipe to EOF, killing the child once the shared budget runs out."""
    if stream is None:
        return b""
    chunks: list[bytes] = []
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            break
        if not budget.take(len(chunk)):
            _kill(proc)
            break
        chunks.append(chunk)
    return b"".join(chunks)


def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    _kill(proc)
    await proc.wait()


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
