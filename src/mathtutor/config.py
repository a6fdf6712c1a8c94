"""
mathtutor Configuration

TutorConfig is built once (explicitly or from the environment) and
handed to every component that needs it. It is frozen: nothing mutates
configuration at runtime, and requests never share state through it.

Environment variables read by TutorConfig.from_env():
    ANTHROPIC_API_KEY           model service credentials
    MATHTUTOR_MODEL             model name
    MATHTUTOR_SANDBOX_TIMEOUT   sandbox wall-clock limit in seconds
    MATHTUTOR_PYTHON            interpreter used for snippets
    MATHTUTOR_MAX_TOOL_ROUNDS   tool round-trips allowed per turn
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

from mathtutor.engine.prompts import SYSTEM_PROMPT
from mathtutor.providers.base import ProviderConfig
from mathtutor.providers.claude import ClaudeProvider
from mathtutor.tools.sandbox import SandboxConfig


class TutorConfig(BaseModel):
    """Immutable configuration for the tutor backend."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(model=ClaudeProvider.DEFAULT_MODEL)
    )
    sandbox: SandboxConfig = Field(default_factory=SandboxConfig)
    system_prompt: str = SYSTEM_PROMPT
    max_tokens: int = Field(default=8192, ge=1)
    temperature: float | None = Field(default=1.0, ge=0.0, le=1.0)
    max_tool_rounds: int = Field(default=3, ge=1, le=10)

    @classmethod
    def from_env(cls) -> TutorConfig:
        """Build a configuration from environment variables over the defaults."""
        provider = ProviderConfig(
            api_key=os.environ.get("ANTHROPIC_API_KEY"),
            model=os.environ.get("MATHTUTOR_MODEL", ClaudeProvider.DEFAULT_MODEL),
        )

        sandbox_overrides: dict[str, object] = {}
        if os.environ.get("MATHTUTOR_SANDBOX_TIMEOUT"):
            sandbox_overrides["timeout_seconds"] = float(os.environ["MATHTUTOR_SANDBOX_TIMEOUT"])
        if os.environ.get("MATHTUTOR_PYTHON"):
            sandbox_overrides["interpreter"] = os.environ["MATHTUTOR_PYTHON"]

        overrides: dict[str, object] = {}
        if os.environ.get("MATHTUTOR_MAX_TOOL_ROUNDS"):
            overrides["max_tool_rounds"] = int(os.environ["MATHTUTOR_MAX_TOOL_ROUNDS"])

        return cls(
            provider=provider,
            sandbox=SandboxConfig(**sandbox_overrides),
            **overrides,
        )
