"""Shared test fixtures for the mathtutor test suite."""

from __future__ import annotations

from typing import Any

import pytest

from mathtutor.config import TutorConfig
from mathtutor.providers.base import ContentBlock, LLMProvider, LLMResponse, ProviderConfig
from mathtutor.tools.builtin import create_default_registry
from mathtutor.tools.sandbox import SandboxConfig, SandboxedExecutor


class ScriptedProvider(LLMProvider):
    """Model service fake that replays queued responses and records requests.

    A queued exception is raised instead of returned.
    """

    def __init__(self, *responses: LLMResponse | Exception):
        super().__init__(ProviderConfig(model="scripted-model"))
        self._responses = list(responses)
        self.requests: list[dict[str, Any]] = []

    async def _create_message_impl(
        self,
        messages,
        *,
        max_tokens=4096,
        system=None,
        tools=None,
        temperature=None,
    ) -> LLMResponse:
        self.requests.append({
            "messages": messages,
            "system": system,
            "tools": tools,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if not self._responses:
            raise AssertionError("no scripted response left")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def text_response(text: str) -> LLMResponse:
    return LLMResponse(content=[ContentBlock(type="text", text=text)])


def tool_response(*calls: tuple[str, dict], text: str = "") -> LLMResponse:
    """A response requesting the given (name, arguments) tool calls, in order."""
    blocks = [ContentBlock(type="text", text=text)] if text else []
    for i, (name, arguments) in enumerate(calls):
        blocks.append(ContentBlock(
            type="tool_use",
            tool_name=name,
            tool_input=arguments,
            tool_use_id=f"toolu_{i}",
        ))
    return LLMResponse(content=blocks, stop_reason="tool_use")


@pytest.fixture
def sandbox_config(tmp_path) -> SandboxConfig:
    return SandboxConfig(artifact_dir=str(tmp_path))


@pytest.fixture
def executor(sandbox_config) -> SandboxedExecutor:
    return SandboxedExecutor(sandbox_config)


@pytest.fixture
def registry(executor):
    return create_default_registry(executor)


@pytest.fixture
def tutor_config(sandbox_config) -> TutorConfig:
    return TutorConfig(
        provider=ProviderConfig(model="scripted-model"),
        sandbox=sandbox_config,
    )
