"""Tests for the mathtutor API server.

Covers /execute, /chat and /api/status. Uses httpx + ASGITransport
against an app built with a scripted model service.
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import ScriptedProvider, text_response, tool_response
from mathtutor import __version__
from mathtutor.api.server import create_app
from mathtutor.exceptions import ProviderError
from mathtutor.tools.sandbox import ErrorKind, ExecutionResult, SandboxedExecutor


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def make_app(tutor_config, executor):
    def _make(*responses, executor_override=None):
        return create_app(
            config=tutor_config,
            provider=ScriptedProvider(*responses),
            executor=executor_override or executor,
        )
    return _make


# ─── Status Endpoint ─────────────────────────────────────────


class TestStatusEndpoint:
    async def test_get_status(self, make_app):
        async with _client(make_app()) as client:
            response = await client.get("/api/status")
        assert response.status_code == 200
        data = response.json()
        assert data["version"] == __version__
        assert data["model"] == "scripted-model"
        assert data["tools"] == ["run_python", "get_chart", "generate_diagram", "generate_quiz"]


# ─── Execute Endpoint ────────────────────────────────────────


class TestExecuteEndpoint:
    async def test_success(self, make_app):
        async with _client(make_app()) as client:
            response = await client.post("/execute", json={"code": "import math\nprint(math.sqrt(16))"})
        assert response.status_code == 200
        assert response.json() == {"output": "4.0"}

    async def test_rejected(self, make_app):
        async with _client(make_app()) as client:
            response = await client.post("/execute", json={"code": "import os\nos.system('ls')"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid or unauthorized Python code"}

    async def test_runtime_error(self, make_app):
        async with _client(make_app()) as client:
            response = await client.post("/execute", json={"code": "print(1 / 0)"})
        assert response.status_code == 400
        assert "ZeroDivisionError" in response.json()["error"]

    async def test_output_overflow_is_400(self, make_app):
        async with _client(make_app()) as client:
            response = await client.post("/execute", json={"code": "print('x' * 2000000)"})
        assert response.status_code == 400
        assert response.json() == {"error": f"Output exceeded {1024 * 1024} bytes"}

    async def test_infrastructure_error_is_generic_500(self, make_app):
        executor = SandboxedExecutor()
        executor.execute = AsyncMock(return_value=ExecutionResult.failure(
            ErrorKind.INFRASTRUCTURE_ERROR, "[Errno 2] No such file or directory: '/opt/python'",
        ))
        async with _client(make_app(executor_override=executor)) as client:
            response = await client.post("/execute", json={"code": "print(1)"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to execute code"}

    async def test_unexpected_exception_is_generic_500(self, make_app):
        executor = SandboxedExecutor()
        executor.execute = AsyncMock(side_effect=RuntimeError("disk on fire"))
        async with _client(make_app(executor_override=executor)) as client:
            response = await client.post("/execute", json={"code": "print(1)"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to execute code"}

    async def test_missing_code_is_400(self, make_app):
        async with _client(make_app()) as client:
            response = await client.post("/execute", json={})
        assert response.status_code == 400
        assert "code" in response.json()["error"]


# ─── Chat Endpoint ───────────────────────────────────────────


class TestChatEndpoint:
    async def test_plain_reply(self, make_app):
        app = make_app(text_response("Hello! What shall we study?"))
        async with _client(app) as client:
            response = await client.post("/chat", json={"messages": [{"role": "user", "content": "hi"}]})
        assert response.status_code == 200
        assert response.json() == {"response": "Hello! What shall we study?"}

    async def test_reply_with_chart(self, make_app):
        app = make_app(
            tool_response(("get_chart", {"type": "bar", "data": [1, 2], "labels": ["a", "b"]})),
            text_response("Here is your chart."),
        )
        async with _client(app) as client:
            response = await client.post("/chat", json={"messages": [{"role": "user", "content": "chart"}]})
        assert response.status_code == 200
        data = response.json()
        assert data["response"] == "Here is your chart."
        assert data["functionOutput"]["chart"]["type"] == "bar"

    async def test_reply_with_code_output(self, make_app):
        app = make_app(
            tool_response(("run_python", {"code": "print(2 ** 10)"})),
            text_response("It is 1024."),
        )
        async with _client(app) as client:
            response = await client.post("/chat", json={"messages": [{"role": "user", "content": "2^10"}]})
        assert response.json() == {"response": "It is 1024.", "functionOutput": "1024"}

    async def test_model_failure_is_generic_500(self, make_app):
        app = make_app(ProviderError("ScriptedProvider", "quota exceeded for key sk-123"))
        async with _client(app) as client:
            response = await client.post("/chat", json={"messages": [{"role": "user", "content": "hi"}]})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process request"}

    async def test_empty_messages_is_400(self, make_app):
        async with _client(make_app()) as client:
            response = await client.post("/chat", json={"messages": []})
        assert response.status_code == 400

    async def test_last_message_must_be_user(self, make_app):
        async with _client(make_app()) as client:
            response = await client.post(
                "/chat", json={"messages": [{"role": "assistant", "content": "hi"}]},
            )
        assert response.status_code == 400
        assert "error" in response.json()
