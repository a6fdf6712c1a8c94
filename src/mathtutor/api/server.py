"""
mathtutor API Server

FastAPI backend for the tutor UI. Provides the sandboxed code runner,
the chat endpoint that drives the conversation loop, and a status
endpoint.

The app is built by a factory; all service state (configuration,
model provider, sandbox, tool registry) lives on app.state and is
shared read-only between requests. Each /chat request gets its own
ConversationLoop.

Usage:
    uvicorn mathtutor.api.server:create_app --factory --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from mathtutor import __version__
from mathtutor.config import TutorConfig
from mathtutor.core.models import ConversationTurn, Message
from mathtutor.engine.conversation import ConversationLoop
from mathtutor.exceptions import APIError, MathTutorError
from mathtutor.logging import configure_logging, get_logger
from mathtutor.observability import init_tracing, shutdown
from mathtutor.providers.base import LLMProvider
from mathtutor.providers.claude import ClaudeProvider
from mathtutor.tools.builtin import create_default_registry
from mathtutor.tools.sandbox import ErrorKind, SandboxedExecutor

logger = get_logger("mathtutor.api")

EXECUTE_FAILED = "Failed to execute code"
CHAT_FAILED = "Failed to process request"


# ─── Request/Response Models ────────────────────────────────

class ExecuteRequest(BaseModel):
    code: str


class ExecuteResponse(BaseModel):
    output: str


class ChatRequest(BaseModel):
    messages: list[Message] = Field(min_length=1)


class StatusResponse(BaseModel):
    version: str = __version__
    model: str
    tools: list[str]


# ─── App ─────────────────────────────────────────────────────

def create_app(
    config: TutorConfig | None = None,
    provider: LLMProvider | None = None,
    executor: SandboxedExecutor | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        config: Tutor configuration. Read from the environment if omitted.
        provider: Model service client. A ClaudeProvider if omitted.
        executor: Sandbox for snippets. Built from config.sandbox if omitted.
    """
    configure_logging()
    config = config or TutorConfig.from_env()
    executor = executor or SandboxedExecutor(config.sandbox)
    provider = provider or ClaudeProvider(config.provider)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_tracing()
        yield
        executor.close()
        shutdown()

    app = FastAPI(
        title="mathtutor API",
        description="Math tutor backend with sandboxed Python, charts, diagrams and quizzes",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.provider = provider
    app.state.executor = executor
    app.state.registry = create_default_registry(executor)

    _register_error_handlers(app)
    _register_routes(app)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(status_code=400, content={"error": f"Invalid request: {errors}"})

    @app.exception_handler(APIError)
    async def _api_error(request: Request, exc: APIError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


def _register_routes(app: FastAPI) -> None:

    # ─── REST Endpoints ──────────────────────────────────────

    @app.get("/api/status")
    async def get_status(request: Request) -> StatusResponse:
        state = request.app.state
        return StatusResponse(model=state.provider.model, tools=state.registry.tool_names)

    @app.post("/execute")
    async def execute_code(request: Request, body: ExecuteRequest) -> ExecuteResponse:
        executor: SandboxedExecutor = request.app.state.executor
        try:
            result = await executor.execute(body.code)
        except Exception:
            logger.exception("Unexpected failure running snippet")
            raise APIError(EXECUTE_FAILED, status_code=500)

        if result.success:
            return ExecuteResponse(output=result.output)
        if result.reason == ErrorKind.INFRASTRUCTURE_ERROR:
            logger.error(
                "Snippet execution failed: %s", result.detail,
                extra={"error_kind": result.reason.value},
            )
            raise APIError(EXECUTE_FAILED, status_code=500)
        raise APIError(result.detail, status_code=400)

    @app.post("/chat")
    async def chat(request: Request, body: ChatRequest) -> JSONResponse:
        state = request.app.state
        try:
            turn = ConversationTurn.from_messages(body.messages)
        except ValidationError as e:
            raise APIError(f"Invalid request: {e.errors()[0]['msg']}", status_code=400)

        loop = ConversationLoop(state.config, state.provider, state.registry)
        try:
            reply = await loop.run(turn)
        except MathTutorError as e:
            logger.error("Chat turn failed: %s", e, extra={"state": loop.state.value})
            raise APIError(CHAT_FAILED, status_code=500)
        except Exception:
            logger.exception("Unexpected failure in chat turn", extra={"state": loop.state.value})
            raise APIError(CHAT_FAILED, status_code=500)

        content: dict = {"response": reply.reply}
        if reply.side_output is not None:
            content["functionOutput"] = reply.side_output.to_client_payload()
        return JSONResponse(content=content)
