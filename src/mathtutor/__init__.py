"""
mathtutor: tool-using math tutor backend

A chat backend that lets a hosted language model answer math questions
with the help of four tools: sandboxed Python, charts, Mermaid diagrams
and quizzes.

Usage:
    from mathtutor import ConversationLoop, ConversationTurn, Message, TutorConfig

    config = TutorConfig.from_env()
    executor = SandboxedExecutor(config.sandbox)
    loop = ConversationLoop(config, ClaudeProvider(config.provider), create_default_registry(executor))
    reply = await loop.run(ConversationTurn.from_messages([Message(role="user", content="Plot x^2")]))
"""

__version__ = "0.1.0"

from mathtutor.config import TutorConfig
from mathtutor.core.models import ChatReply, ConversationTurn, Message, Role
from mathtutor.engine.conversation import ConversationLoop, LoopState
from mathtutor.exceptions import (
    APIError,
    ConversationError,
    MathTutorError,
    ProviderError,
    ProviderTimeoutError,
    ToolArgumentError,
)
from mathtutor.providers import ClaudeProvider, LLMProvider, create_provider
from mathtutor.tools import ErrorKind, ExecutionResult, SandboxConfig, SandboxedExecutor, ToolRegistry
from mathtutor.tools.builtin import create_default_registry

__all__ = [
    "__version__",
    "APIError",
    "ChatReply",
    "ClaudeProvider",
    "ConversationError",
    "ConversationLoop",
    "ConversationTurn",
    "ErrorKind",
    "ExecutionResult",
    "LLMProvider",
    "LoopState",
    "MathTutorError",
    "Message",
    "ProviderError",
    "ProviderTimeoutError",
    "Role",
    "SandboxConfig",
    "SandboxedExecutor",
    "ToolArgumentError",
    "ToolRegistry",
    "TutorConfig",
    "create_default_registry",
    "create_provider",
]
