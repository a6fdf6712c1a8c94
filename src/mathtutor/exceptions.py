"""
mathtutor Custom Exceptions

Structured exception hierarchy for the tutor backend.
All mathtutor-specific exceptions inherit from MathTutorError.

Sandbox outcomes (validation rejections, timeouts, runtime errors) are
NOT exceptions: they travel as ExecutionResult values. The classes here
cover faults that abort a request or that are converted into data at a
component boundary.

Exception hierarchy:
    MathTutorError
    +-- ToolArgumentError       (tool input failed its schema)
    +-- ProviderError           (model service failure)
    |   +-- ProviderTimeoutError  (request timeout)
    +-- ConversationError       (a model round failed mid-turn)
    +-- APIError                (API layer error)
"""

from __future__ import annotations


class MathTutorError(Exception):
    """Base exception for all mathtutor errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ToolArgumentError(MathTutorError):
    """Raised when a tool invocation's arguments do not match its schema.

    Caught at the registry boundary and fed back to the model as an
    error result; the conversation continues.
    """

    def __init__(self, tool_name: str, message: str, details: dict | None = None):
        super().__init__(
            f"Invalid arguments for tool '{tool_name}': {message}",
            details={"tool_name": tool_name, **(details or {})},
        )
        self.tool_name = tool_name


class ProviderError(MathTutorError):
    """Base exception for model service errors."""

    def __init__(self, provider_name: str, message: str, details: dict | None = None):
        super().__init__(
            f"Provider '{provider_name}' error: {message}",
            details={"provider_name": provider_name, **(details or {})},
        )
        self.provider_name = provider_name


class ProviderTimeoutError(ProviderError):
    """Raised when a model service request times out."""

    pass


class ConversationError(MathTutorError):
    """Raised when a model round fails during an orchestration turn.

    round_index is 0 for the initial request and n for the n-th
    follow-up carrying tool results.
    """

    def __init__(self, round_index: int, message: str, details: dict | None = None):
        super().__init__(
            f"Round {round_index}: {message}",
            details={"round_index": round_index, **(details or {})},
        )
        self.round_index = round_index


class APIError(MathTutorError):
    """Raised for API layer errors (FastAPI endpoints)."""

    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        super().__init__(
            message,
            details={"status_code": status_code, **(details or {})},
        )
        self.status_code = status_code
