"""Tests for mathtutor custom exceptions.

Covers the exception hierarchy and structured error information.
"""

import pytest

from mathtutor.exceptions import (
    APIError,
    ConversationError,
    MathTutorError,
    ProviderError,
    ProviderTimeoutError,
    ToolArgumentError,
)


class TestMathTutorError:
    def test_base_error(self):
        err = MathTutorError("something went wrong")
        assert str(err) == "something went wrong"
        assert err.details == {}

    def test_base_error_with_details(self):
        err = MathTutorError("failed", details={"key": "value"})
        assert err.details == {"key": "value"}


class TestToolArgumentError:
    def test_message_and_details(self):
        err = ToolArgumentError("get_chart", "labels: field required")
        assert str(err) == "Invalid arguments for tool 'get_chart': labels: field required"
        assert err.tool_name == "get_chart"
        assert err.details["tool_name"] == "get_chart"


class TestProviderErrors:
    def test_provider_error(self):
        err = ProviderError("ClaudeProvider", "rate limited")
        assert str(err) == "Provider 'ClaudeProvider' error: rate limited"
        assert err.provider_name == "ClaudeProvider"

    def test_timeout_is_provider_error(self):
        err = ProviderTimeoutError("ClaudeProvider", "request timed out")
        assert isinstance(err, ProviderError)


class TestConversationError:
    def test_round_index(self):
        err = ConversationError(2, "upstream closed")
        assert str(err) == "Round 2: upstream closed"
        assert err.round_index == 2
        assert err.details == {"round_index": 2}


class TestAPIError:
    def test_default_status(self):
        assert APIError("boom").status_code == 500

    def test_custom_status(self):
        err = APIError("bad", status_code=400)
        assert err.status_code == 400
        assert err.details["status_code"] == 400


@pytest.mark.parametrize("cls,args", [
    (ToolArgumentError, ("t", "m")),
    (ProviderError, ("p", "m")),
    (ConversationError, (0, "m")),
    (APIError, ("m",)),
])
def test_hierarchy(cls, args):
    assert isinstance(cls(*args), MathTutorError)
