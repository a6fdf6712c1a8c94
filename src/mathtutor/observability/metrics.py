"""OpenTelemetry metrics for mathtutor.

Counters and histograms for tool calls and sandbox executions.
Instruments come from the global meter provider; until an SDK provider
is installed they are the OpenTelemetry API's no-ops.
"""

from __future__ import annotations

from opentelemetry import metrics

from mathtutor import __version__

_meter = None
_tool_calls_total = None
_executions_total = None
_execution_duration = None


def _ensure_meter() -> None:
    """Lazily create the meter and instruments."""
    global _meter, _tool_calls_total, _executions_total, _execution_duration

    if _meter is not None:
        return

    _meter = metrics.get_meter("mathtutor", __version__)
    _tool_calls_total = _meter.create_counter(
        "mathtutor.tool_calls.total",
        description="Total tool invocations dispatched",
        unit="1",
    )
    _executions_total = _meter.create_counter(
        "mathtutor.executions.total",
        description="Total sandbox executions",
        unit="1",
    )
    _execution_duration = _meter.create_histogram(
        "mathtutor.execution.duration_seconds",
        description="Sandbox execution duration in seconds",
        unit="s",
    )


def record_tool_call(*, tool_name: str, outcome: str) -> None:
    """Record a dispatched tool call. outcome is ok, error or unknown."""
    _ensure_meter()
    _tool_calls_total.add(
        1,
        {"mathtutor.tool_name": tool_name, "mathtutor.outcome": outcome},
    )


def record_execution(*, success: bool, reason: str, duration_seconds: float) -> None:
    """Record one sandbox execution and its duration."""
    _ensure_meter()
    attributes = {"mathtutor.success": str(success), "mathtutor.reason": reason}
    _executions_total.add(1, attributes)
    _execution_duration.record(duration_seconds, attributes)
