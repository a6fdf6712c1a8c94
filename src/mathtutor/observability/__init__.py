"""mathtutor Observability: OpenTelemetry tracing and metrics.

Exporting is opt-in via OTEL_EXPORTER_OTLP_ENDPOINT. Without it,
all tracing/metrics calls go to the API's no-op providers.
"""

from mathtutor.observability.metrics import record_execution, record_tool_call
from mathtutor.observability.tracing import get_tracer, init_tracing, shutdown

__all__ = [
    "init_tracing",
    "get_tracer",
    "shutdown",
    "record_execution",
    "record_tool_call",
]
