"""OpenTelemetry tracing setup for mathtutor.

Initializes an OTLP exporter when OTEL_EXPORTER_OTLP_ENDPOINT is set and
the `otel` extra is installed. Otherwise spans go to the API's no-op
tracer provider and cost nothing.
"""

from __future__ import annotations

import os

from opentelemetry import trace

from mathtutor import __version__
from mathtutor.logging import get_logger

logger = get_logger("mathtutor.observability")

_initialized = False
_exporting = False


def init_tracing(
    endpoint: str | None = None,
    service_name: str | None = None,
) -> bool:
    """Initialize OpenTelemetry tracing.

    Args:
        endpoint: OTLP endpoint URL. Falls back to OTEL_EXPORTER_OTLP_ENDPOINT.
        service_name: Service name for traces. Falls back to OTEL_SERVICE_NAME.

    Returns:
        True if an exporter was installed, False if skipped (no endpoint or
        the SDK is not installed).
    """
    global _initialized, _exporting

    if _initialized:
        return _exporting

    _initialized = True

    endpoint = endpoint or os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        return False

    service_name = service_name or os.environ.get("OTEL_SERVICE_NAME", "mathtutor-api")

    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
    except ImportError:
        logger.warning("OTLP endpoint set but the otel extra is not installed; tracing disabled")
        return False

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    trace.set_tracer_provider(provider)
    _exporting = True
    return True


def get_tracer() -> trace.Tracer:
    """Get the mathtutor tracer (a no-op tracer until a provider is installed)."""
    return trace.get_tracer("mathtutor", __version__)


def shutdown() -> None:
    """Flush and shut down the tracer provider, if one was installed."""
    global _initialized, _exporting
    provider = trace.get_tracer_provider()
    if _exporting and hasattr(provider, "shutdown"):
        provider.shutdown()
    _initialized = False
    _exporting = False
