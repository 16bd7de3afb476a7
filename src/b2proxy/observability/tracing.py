"""OpenTelemetry tracing for b2proxy.

Off unless B2PROXY_OTEL_ENABLED=1; while off, no OpenTelemetry module is
imported. Spans are exported over OTLP/HTTP, or kept in memory when
B2PROXY_OTEL_TEST_CAPTURE=1.

Environment Variables:
    B2PROXY_OTEL_ENABLED: "1"/"true" turns tracing on
    B2PROXY_OTEL_SERVICE_NAME: service.name resource attribute (default "b2proxy")
    B2PROXY_OTEL_EXPORTER_OTLP_ENDPOINT: OTLP/HTTP traces endpoint (optional)
    B2PROXY_OTEL_TEST_CAPTURE: "1" keeps spans in memory for tests
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan, SpanProcessor, TracerProvider

logger = logging.getLogger(__name__)

ENV_ENABLED = "B2PROXY_OTEL_ENABLED"
ENV_SERVICE_NAME = "B2PROXY_OTEL_SERVICE_NAME"
ENV_ENDPOINT = "B2PROXY_OTEL_EXPORTER_OTLP_ENDPOINT"
ENV_TEST_CAPTURE = "B2PROXY_OTEL_TEST_CAPTURE"

_tracer_provider: TracerProvider | None = None
_enabled: bool = False
_test_exporter: Any = None


def _env_flag(key: str) -> bool:
    return os.environ.get(key, "").strip().lower() in ("1", "true", "yes")


def is_tracing_enabled() -> bool:
    """Return True once configure_tracing() has enabled tracing."""
    return _enabled


def build_span_processor(*, test_capture: bool, endpoint: str | None) -> SpanProcessor:
    """Create the span processor for the configured export target.

    With ``test_capture`` spans go to an in-memory exporter that
    get_test_spans() reads; otherwise they are batched to OTLP/HTTP.
    """
    global _test_exporter

    from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor

    if test_capture:
        from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
            InMemorySpanExporter,
        )

        _test_exporter = InMemorySpanExporter()
        return SimpleSpanProcessor(_test_exporter)

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

    exporter = OTLPSpanExporter(endpoint=endpoint) if endpoint else OTLPSpanExporter()
    return BatchSpanProcessor(exporter)


def configure_tracing() -> bool:
    """Enable tracing when B2PROXY_OTEL_ENABLED is set.

    Idempotent. A failure to set up the SDK is logged and leaves tracing
    off; the proxy keeps serving.

    Returns:
        True if tracing is enabled, False otherwise.
    """
    global _tracer_provider, _enabled

    if not _env_flag(ENV_ENABLED):
        _enabled = False
        return False

    if _tracer_provider is not None:
        _enabled = True
        return True

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider

        service_name = os.environ.get(ENV_SERVICE_NAME, "").strip() or "b2proxy"
        test_capture = _env_flag(ENV_TEST_CAPTURE)

        provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
        provider.add_span_processor(
            build_span_processor(
                test_capture=test_capture,
                endpoint=os.environ.get(ENV_ENDPOINT, "").strip() or None,
            )
        )
        trace.set_tracer_provider(provider)
    except Exception as e:
        logger.error("Failed to configure OpenTelemetry tracing: %s", e)
        _enabled = False
        return False

    _tracer_provider = provider
    _enabled = True
    logger.info(
        "OpenTelemetry tracing configured: service=%s, exporter=%s",
        service_name,
        "in-memory" if test_capture else "otlp-http",
    )
    return True


def instrument_fastapi(app: Any) -> None:
    """Instrument a FastAPI app; no-op while tracing is off."""
    if not _enabled:
        return

    try:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(app, excluded_urls="health")
    except Exception as e:
        logger.warning("Failed to instrument FastAPI: %s", e)


def instrument_httpx() -> None:
    """Instrument httpx clients; no-op while tracing is off."""
    if not _enabled:
        return

    try:
        from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

        instrumentor = HTTPXClientInstrumentor()
        if not instrumentor.is_instrumented_by_opentelemetry:
            instrumentor.instrument()
    except Exception as e:
        logger.warning("Failed to instrument httpx: %s", e)


def get_test_spans() -> list[ReadableSpan]:
    """Spans captured in memory, or an empty list without test capture."""
    if _test_exporter is None:
        return []
    return list(_test_exporter.get_finished_spans())


def reset_tracing() -> None:
    """Disable tracing and clear captured spans.

    The global TracerProvider cannot be replaced once set, so the provider
    and test exporter are kept for later configure_tracing() calls.
    """
    global _enabled

    if _test_exporter is not None:
        _test_exporter.clear()
    _enabled = False
