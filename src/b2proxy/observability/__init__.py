"""b2proxy observability module.

Provides the optional OpenTelemetry tracing baseline.
"""

from b2proxy.observability.tracing import configure_tracing, is_tracing_enabled

__all__ = ["configure_tracing", "is_tracing_enabled"]
