"""OpenTelemetry tracing for upstream object store calls.

Security:
    - Never export bearer tokens or credentials in span attributes
    - Object paths are exported only as SHA256 hashes
"""

from __future__ import annotations

import functools
import hashlib
import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

from b2proxy.observability.tracing import is_tracing_enabled

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def hash_path(path: str) -> str:
    """Return the SHA256 hex digest of an object path for span attributes."""
    return hashlib.sha256(path.encode("utf-8")).hexdigest()


def traced_upstream_operation(operation: str) -> Callable[[F], F]:
    """Decorator to trace upstream operations with OpenTelemetry.

    The wrapped callable may receive ``path``, ``version_id`` and
    ``container_id`` keyword arguments; those are attached to the span
    (path hashed). Errors mark the span and are re-raised unchanged.

    Args:
        operation: Operation name (e.g., "authorize", "list_file_versions").
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if not is_tracing_enabled():
                return func(*args, **kwargs)

            try:
                from opentelemetry import trace
            except ImportError:
                return func(*args, **kwargs)

            tracer = trace.get_tracer("b2proxy.upstream")
            with tracer.start_as_current_span(f"b2proxy.upstream.{operation}") as span:
                span.set_attribute("upstream.operation", operation)
                path = kwargs.get("path")
                if path:
                    span.set_attribute("b2proxy.object_path_sha256", hash_path(path))
                if kwargs.get("version_id"):
                    span.set_attribute("b2proxy.version_id", kwargs["version_id"])
                if kwargs.get("container_id"):
                    span.set_attribute("b2proxy.container_id", kwargs["container_id"])

                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    span.set_attribute("error", True)
                    span.set_attribute("error.type", type(e).__name__)
                    status_code = getattr(e, "status_code", None)
                    if status_code is not None:
                        span.set_attribute("http.status_code", status_code)
                    raise

        return cast(F, wrapper)

    return decorator
