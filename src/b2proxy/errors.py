"""b2proxy error types.

Every failure that aborts a request is a ProxyError subclass. The API layer
maps each subclass to a machine-readable error code; see
b2proxy.api.errors.
"""

from __future__ import annotations


class ProxyError(Exception):
    """Base exception for proxy failures.

    Attributes:
        message: Human-readable error message.
    """

    code = "PROXY_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthError(ProxyError):
    """Raised when upstream credentials are missing or rejected."""

    code = "AUTH_ERROR"


class ConfigError(ProxyError):
    """Raised when the proxy configuration is missing or invalid."""

    code = "CONFIG_ERROR"


class UpstreamError(ProxyError):
    """Raised when an upstream call fails or returns a non-2xx status.

    Attributes:
        operation: Upstream operation name (e.g., "list_file_versions").
        status_code: HTTP status returned by the store, or None when the
            request never produced a response (network failure).
    """

    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class MergeError(ProxyError):
    """Raised when a buffer cannot be loaded as the composable format."""

    code = "MERGE_ERROR"
