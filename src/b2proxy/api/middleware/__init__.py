"""b2proxy API middleware."""

from b2proxy.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware

__all__ = ["REQUEST_ID_HEADER", "RequestIdMiddleware"]
