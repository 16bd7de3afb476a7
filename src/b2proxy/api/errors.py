"""b2proxy API error handling.

Global exception handlers:
- ProxyError: request-aborting pipeline failures; unmapped bucket prefixes
  and missing object keys become 404, everything else 500 carrying the
  error message
- HTTPException: Starlette HTTP exceptions (e.g., 405 from routing)
- Exception: Catch-all for unhandled exceptions (generic 500, no internals)
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from b2proxy.api.error_model import get_error_code_for_status, make_error_response
from b2proxy.config import BucketPrefixNotFoundError, MissingObjectPathError
from b2proxy.errors import ProxyError

logger = logging.getLogger(__name__)


async def proxy_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for ProxyError and its subclasses."""
    assert isinstance(exc, ProxyError)

    if isinstance(exc, BucketPrefixNotFoundError):
        return make_error_response(
            request,
            code="NOT_FOUND",
            message=exc.message,
            http_status=404,
            details={"available_prefixes": exc.available},
        )

    if isinstance(exc, MissingObjectPathError):
        return make_error_response(
            request,
            code="NOT_FOUND",
            message=exc.message,
            http_status=404,
        )

    logger.error(
        "Error processing request: %s: %s",
        type(exc).__name__,
        exc.message,
        extra={"request_id": getattr(request.state, "request_id", None)},
    )

    return make_error_response(
        request,
        code=exc.code,
        message=exc.message,
        http_status=500,
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for HTTPException."""
    assert isinstance(exc, StarletteHTTPException)

    code = get_error_code_for_status(exc.status_code)
    message = str(exc.detail) if exc.detail else f"HTTP {exc.status_code}"

    response = make_error_response(
        request,
        code=code,
        message=message,
        http_status=exc.status_code,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler for unhandled exceptions.

    Returns 500 with a generic message; the exception is logged, not exposed.
    """
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception: %s",
        type(exc).__name__,
        extra={"request_id": request_id},
    )

    return make_error_response(
        request,
        code="INTERNAL_ERROR",
        message="An internal error occurred",
        http_status=500,
    )
