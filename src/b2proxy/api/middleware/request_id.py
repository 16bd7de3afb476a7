"""Request ID middleware for the b2proxy API.

Every response carries X-Request-Id. A client-supplied id is echoed when it
is short printable ASCII; otherwise a uuid4 is generated. Each request is
logged at DEBUG with its id, status and duration.
"""

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 128


def accept_request_id(value: str | None) -> str | None:
    """Return the usable form of a client-supplied request ID, or None."""
    if value is None:
        return None
    value = value.strip()
    if not value or len(value) > MAX_REQUEST_ID_LENGTH:
        return None
    if not (value.isascii() and value.isprintable()):
        return None
    return value


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to request.state and to the response headers."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = accept_request_id(request.headers.get(REQUEST_ID_HEADER))
        if request_id is None:
            request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        started = time.perf_counter()
        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.debug(
            "%s %s -> %d in %.1f ms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            extra={"request_id": request_id},
        )
        return response
