"""b2proxy FastAPI application factory.

This module provides the create_app() factory for bootstrapping the proxy.
"""

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from b2proxy import __version__
from b2proxy.api.errors import (
    generic_exception_handler,
    http_exception_handler,
    proxy_error_handler,
)
from b2proxy.api.middleware.request_id import RequestIdMiddleware
from b2proxy.api.routes.health import router as health_router
from b2proxy.api.routes.objects import router as objects_router
from b2proxy.config import ProxyConfig, load_proxy_config
from b2proxy.errors import ProxyError
from b2proxy.observability.tracing import configure_tracing, instrument_fastapi, instrument_httpx
from b2proxy.upstream.client import B2Client


def create_app(
    config: ProxyConfig | None = None,
    b2_client: B2Client | None = None,
) -> FastAPI:
    """Create and configure the b2proxy FastAPI application.

    This factory:
    - Stores the immutable configuration and the upstream client on app.state
    - Registers the request ID middleware
    - Registers exception handlers
    - Mounts the health router before the catch-all object router

    Args:
        config: Proxy configuration. If None, loaded from the environment.
        b2_client: Optional B2Client for testing. If None, one is created
            from the configuration and closed on shutdown.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = load_proxy_config()

    owns_client = b2_client is None
    if b2_client is None:
        b2_client = B2Client(
            auth_url=config.auth_url,
            timeout_seconds=config.http_timeout_seconds,
        )

    app = FastAPI(
        title="b2proxy",
        description="Read-through proxy for versioned Backblaze B2 objects",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.config = config
    app.state.b2_client = b2_client

    configure_tracing()
    instrument_httpx()

    app.add_middleware(RequestIdMiddleware)

    instrument_fastapi(app)

    @app.on_event("shutdown")
    def shutdown_event() -> None:
        """Release the upstream connection pool."""
        if owns_client:
            b2_client.close()

    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health_router)
    app.include_router(objects_router)

    return app
