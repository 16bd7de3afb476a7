"""b2proxy HTTP API."""

from b2proxy.api.main import create_app

__all__ = ["create_app"]
