"""Pytest configuration and fixtures for b2proxy tests.

Upstream calls go to an in-memory fake of the B2 native API through
httpx.MockTransport; no test touches the network.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from b2proxy.observability.tracing import reset_tracing
from b2proxy.upstream.client import B2Client
from tests.fixtures.fake_b2 import AUTH_URL, FakeB2, make_pdf


@pytest.fixture(autouse=True)
def disable_tracing(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep OpenTelemetry off unless a test enables it explicitly."""
    monkeypatch.delenv("B2PROXY_OTEL_ENABLED", raising=False)
    reset_tracing()


@pytest.fixture
def fake_b2() -> FakeB2:
    """Empty fake object store."""
    return FakeB2()


@pytest.fixture
def b2_client(fake_b2: FakeB2) -> B2Client:
    """B2Client wired to the fake store."""
    http_client = httpx.Client(transport=httpx.MockTransport(fake_b2.handler))
    return B2Client(http_client=http_client, auth_url=AUTH_URL)


@pytest.fixture
def pdf() -> Callable[..., bytes]:
    """Factory for PDFs with one blank page per given width."""
    return make_pdf
