"""Session-bound view of one bucket.

Binds a B2Client, an UpstreamSession and a bucket id together so the
resolution pipeline can list, fetch and remove versions without handling
credentials itself. Created per request and discarded with the session.
"""

from __future__ import annotations

from typing import Protocol

from b2proxy.upstream.client import B2Client
from b2proxy.upstream.listing import enumerate_versions
from b2proxy.upstream.models import UpstreamSession, VersionRecord


class VersionStore(Protocol):
    """Upstream operations the resolution pipeline depends on."""

    def list_versions(self, path: str) -> list[VersionRecord]: ...

    def fetch(self, version_id: str) -> bytes: ...

    def remove(self, version_id: str, path: str) -> None: ...


class BucketStore:
    """VersionStore backed by the B2 native API."""

    def __init__(self, client: B2Client, session: UpstreamSession, container_id: str) -> None:
        self._client = client
        self._session = session
        self.container_id = container_id

    def list_versions(self, path: str) -> list[VersionRecord]:
        return enumerate_versions(self._client, self._session, self.container_id, path)

    def fetch(self, version_id: str) -> bytes:
        return self._client.download(self._session, version_id=version_id)

    def remove(self, version_id: str, path: str) -> None:
        self._client.delete_version(self._session, version_id=version_id, path=path)
