"""Upstream object store access.

Wraps the Backblaze B2 native API: authorization handshake, paginated
version listing, download by version id and version deletion.
"""

from b2proxy.upstream.client import B2Client
from b2proxy.upstream.listing import collect_versions, enumerate_versions
from b2proxy.upstream.models import ListCursor, UpstreamSession, VersionPage, VersionRecord
from b2proxy.upstream.store import BucketStore, VersionStore

__all__ = [
    "B2Client",
    "BucketStore",
    "ListCursor",
    "UpstreamSession",
    "VersionPage",
    "VersionRecord",
    "VersionStore",
    "collect_versions",
    "enumerate_versions",
]
