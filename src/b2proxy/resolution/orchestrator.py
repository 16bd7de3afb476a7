"""Resolution orchestrator: turns a path's stored versions into one response body.

Decision tree, given the upload versions of a path:
1. none -> NOT_FOUND
2. exactly one -> PASS_THROUGH of that version
3. several -> partition by fingerprint, remove duplicates (best effort), then
   - one survivor -> PASS_THROUGH of the survivor
   - several survivors, merge not requested -> PASS_THROUGH of survivors[0]
   - several survivors, merge requested -> MERGE of all survivors in order

Failed removals are logged and skipped: the duplicate stays in the store
and is retried on a later request. Every other failure propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from b2proxy.errors import UpstreamError
from b2proxy.resolution.composer import Composer, compose
from b2proxy.resolution.deduplicator import partition
from b2proxy.upstream.models import VersionRecord
from b2proxy.upstream.store import VersionStore

logger = logging.getLogger(__name__)

MERGEABLE_SUFFIX = ".pdf"


class ResolutionKind(str, Enum):
    """Terminal state of a resolution."""

    NOT_FOUND = "not_found"
    PASS_THROUGH = "pass_through"
    MERGE = "merge"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one logical path.

    Attributes:
        kind: Terminal state reached.
        body: Bytes to return to the client; None for NOT_FOUND.
        version_ids: Versions the body was built from, in output order.
    """

    kind: ResolutionKind
    body: bytes | None = None
    version_ids: tuple[str, ...] = ()

    @property
    def found(self) -> bool:
        return self.kind != ResolutionKind.NOT_FOUND


def is_mergeable(path: str) -> bool:
    """Return True if ``path`` names a document format that can be merged."""
    return path.lower().endswith(MERGEABLE_SUFFIX)


def remove_duplicates(store: VersionStore, duplicates: Sequence[VersionRecord]) -> list[str]:
    """Delete redundant versions, tolerating individual failures.

    Returns:
        Version ids whose deletion failed.
    """
    failed: list[str] = []
    for version in duplicates:
        try:
            store.remove(version.version_id, version.logical_path)
        except UpstreamError as e:
            logger.warning("Failed to delete version %s: %s", version.version_id, e)
            failed.append(version.version_id)
            continue
        logger.info("Deleted duplicate version: %s", version.version_id)
    return failed


def _pass_through(store: VersionStore, version: VersionRecord) -> Resolution:
    return Resolution(
        kind=ResolutionKind.PASS_THROUGH,
        body=store.fetch(version.version_id),
        version_ids=(version.version_id,),
    )


def resolve(
    store: VersionStore,
    path: str,
    *,
    merge: bool = False,
    composer: Composer | None = None,
) -> Resolution:
    """Resolve ``path`` to a single body.

    Args:
        store: Session-bound upstream operations for the path's bucket.
        path: Logical path within the bucket.
        merge: Whether distinct survivors should be composed into one document.
        composer: Format capability used when merging (defaults to PDF).

    Returns:
        Resolution describing the terminal state and its body.

    Raises:
        UpstreamError: If listing or downloading fails.
        MergeError: If a survivor cannot be loaded for composition.
    """
    versions = store.list_versions(path)
    logger.info("Found %d version(s) of %s", len(versions), path)

    if not versions:
        return Resolution(kind=ResolutionKind.NOT_FOUND)

    if len(versions) == 1:
        logger.info("Only one version found, downloading: %s", versions[0].version_id)
        return _pass_through(store, versions[0])

    result = partition(versions)
    survivors = result.survivors
    logger.info("Found %d unique version(s) by hash", len(survivors))

    remove_duplicates(store, result.to_delete)

    if len(survivors) == 1:
        logger.info(
            "One unique version after deduplication, downloading: %s",
            survivors[0].version_id,
        )
        return _pass_through(store, survivors[0])

    if not merge:
        logger.info(
            "Multiple versions but merge disabled, returning earliest: %s",
            survivors[0].version_id,
        )
        return _pass_through(store, survivors[0])

    logger.info("Downloading %d unique versions for merging", len(survivors))
    buffers = [store.fetch(version.version_id) for version in survivors]

    return Resolution(
        kind=ResolutionKind.MERGE,
        body=compose(buffers, composer),
        version_ids=tuple(version.version_id for version in survivors),
    )
