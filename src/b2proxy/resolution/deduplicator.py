"""Partition version records by content fingerprint.

Rules:
- Records sharing a content fingerprint are byte-identical uploads.
- The first record of each fingerprint group, in enumeration order,
  survives; every later record of the group is marked for deletion.
- A record without a fingerprint cannot be proven identical to anything,
  so it always survives and is never marked for deletion.
- Survivors keep enumeration order.

Pure: no I/O, same input always gives the same partition.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from b2proxy.upstream.models import VersionRecord


@dataclass(frozen=True)
class Partition:
    """Result of deduplicating one path's versions."""

    survivors: tuple[VersionRecord, ...]
    to_delete: tuple[VersionRecord, ...]


def group_by_fingerprint(
    versions: Iterable[VersionRecord],
) -> dict[str, list[VersionRecord]]:
    """Group fingerprinted records by content fingerprint.

    Groups are returned in order of first appearance and each group keeps
    enumeration order, so index 0 of every group is its earliest record.
    Records without a fingerprint are left out.
    """
    groups: dict[str, list[VersionRecord]] = {}
    for version in versions:
        if version.content_fingerprint is None:
            continue
        groups.setdefault(version.content_fingerprint, []).append(version)
    return groups


def partition(versions: Sequence[VersionRecord]) -> Partition:
    """Split versions into survivors and redundant duplicates.

    Args:
        versions: Version records in enumeration order.

    Returns:
        Partition whose survivors and to_delete are disjoint and together
        contain every input record.
    """
    groups = group_by_fingerprint(versions)
    survivors: list[VersionRecord] = []
    to_delete: list[VersionRecord] = []

    for version in versions:
        if version.content_fingerprint is None:
            survivors.append(version)
        elif groups[version.content_fingerprint][0] is version:
            survivors.append(version)
        else:
            to_delete.append(version)

    return Partition(survivors=tuple(survivors), to_delete=tuple(to_delete))
