"""Tests for content-fingerprint deduplication.

Tests cover:
- Survivor selection (first of each fingerprint group)
- Survivor ordering (first appearance)
- Coverage and disjointness of the partition
- Purity and idempotence
- Records without a fingerprint
"""

from __future__ import annotations

import pytest

from b2proxy.resolution.deduplicator import group_by_fingerprint, partition
from b2proxy.upstream.models import VersionRecord


def _versions(*fingerprints: str | None) -> list[VersionRecord]:
    return [
        VersionRecord(
            version_id=f"v{index}",
            logical_path="report.pdf",
            content_fingerprint=fingerprint,
            byte_length=10,
            media_type_hint="application/pdf",
            created_order=index,
            action="upload",
        )
        for index, fingerprint in enumerate(fingerprints)
    ]


def _ids(records: tuple[VersionRecord, ...] | list[VersionRecord]) -> list[str]:
    return [record.version_id for record in records]


class TestSurvivorSelection:
    """Test which records survive."""

    def test_identical_fingerprints_keep_oldest(self) -> None:
        """Three uploads of one content leave one survivor and two deletions."""
        result = partition(_versions("aaa", "aaa", "aaa"))

        assert _ids(result.survivors) == ["v0"]
        assert _ids(result.to_delete) == ["v1", "v2"]

    def test_distinct_fingerprints_keep_everything(self) -> None:
        """All-distinct content produces no deletions."""
        result = partition(_versions("aaa", "bbb", "ccc"))

        assert _ids(result.survivors) == ["v0", "v1", "v2"]
        assert result.to_delete == ()

    def test_survivors_follow_first_appearance(self) -> None:
        """Survivors are ordered by where their group first appears."""
        result = partition(_versions("bbb", "aaa", "bbb", "ccc", "aaa"))

        assert _ids(result.survivors) == ["v0", "v1", "v3"]
        assert _ids(result.to_delete) == ["v2", "v4"]

    def test_empty_input(self) -> None:
        """No versions yields an empty partition."""
        result = partition([])

        assert result.survivors == ()
        assert result.to_delete == ()


class TestPartitionProperties:
    """Test structural properties of the partition."""

    @pytest.mark.parametrize(
        "fingerprints",
        [
            ("a",),
            ("a", "a"),
            ("a", "b", "a", "b"),
            ("x", "y", "z"),
            ("a", "b", "b", "c", "a", "c", "c"),
        ],
    )
    def test_cover_and_disjoint(self, fingerprints: tuple[str, ...]) -> None:
        """survivors and to_delete are disjoint and together equal the input."""
        versions = _versions(*fingerprints)
        result = partition(versions)

        survivor_ids = set(_ids(result.survivors))
        delete_ids = set(_ids(result.to_delete))

        assert survivor_ids.isdisjoint(delete_ids)
        assert survivor_ids | delete_ids == set(_ids(versions))
        assert len(result.survivors) == len(set(fingerprints))

    def test_deterministic(self) -> None:
        """Same input always yields the same partition."""
        versions = _versions("a", "b", "a", "c", "b")

        assert partition(versions) == partition(versions)

    def test_idempotent_on_survivors(self) -> None:
        """Re-partitioning the survivors deletes nothing."""
        first = partition(_versions("a", "b", "a", "c", "b"))
        second = partition(first.survivors)

        assert second.to_delete == ()
        assert second.survivors == first.survivors

    def test_does_not_mutate_input(self) -> None:
        """partition leaves its input list untouched."""
        versions = _versions("a", "a", "b")
        snapshot = list(versions)

        partition(versions)

        assert versions == snapshot


class TestGroupByFingerprint:
    """Test fingerprint grouping."""

    def test_group_index_zero_is_earliest(self) -> None:
        """Each group keeps enumeration order."""
        groups = group_by_fingerprint(_versions("a", "b", "a", "a"))

        assert list(groups) == ["a", "b"]
        assert _ids(groups["a"]) == ["v0", "v2", "v3"]
        assert _ids(groups["b"]) == ["v1"]

    def test_unfingerprinted_records_are_not_grouped(self) -> None:
        groups = group_by_fingerprint(_versions(None, "a", None))

        assert list(groups) == ["a"]


class TestUnfingerprintedRecords:
    """Test records whose content hash is unknown (large-file uploads)."""

    def test_each_survives(self) -> None:
        """Two uploads with no fingerprint are never treated as duplicates."""
        result = partition(_versions(None, None))

        assert _ids(result.survivors) == ["v0", "v1"]
        assert result.to_delete == ()

    def test_mixed_with_fingerprinted(self) -> None:
        """Unfingerprinted records survive in place; hashed duplicates still go."""
        result = partition(_versions("a", None, "a", None, "b"))

        assert _ids(result.survivors) == ["v0", "v1", "v3", "v4"]
        assert _ids(result.to_delete) == ["v2"]
