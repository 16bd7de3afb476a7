"""Upstream data models.

Typed, immutable views of the records the object store returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

UPLOAD_ACTION = "upload"

# Reported as contentSha1 for large-file uploads, which carry no whole-file hash.
UNKNOWN_SHA1 = "none"


@dataclass(frozen=True)
class UpstreamSession:
    """Credentials and endpoints obtained from one authorization handshake.

    Attributes:
        authorization_token: Bearer token for subsequent calls.
        api_url: Control-plane base URL (listing, deletion).
        download_url: Data-plane base URL (downloads).
        account_id: Account the token belongs to.
    """

    authorization_token: str
    api_url: str
    download_url: str
    account_id: str

    def __repr__(self) -> str:
        return (
            f"UpstreamSession(account_id={self.account_id!r}, "
            f"api_url={self.api_url!r}, download_url={self.download_url!r})"
        )


@dataclass(frozen=True)
class VersionRecord:
    """One physical upload (or marker) of a logical path.

    Attributes:
        version_id: Store identity of this version (B2 fileId).
        logical_path: Object key the version belongs to.
        content_fingerprint: Content hash (B2 contentSha1), or None when the
            store reported no usable hash.
        byte_length: Size of the content in bytes.
        media_type_hint: Content type recorded at upload time, if any.
        created_order: Position in upstream enumeration order.
        action: "upload" for real uploads; other values are store markers.
    """

    version_id: str
    logical_path: str
    content_fingerprint: str | None
    byte_length: int
    media_type_hint: str | None
    created_order: int
    action: str

    @property
    def is_upload(self) -> bool:
        return self.action == UPLOAD_ACTION

    @property
    def has_fingerprint(self) -> bool:
        return self.content_fingerprint is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, created_order: int) -> VersionRecord:
        """Create a record from one entry of a list_file_versions response."""
        content_length_raw = data.get("contentLength")
        byte_length = int(content_length_raw) if content_length_raw is not None else 0

        sha1_raw = data.get("contentSha1")
        content_fingerprint = str(sha1_raw) if sha1_raw and sha1_raw != UNKNOWN_SHA1 else None

        content_type_raw = data.get("contentType")
        media_type_hint = str(content_type_raw) if content_type_raw else None

        return cls(
            version_id=str(data["fileId"]),
            logical_path=str(data["fileName"]),
            content_fingerprint=content_fingerprint,
            byte_length=byte_length,
            media_type_hint=media_type_hint,
            created_order=created_order,
            action=str(data.get("action") or ""),
        )


@dataclass(frozen=True)
class ListCursor:
    """Position to resume a version listing from."""

    start_name: str
    start_id: str | None = None


@dataclass(frozen=True)
class VersionPage:
    """One page of a version listing.

    Attributes:
        entries: Raw file entries in upstream order (unfiltered).
        next_cursor: Cursor for the following page, or None on the last page.
    """

    entries: tuple[dict[str, Any], ...]
    next_cursor: ListCursor | None
