"""Static file-extension to media-type table."""

from __future__ import annotations

from typing import Final

DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"

CONTENT_TYPES_BY_EXTENSION: Final[dict[str, str]] = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".txt": "text/plain",
}


def content_type_for(path: str) -> str:
    """Return the media type for ``path`` based on its extension (case-insensitive)."""
    basename = path.rsplit("/", 1)[-1].lower()
    _, dot, extension = basename.rpartition(".")
    if not dot:
        return DEFAULT_CONTENT_TYPE
    return CONTENT_TYPES_BY_EXTENSION.get(f".{extension}", DEFAULT_CONTENT_TYPE)
