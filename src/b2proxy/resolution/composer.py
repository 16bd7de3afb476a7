"""Artifact composition: merges same-format documents page by page.

The orchestrator only sees compose(); the format itself sits behind the
Composer protocol so another page-oriented format can be added without
touching the resolution logic. PdfComposer is the only implementation.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from typing import Any, Protocol

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError, PdfStreamError

from b2proxy.errors import MergeError

logger = logging.getLogger(__name__)


class Composer(Protocol):
    """Capability needed to merge documents of one format."""

    @property
    def format_name(self) -> str: ...

    def new_document(self) -> Any: ...

    def load(self, data: bytes) -> Any: ...

    def page_count(self, document: Any) -> int: ...

    def append_pages_from(self, target: Any, source: Any) -> None: ...

    def serialize(self, document: Any) -> bytes: ...


class PdfComposer:
    """Composer for PDF documents backed by pypdf."""

    @property
    def format_name(self) -> str:
        return "PDF"

    def new_document(self) -> PdfWriter:
        return PdfWriter()

    def load(self, data: bytes) -> PdfReader:
        """Parse PDF bytes.

        Raises:
            MergeError: If the bytes are not a readable, unencrypted PDF.
        """
        try:
            reader = PdfReader(io.BytesIO(data))
            if reader.is_encrypted:
                raise MergeError("PDF is encrypted and cannot be merged")
            # Page tree errors surface lazily; force them here.
            len(reader.pages)
        except (PdfReadError, PdfStreamError) as e:
            raise MergeError(f"Failed to read PDF: {e}") from e
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise MergeError(f"Malformed PDF: {e}") from e
        return reader

    def page_count(self, document: PdfReader | PdfWriter) -> int:
        return len(document.pages)

    def append_pages_from(self, target: PdfWriter, source: PdfReader) -> None:
        for page in source.pages:
            target.add_page(page)

    def serialize(self, document: PdfWriter) -> bytes:
        buffer = io.BytesIO()
        document.write(buffer)
        return buffer.getvalue()


def compose(buffers: Sequence[bytes], composer: Composer | None = None) -> bytes:
    """Merge documents into one, preserving input order and page order.

    Args:
        buffers: Serialized documents in the order their pages should appear.
        composer: Format capability (defaults to PdfComposer).

    Returns:
        The merged document, serialized.

    Raises:
        MergeError: If any buffer cannot be loaded. No partial merge is returned.
    """
    if composer is None:
        composer = PdfComposer()

    output = composer.new_document()
    for index, data in enumerate(buffers):
        try:
            document = composer.load(data)
        except MergeError as e:
            logger.error("Error loading %s at position %d: %s", composer.format_name, index, e)
            raise
        composer.append_pages_from(output, document)

    logger.info(
        "Composed %d %s document(s) into %d page(s)",
        len(buffers),
        composer.format_name,
        composer.page_count(output),
    )
    return composer.serialize(output)
