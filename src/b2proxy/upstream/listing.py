"""Version enumeration over the paginated listing protocol.

The upstream listing matches by prefix, so every page is filtered down to
entries whose name equals the requested path exactly and whose action is
a real upload. Enumeration stops as soon as the listing reports no next
name, or a next name that is a different path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from b2proxy.upstream.client import B2Client
from b2proxy.upstream.models import (
    ListCursor,
    UpstreamSession,
    VersionPage,
    VersionRecord,
)

logger = logging.getLogger(__name__)

PageSupplier = Callable[[ListCursor], VersionPage]


def collect_versions(list_page: PageSupplier, exact_path: str) -> list[VersionRecord]:
    """Drive a page supplier until the listing moves past ``exact_path``.

    Args:
        list_page: Function returning the page that starts at a cursor.
        exact_path: Logical path whose versions are wanted.

    Returns:
        Upload records for ``exact_path`` in enumeration order, with
        ``created_order`` numbered from 0 across all pages.

    Raises:
        Whatever ``list_page`` raises; records gathered so far are discarded.
    """
    versions: list[VersionRecord] = []
    cursor: ListCursor | None = ListCursor(start_name=exact_path)
    pages = 0

    while cursor is not None:
        page = list_page(cursor)
        pages += 1

        for entry in page.entries:
            if entry.get("fileName") != exact_path:
                continue
            record = VersionRecord.from_dict(entry, created_order=len(versions))
            if record.is_upload:
                versions.append(record)

        next_cursor = page.next_cursor
        if next_cursor is None or next_cursor.start_name != exact_path:
            cursor = None
        else:
            cursor = next_cursor

    logger.debug("Listed %d page(s) for path with %d upload(s)", pages, len(versions))
    return versions


def enumerate_versions(
    client: B2Client,
    session: UpstreamSession,
    container_id: str,
    exact_path: str,
) -> list[VersionRecord]:
    """List every upload version of ``exact_path`` in ``container_id``.

    Raises:
        UpstreamError: If any page request fails.
    """

    def list_page(cursor: ListCursor) -> VersionPage:
        return client.list_page(
            session, container_id=container_id, path=exact_path, cursor=cursor
        )

    return collect_versions(list_page, exact_path)
