"""Object serving endpoints.

GET resolves every stored version of the requested path (deduplicating and,
for PDFs with merging enabled, composing them) and returns the bytes with
caching headers. HEAD reports the first listed version's metadata only.

A fresh upstream session is authorized for every request.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse

from b2proxy.config import BucketTarget, ProxyConfig
from b2proxy.content_types import DEFAULT_CONTENT_TYPE, content_type_for
from b2proxy.resolution.orchestrator import is_mergeable, resolve
from b2proxy.upstream.client import B2Client
from b2proxy.upstream.store import BucketStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Objects"])

BANNER = "Backblaze B2 Proxy"


def _normalize_path(full_path: str) -> str:
    return full_path.strip("/")


def _open_store(request: Request, target: BucketTarget) -> BucketStore:
    """Authorize a new upstream session and bind it to the target bucket."""
    config: ProxyConfig = request.app.state.config
    client: B2Client = request.app.state.b2_client
    session = client.authorize(config.key_id, config.key)
    return BucketStore(client, session, target.bucket_id)


def content_disposition(filename: str) -> str:
    """Build an inline Content-Disposition value for any filename.

    The quoted ``filename`` parameter is an ASCII fallback with quotes and
    backslashes escaped; names outside ASCII also get an RFC 6266
    ``filename*`` parameter carrying the UTF-8 name percent-encoded.
    """
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace("\\", "\\\\").replace('"', '\\"')
    value = f'inline; filename="{fallback}"'
    if not filename.isascii():
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value


def build_object_headers(path: str, config: ProxyConfig) -> dict[str, str]:
    """Headers sent with every object body."""
    filename = path.rsplit("/", 1)[-1]
    return {
        "Content-Disposition": content_disposition(filename),
        "Cache-Control": f"public, max-age={config.browser_cache_ttl}",
        "CDN-Cache-Control": f"public, max-age={config.cdn_cache_ttl}",
    }


@router.head("/{full_path:path}", include_in_schema=False)
def head_object(full_path: str, request: Request) -> Response:
    """Report Content-Type and Content-Length without a body.

    Performs no deduplication or merging.
    """
    path = _normalize_path(full_path)
    if not path:
        return Response(status_code=200, media_type="text/plain")

    config: ProxyConfig = request.app.state.config
    target = config.resolve_bucket(path)
    store = _open_store(request, target)

    versions = store.list_versions(target.path)
    if not versions:
        return Response(status_code=404)

    first_listed = versions[0]
    return Response(
        status_code=200,
        headers={
            "Content-Type": first_listed.media_type_hint or DEFAULT_CONTENT_TYPE,
            "Content-Length": str(first_listed.byte_length),
        },
    )


@router.get("/{full_path:path}")
def get_object(full_path: str, request: Request) -> Response:
    """Serve the resolved bytes of a logical path."""
    path = _normalize_path(full_path)
    if not path:
        return PlainTextResponse(BANNER)

    config: ProxyConfig = request.app.state.config
    target = config.resolve_bucket(path)
    store = _open_store(request, target)

    merge = config.merge_pdf_versions and is_mergeable(target.path)
    resolution = resolve(store, target.path, merge=merge)

    if not resolution.found:
        return Response(status_code=404)

    logger.info(
        "Serving %s as %s from %d version(s)",
        target.path,
        resolution.kind.value,
        len(resolution.version_ids),
    )

    return Response(
        content=resolution.body,
        status_code=200,
        media_type=content_type_for(target.path),
        headers=build_object_headers(target.path, config),
    )
