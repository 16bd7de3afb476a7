"""Backblaze B2 native API client.

Implements the four upstream operations the proxy needs:
- b2_authorize_account: basic-auth handshake for a bearer token and endpoints
- b2_list_file_versions: one page of a version listing
- b2_download_file_by_id: content download by version identity
- b2_delete_file_version: version deletion by identity and name

Every non-2xx response raises UpstreamError (AuthError for the handshake).
Network failures are wrapped as UpstreamError. No retries.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from b2proxy.errors import AuthError, UpstreamError
from b2proxy.upstream.models import ListCursor, UpstreamSession, VersionPage
from b2proxy.upstream.tracing import traced_upstream_operation

logger = logging.getLogger(__name__)

DEFAULT_AUTH_URL = "https://api.backblazeb2.com/b2api/v4/b2_authorize_account"
API_PREFIX = "/b2api/v4"
MAX_FILE_COUNT = 10000
DEFAULT_TIMEOUT_SECONDS = 60.0


class B2Client:
    """Thin client over the B2 native API.

    Holds no credentials: every call takes the UpstreamSession returned by
    authorize(), so one client can serve concurrent requests.
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        *,
        auth_url: str = DEFAULT_AUTH_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Optional httpx.Client for dependency injection (testing).
            auth_url: Full URL of the b2_authorize_account endpoint.
            timeout_seconds: Timeout for the internally created httpx.Client.
        """
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout_seconds)
        self._auth_url = auth_url

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._http.close()

    @traced_upstream_operation("authorize")
    def authorize(self, key_id: str | None, key: str | None) -> UpstreamSession:
        """Exchange an application key for a short-lived session.

        Args:
            key_id: Application key identifier.
            key: Application key secret.

        Returns:
            UpstreamSession bound to the returned token and endpoints.

        Raises:
            AuthError: If credentials are absent or the handshake is rejected.
        """
        if not key_id or not key:
            raise AuthError(
                "B2_APPLICATION_KEY_ID and B2_APPLICATION_KEY must both be configured"
            )

        try:
            response = self._http.get(self._auth_url, auth=(key_id, key))
        except httpx.RequestError as e:
            raise AuthError(f"B2 authorization failed: {e}") from e

        if not response.is_success:
            raise AuthError(
                f"B2 authorization failed: {response.status_code} {response.reason_phrase}"
            )

        try:
            data: dict[str, Any] = response.json()
            storage_api = data["apiInfo"]["storageApi"]
            return UpstreamSession(
                authorization_token=str(data["authorizationToken"]),
                api_url=str(storage_api["apiUrl"]).rstrip("/"),
                download_url=str(storage_api["downloadUrl"]).rstrip("/"),
                account_id=str(data.get("accountId", "")),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise AuthError(f"B2 authorization returned an unexpected payload: {e}") from e

    @traced_upstream_operation("list_file_versions")
    def list_page(
        self,
        session: UpstreamSession,
        *,
        container_id: str,
        path: str,
        cursor: ListCursor,
    ) -> VersionPage:
        """Fetch one page of file versions whose names start with ``path``.

        Returns:
            VersionPage with the raw entries and the cursor for the next page.

        Raises:
            UpstreamError: On a non-2xx response or network failure.
        """
        params: dict[str, str] = {
            "bucketId": container_id,
            "startFileName": cursor.start_name,
            "maxFileCount": str(MAX_FILE_COUNT),
            "prefix": path,
        }
        if cursor.start_id:
            params["startFileId"] = cursor.start_id

        response = self._request(
            "GET",
            f"{session.api_url}{API_PREFIX}/b2_list_file_versions",
            session,
            operation="list_file_versions",
            failure="Failed to list file versions",
            params=params,
        )
        try:
            data: dict[str, Any] = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Failed to list file versions: invalid JSON ({e})",
                operation="list_file_versions",
                status_code=response.status_code,
            ) from e

        next_name = data.get("nextFileName")
        next_cursor = (
            ListCursor(start_name=next_name, start_id=data.get("nextFileId"))
            if next_name
            else None
        )
        return VersionPage(entries=tuple(data.get("files") or ()), next_cursor=next_cursor)

    @traced_upstream_operation("download_file_by_id")
    def download(self, session: UpstreamSession, *, version_id: str) -> bytes:
        """Download the exact bytes of one version.

        Raises:
            UpstreamError: On a non-2xx response or network failure.
        """
        response = self._request(
            "GET",
            f"{session.download_url}{API_PREFIX}/b2_download_file_by_id",
            session,
            operation="download_file_by_id",
            failure=f"Failed to download file {version_id}",
            params={"fileId": version_id},
        )
        return response.content

    @traced_upstream_operation("delete_file_version")
    def delete_version(self, session: UpstreamSession, *, version_id: str, path: str) -> None:
        """Delete one specific version of ``path``.

        Raises:
            UpstreamError: On a non-2xx response or network failure.
        """
        self._request(
            "POST",
            f"{session.api_url}{API_PREFIX}/b2_delete_file_version",
            session,
            operation="delete_file_version",
            failure=f"Failed to delete file version {version_id}",
            json={"fileId": version_id, "fileName": path},
        )

    def _request(
        self,
        method: str,
        url: str,
        session: UpstreamSession,
        *,
        operation: str,
        failure: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue an authenticated request and fail on any non-2xx status."""
        headers = {"Authorization": session.authorization_token}
        try:
            response = self._http.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            raise UpstreamError(f"{failure}: {e}", operation=operation) from e

        if not response.is_success:
            raise UpstreamError(
                f"{failure}: {response.status_code} {response.reason_phrase}",
                operation=operation,
                status_code=response.status_code,
            )
        return response
