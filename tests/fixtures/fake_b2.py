"""Fake B2 native API and PDF helpers for b2proxy tests.

Provides an in-memory fake of the B2 native API served through
httpx.MockTransport, so no test touches the network, and helpers that
build small PDFs whose pages are told apart by width.
"""

from __future__ import annotations

import base64
import hashlib
import io
import json
from typing import Any

import httpx
from pypdf import PdfReader, PdfWriter

AUTH_URL = "https://auth.b2.test/b2api/v4/b2_authorize_account"
API_URL = "https://api.b2.test"
DOWNLOAD_URL = "https://download.b2.test"
TEST_KEY_ID = "test-key-id"
TEST_KEY = "test-key-secret"
TEST_TOKEN = "test-auth-token"
TEST_ACCOUNT_ID = "acct-0001"


def make_pdf(*widths: float) -> bytes:
    """Build a PDF with one blank page per width, in order."""
    writer = PdfWriter()
    for width in widths:
        writer.add_blank_page(width=width, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def page_widths(data: bytes) -> list[float]:
    """Return the width of every page of a PDF, in page order."""
    return [float(page.mediabox.width) for page in PdfReader(io.BytesIO(data)).pages]


class FakeB2:
    """In-memory B2 native API.

    Files are listed sorted by name and, within a name, in insertion order,
    which is the order tests treat as chronological.
    """

    def __init__(self, page_size: int = 100) -> None:
        self.page_size = page_size
        self.files: list[dict[str, Any]] = []
        self.contents: dict[str, bytes] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_deletes: set[str] = set()
        self.fail_operations: dict[str, int] = {}
        self._next_id = 0

    def add(
        self,
        bucket_id: str,
        name: str,
        content: bytes,
        *,
        action: str = "upload",
        content_type: str = "application/pdf",
        content_sha1: str | None = None,
    ) -> str:
        """Store a version and return its file id.

        ``content_sha1`` overrides the computed hash, e.g. "none" as B2 reports
        for large-file uploads.
        """
        self._next_id += 1
        file_id = f"file-{self._next_id:04d}"
        self.files.append(
            {
                "fileId": file_id,
                "fileName": name,
                "bucketId": bucket_id,
                "contentSha1": content_sha1 or hashlib.sha1(content).hexdigest(),
                "contentLength": len(content),
                "contentType": content_type,
                "action": action,
            }
        )
        self.contents[file_id] = content
        return file_id

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [args for op, args in self.calls if op == operation]

    def handler(self, request: httpx.Request) -> httpx.Response:
        if str(request.url).startswith(AUTH_URL):
            return self._authorize(request)

        operation = request.url.path.rsplit("/", 1)[-1]
        if request.method == "POST":
            args: dict[str, Any] = json.loads(request.content)
        else:
            args = dict(request.url.params)
        self.calls.append((operation, args))

        if request.headers.get("Authorization") != TEST_TOKEN:
            return httpx.Response(401, json={"code": "unauthorized"})
        if operation in self.fail_operations:
            return httpx.Response(self.fail_operations[operation], json={"code": "failed"})

        if operation == "b2_list_file_versions":
            return self._list(args)
        if operation == "b2_download_file_by_id":
            return self._download(args)
        if operation == "b2_delete_file_version":
            return self._delete(args)
        return httpx.Response(404)

    def _authorize(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(("b2_authorize_account", {}))
        expected = base64.b64encode(f"{TEST_KEY_ID}:{TEST_KEY}".encode()).decode()
        if request.headers.get("Authorization") != f"Basic {expected}":
            return httpx.Response(401, json={"code": "bad_auth_token"})
        return httpx.Response(
            200,
            json={
                "accountId": TEST_ACCOUNT_ID,
                "authorizationToken": TEST_TOKEN,
                "apiInfo": {"storageApi": {"apiUrl": API_URL, "downloadUrl": DOWNLOAD_URL}},
            },
        )

    def _list(self, args: dict[str, Any]) -> httpx.Response:
        candidates = sorted(
            (
                f
                for f in self.files
                if f["bucketId"] == args["bucketId"]
                and f["fileName"].startswith(args.get("prefix", ""))
            ),
            key=lambda f: f["fileName"],
        )

        start = len(candidates)
        for index, entry in enumerate(candidates):
            if "startFileId" in args:
                if entry["fileId"] == args["startFileId"]:
                    start = index
                    break
            elif entry["fileName"] >= args["startFileName"]:
                start = index
                break

        page = candidates[start : start + self.page_size]
        following = candidates[start + self.page_size : start + self.page_size + 1]
        return httpx.Response(
            200,
            json={
                "files": page,
                "nextFileName": following[0]["fileName"] if following else None,
                "nextFileId": following[0]["fileId"] if following else None,
            },
        )

    def _download(self, args: dict[str, Any]) -> httpx.Response:
        content = self.contents.get(args["fileId"])
        if content is None:
            return httpx.Response(404, json={"code": "not_found"})
        return httpx.Response(200, content=content)

    def _delete(self, args: dict[str, Any]) -> httpx.Response:
        file_id = args["fileId"]
        if file_id in self.fail_deletes:
            return httpx.Response(500, json={"code": "internal_error"})
        self.files = [f for f in self.files if f["fileId"] != file_id]
        self.contents.pop(file_id, None)
        return httpx.Response(200, json={"fileId": file_id, "fileName": args["fileName"]})
