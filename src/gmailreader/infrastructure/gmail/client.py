"""Async Gmail REST client: paginated listing plus multipart batch detail fetch."""

from __future__ import annotations

import json
import uuid
from email.parser import BytesParser
from typing import Any, Optional, Sequence
from urllib.parse import urlparse

import httpx
from loguru import logger

from gmailreader.application.ports.message_source import ListPage, MessageSource
from gmailreader.domain.errors import RemoteFetchError
from gmailreader.infrastructure.gmail.auth import TokenProvider, token_provider_from_settings
from gmailreader.infrastructure.settings import GmailReaderSettings

# Only what the record mapper needs; full bodies would not scale
DETAIL_FIELDS = "internalDate,id,snippet,payload/headers"


class GmailApiClient(MessageSource):
    """Gmail client for one mailbox."""

    def __init__(
        self,
        token_provider: TokenProvider,
        *,
        user_id: str = "me",
        api_base_url: str = "https://gmail.googleapis.com/gmail/v1",
        batch_url: str = "https://www.googleapis.com/batch/gmail/v1",
        page_size: int = 100,
        batch_size: int = 100,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self._tokens = token_provider
        self._user_id = user_id
        self._api_base_url = api_base_url.rstrip("/")
        self._api_path = urlparse(self._api_base_url).path
        self._batch_url = batch_url
        self._page_size = page_size
        self._batch_size = batch_size
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "GmailApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _auth_headers(self) -> dict[str, str]:
        token = await self._tokens.get_token()
        return {"Authorization": f"Bearer {token}"}

    async def list_messages(self, query: str, page_token: Optional[str] = None) -> ListPage:
        params: dict[str, Any] = {"q": query, "maxResults": self._page_size}
        if page_token:
            params["pageToken"] = page_token

        url = f"{self._api_base_url}/users/{self._user_id}/messages"
        try:
            resp = await self._http.get(url, params=params, headers=await self._auth_headers())
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"message listing failed: {e}") from e
        if resp.status_code >= 400:
            raise RemoteFetchError(
                f"message listing failed: HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        data = resp.json()
        ids = [m["id"] for m in data.get("messages") or [] if m.get("id")]
        return ListPage(ids=ids, next_page_token=data.get("nextPageToken") or None)

    async def batch_get_messages(self, ids: Sequence[str]) -> list[dict[str, Any]]:
        details: list[dict[str, Any]] = []
        for start in range(0, len(ids), self._batch_size):
            details.extend(await self._run_batch(ids[start:start + self._batch_size]))
        return details

    def _detail_path(self, message_id: str) -> str:
        return f"{self._api_path}/users/{self._user_id}/messages/{message_id}?fields={DETAIL_FIELDS}"

    async def _run_batch(self, ids: Sequence[str]) -> list[dict[str, Any]]:
        if not ids:
            return []
        boundary = f"batch_{uuid.uuid4().hex}"
        body = build_batch_body(boundary, [self._detail_path(i) for i in ids])
        headers = await self._auth_headers()
        headers["Content-Type"] = f"multipart/mixed; boundary={boundary}"

        logger.debug(f"Batch-fetching {len(ids)} message details")
        try:
            resp = await self._http.post(self._batch_url, content=body, headers=headers)
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"batch fetch failed: {e}") from e
        if resp.status_code >= 400:
            raise RemoteFetchError(
                f"batch fetch failed: HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )
        return parse_batch_response(resp.headers.get("content-type", ""), resp.content)


def build_batch_body(boundary: str, paths: Sequence[str]) -> bytes:
    parts = []
    for i, path in enumerate(paths):
        parts.append(
            f"--{boundary}\r\n"
            "Content-Type: application/http\r\n"
            f"Content-ID: <item{i}>\r\n"
            "\r\n"
            f"GET {path}\r\n"
            "\r\n"
        )
    parts.append(f"--{boundary}--\r\n")
    return "".join(parts).encode("utf-8")


def _split_http_response(raw: bytes) -> tuple[int, bytes]:
    text = raw.replace(b"\r\n", b"\n").lstrip(b"\n")
    head, _, body = text.partition(b"\n\n")
    status_line = head.split(b"\n", 1)[0].decode("latin-1")
    try:
        status = int(status_line.split()[1])
    except (IndexError, ValueError) as e:
        raise RemoteFetchError(f"malformed batch part status line: {status_line!r}") from e
    return status, body


def parse_batch_response(content_type: str, content: bytes) -> list[dict[str, Any]]:
    """Decode a multipart/mixed batch response into per-item JSON bodies."""
    if not content_type.lower().startswith("multipart/"):
        raise RemoteFetchError(f"unexpected batch response type: {content_type!r}")

    envelope = b"Content-Type: " + content_type.encode("latin-1") + b"\r\n\r\n" + content
    msg = BytesParser().parsebytes(envelope)
    if not msg.is_multipart():
        raise RemoteFetchError("batch response is not multipart")

    out: list[dict[str, Any]] = []
    for part in msg.get_payload():
        raw = part.get_payload(decode=True) or b""
        status, body = _split_http_response(raw)
        if status >= 400:
            raise RemoteFetchError(
                f"batch item failed: HTTP {status}: {body[:200].decode('utf-8', 'replace')}",
                status_code=status,
            )
        try:
            out.append(json.loads(body.decode("utf-8")))
        except ValueError as e:
            raise RemoteFetchError(f"batch item has invalid JSON body: {e}") from e
    return out


def gmail_client_from_settings(settings: GmailReaderSettings) -> GmailApiClient:
    return GmailApiClient(
        token_provider_from_settings(settings),
        user_id=settings.user_id,
        api_base_url=settings.api_base_url,
        batch_url=settings.batch_url,
        page_size=settings.page_size,
        batch_size=settings.batch_size,
        timeout=settings.http_timeout_seconds,
    )
