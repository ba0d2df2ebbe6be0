"""Access-token providers passed explicitly to the Gmail client."""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol

import httpx
from loguru import logger

from gmailreader.domain.errors import AuthError
from gmailreader.infrastructure.settings import GmailReaderSettings

# Refresh this many seconds before the token actually expires
TOKEN_EXPIRY_BUFFER_SECONDS = 60


class TokenProvider(Protocol):
    async def get_token(self) -> str: ...


class StaticTokenProvider:
    """Bearer token that never changes for the life of the run."""

    def __init__(self, token: str) -> None:
        if not token:
            raise AuthError("access token is empty")
        self._token = token

    async def get_token(self) -> str:
        return self._token


class RefreshTokenProvider:
    """Exchange an OAuth refresh token for access tokens, cached until expiry."""

    def __init__(
        self,
        *,
        client_id: str,
        refresh_token: str,
        client_secret: Optional[str] = None,
        token_url: str = "https://oauth2.googleapis.com/token",
        http: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._token_url = token_url
        self._http = http
        self._clock = clock
        self._access_token: Optional[str] = None
        self._expires_at = 0.0

    async def get_token(self) -> str:
        if self._access_token and self._clock() < self._expires_at - TOKEN_EXPIRY_BUFFER_SECONDS:
            return self._access_token

        data = {
            "grant_type": "refresh_token",
            "client_id": self._client_id,
            "refresh_token": self._refresh_token,
        }
        if self._client_secret:
            data["client_secret"] = self._client_secret

        try:
            if self._http is not None:
                resp = await self._http.post(self._token_url, data=data)
            else:
                async with httpx.AsyncClient(timeout=30) as client:
                    resp = await client.post(self._token_url, data=data)
        except httpx.HTTPError as e:
            raise AuthError(f"token exchange failed: {e}") from e

        if resp.status_code >= 400:
            logger.error(f"Token exchange error {resp.status_code}: {resp.text[:200]}")
            raise AuthError(f"token exchange failed: HTTP {resp.status_code}", status_code=resp.status_code)

        js = resp.json()
        access_token = js.get("access_token")
        if not access_token:
            raise AuthError("no access_token from token endpoint")
        self._access_token = access_token
        self._expires_at = self._clock() + int(js.get("expires_in") or 3600)
        logger.debug(f"Obtained access token, expires in {js.get('expires_in') or 3600}s")
        return access_token


def token_provider_from_settings(settings: GmailReaderSettings) -> TokenProvider:
    if settings.access_token is not None:
        return StaticTokenProvider(settings.access_token.get_secret_value())
    if settings.client_id and settings.refresh_token is not None:
        return RefreshTokenProvider(
            client_id=settings.client_id,
            refresh_token=settings.refresh_token.get_secret_value(),
            client_secret=settings.client_secret.get_secret_value() if settings.client_secret else None,
            token_url=settings.token_url,
        )
    raise AuthError("set GMAIL_ACCESS_TOKEN or GMAIL_CLIENT_ID + GMAIL_REFRESH_TOKEN")
