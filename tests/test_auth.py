import asyncio

import httpx
import pytest

from gmailreader.domain.errors import AuthError
from gmailreader.infrastructure.gmail.auth import (
    RefreshTokenProvider,
    StaticTokenProvider,
    token_provider_from_settings,
)
from gmailreader.infrastructure.settings import GmailReaderSettings


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_refresh_token_is_exchanged_once_and_cached():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.content.decode())
        return httpx.Response(200, json={"access_token": f"tok{len(calls)}", "expires_in": 3600})

    clock = Clock()
    provider = RefreshTokenProvider(
        client_id="cid",
        refresh_token="rt",
        client_secret="secret",
        http=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        clock=clock,
    )

    async def scenario():
        first = await provider.get_token()
        second = await provider.get_token()
        clock.now += 3600
        third = await provider.get_token()
        return first, second, third

    assert asyncio.run(scenario()) == ("tok1", "tok1", "tok2")
    assert "grant_type=refresh_token" in calls[0]
    assert "client_secret=secret" in calls[0]


def test_refresh_failure_raises_auth_error():
    provider = RefreshTokenProvider(
        client_id="cid",
        refresh_token="rt",
        http=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(400, json={"error": "invalid_grant"}))),
    )
    with pytest.raises(AuthError) as excinfo:
        asyncio.run(provider.get_token())
    assert excinfo.value.status_code == 400


def test_static_token_rejects_empty():
    with pytest.raises(AuthError):
        StaticTokenProvider("")


def test_provider_from_settings(monkeypatch):
    for name in ("GMAIL_ACCESS_TOKEN", "GMAIL_CLIENT_ID", "GMAIL_REFRESH_TOKEN"):
        monkeypatch.delenv(name, raising=False)

    static = token_provider_from_settings(GmailReaderSettings(_env_file=None, access_token="abc"))
    assert asyncio.run(static.get_token()) == "abc"

    refresh = token_provider_from_settings(
        GmailReaderSettings(_env_file=None, client_id="cid", refresh_token="rt")
    )
    assert isinstance(refresh, RefreshTokenProvider)

    with pytest.raises(AuthError):
        token_provider_from_settings(GmailReaderSettings(_env_file=None))
