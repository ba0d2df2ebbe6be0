"""Fakes and builders shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo


from gmailreader.application.ports.message_source import ListPage
from gmailreader.domain.errors import RemoteFetchError

PACIFIC = ZoneInfo("US/Pacific")
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def epoch_ms(moment: datetime) -> int:
    return (moment - EPOCH) // timedelta(milliseconds=1)


def make_detail(
    msg_id: str,
    when: datetime,
    *,
    subject: str = "",
    sender: str = "alice@example.com",
    to: str = "bob@example.com",
    snippet: str = "",
) -> dict[str, Any]:
    return {
        "id": msg_id,
        "internalDate": str(epoch_ms(when)),
        "snippet": snippet or f"snippet {msg_id}",
        "payload": {
            "headers": [
                {"name": "From", "value": sender},
                {"name": "To", "value": to},
                {"name": "Subject", "value": subject or f"subject {msg_id}"},
            ]
        },
    }


class FakeMessageSource:
    """In-memory mailbox; ignores the query like a very coarse server filter."""

    def __init__(self, details: Sequence[dict[str, Any]] = (), page_size: int = 50, failures: int = 0) -> None:
        self.details = list(details)
        self.page_size = page_size
        self.failures = failures
        self.queries: list[str] = []
        self.list_calls: list[Optional[str]] = []
        self.batch_calls: list[list[str]] = []

    def add(self, *details: dict[str, Any]) -> None:
        self.details.extend(details)

    async def list_messages(self, query: str, page_token: Optional[str] = None) -> ListPage:
        if self.failures > 0:
            self.failures -= 1
            raise RemoteFetchError("listing unavailable", status_code=503)
        self.queries.append(query)
        self.list_calls.append(page_token)
        start = int(page_token) if page_token else 0
        ids = [d["id"] for d in self.details[start:start + self.page_size]]
        end = start + self.page_size
        next_token = str(end) if end < len(self.details) else None
        return ListPage(ids=ids, next_page_token=next_token)

    async def batch_get_messages(self, ids: Sequence[str]) -> list[dict[str, Any]]:
        self.batch_calls.append(list(ids))
        by_id = {d["id"]: d for d in self.details}
        # reversed: batch order is not guaranteed to match listing order
        return [by_id[i] for i in reversed(ids)]


class FakeScheduler:
    def __init__(self) -> None:
        self.scheduled: list[tuple[datetime, Any]] = []

    def schedule(self, at: datetime, callback) -> None:
        self.scheduled.append((at, callback))

    async def fire_next(self) -> datetime:
        at, callback = self.scheduled.pop(0)
        await callback()
        return at


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


