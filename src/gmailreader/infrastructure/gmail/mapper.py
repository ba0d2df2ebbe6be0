from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from gmailreader.domain.entities.gmail_record import GmailRecord
from gmailreader.domain.errors import RemoteFetchError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

def internal_date_to_datetime(value: Any) -> datetime:
    # internalDate is a string of epoch milliseconds; avoid float rounding
    try:
        ms = int(value)
    except (TypeError, ValueError) as e:
        raise RemoteFetchError(f"invalid internalDate {value!r}") from e
    return EPOCH + timedelta(milliseconds=ms)

def find_header(detail: Mapping[str, Any], name: str) -> str:
    """Exact, case-sensitive header lookup; missing header -> ''."""
    payload = detail.get("payload") or {}
    for header in payload.get("headers") or []:
        if header.get("name") == name:
            return header.get("value") or ""
    return ""

def raw_detail_to_record(detail: Mapping[str, Any]) -> GmailRecord:
    return GmailRecord(
        id=str(detail.get("id") or ""),
        time=internal_date_to_datetime(detail.get("internalDate")),
        snippet=detail.get("snippet") or "",
        from_=find_header(detail, "From"),
        to=find_header(detail, "To"),
        subject=find_header(detail, "Subject"),
    )
