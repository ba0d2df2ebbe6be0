"""Domain types: time windows, poll state, records and errors."""

from gmailreader.domain.entities.gmail_record import GmailRecord
from gmailreader.domain.errors import (
    AuthError,
    ConfigurationError,
    FilterCompileError,
    GmailReaderError,
    RemoteFetchError,
)
from gmailreader.domain.time_range import UNBOUNDED, PollState, TimeRange, Unbounded

__all__ = [
    "GmailRecord",
    "TimeRange",
    "PollState",
    "Unbounded",
    "UNBOUNDED",
    "GmailReaderError",
    "ConfigurationError",
    "FilterCompileError",
    "RemoteFetchError",
    "AuthError",
]
