"""Error hierarchy for the reader."""

from __future__ import annotations


class GmailReaderError(Exception):
    """Base class for all reader errors."""


class ConfigurationError(GmailReaderError):
    """Conflicting, missing or invalid read options. Fatal, never retried."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class FilterCompileError(ConfigurationError):
    """A filter tree node that has no Gmail search equivalent."""

    def __init__(self, message: str) -> None:
        super().__init__("FILTER-COMPILE", message)


class RemoteFetchError(GmailReaderError):
    """Network or API failure while listing or batch-fetching messages."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(RemoteFetchError):
    """Access token could not be obtained."""
