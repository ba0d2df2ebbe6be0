# src/gmailreader/infrastructure/__init__.py
"""Infrastructure layer - Gmail HTTP client, settings, scheduling and sinks."""

from gmailreader.infrastructure.settings import GmailReaderSettings, get_settings

__all__ = [
    "GmailReaderSettings",
    "get_settings",
]
