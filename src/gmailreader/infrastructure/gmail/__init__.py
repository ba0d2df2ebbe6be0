"""Gmail REST API adapter."""

from gmailreader.infrastructure.gmail.auth import (
    RefreshTokenProvider,
    StaticTokenProvider,
    TokenProvider,
    token_provider_from_settings,
)
from gmailreader.infrastructure.gmail.client import GmailApiClient, gmail_client_from_settings
from gmailreader.infrastructure.gmail.mapper import find_header, raw_detail_to_record

__all__ = [
    "GmailApiClient",
    "gmail_client_from_settings",
    "TokenProvider",
    "StaticTokenProvider",
    "RefreshTokenProvider",
    "token_provider_from_settings",
    "find_header",
    "raw_detail_to_record",
]
