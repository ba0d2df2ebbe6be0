"""Reader settings using Pydantic Settings for configuration management."""

from datetime import timedelta
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GmailReaderSettings(BaseSettings):
    """Reader settings loaded from GMAIL_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GMAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Credentials (static token wins over the refresh flow)
    access_token: SecretStr | None = None
    client_id: str | None = None
    client_secret: SecretStr | None = None
    refresh_token: SecretStr | None = None
    token_url: str = "https://oauth2.googleapis.com/token"

    # Gmail API
    user_id: str = "me"
    api_base_url: str = "https://gmail.googleapis.com/gmail/v1"
    batch_url: str = "https://www.googleapis.com/batch/gmail/v1"
    page_size: int = Field(default=100, ge=1, le=500)
    batch_size: int = Field(default=100, ge=1, le=100)
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    # Polling
    timezone: str = "US/Pacific"
    poll_delay_seconds: float = Field(default=1.0, gt=0)
    fetch_retry_attempts: int = Field(default=5, ge=1)
    fetch_retry_max_wait_seconds: float = Field(default=30.0, ge=0)

    log_level: str = "INFO"

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown time zone: {value}") from e
        return value

    @computed_field
    @property
    def poll_delay(self) -> timedelta:
        """Default delay between poll cycles."""
        return timedelta(seconds=self.poll_delay_seconds)

    @property
    def zone(self) -> ZoneInfo:
        """Reference zone for day quantization of search bounds."""
        return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> GmailReaderSettings:
    """Get cached settings instance."""
    return GmailReaderSettings()
