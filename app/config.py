"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_env: str = Field(
        default="development",
        description="Deployment environment name (development, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level applied when the application starts",
    )
    app_timezone: str = Field(
        default="America/Sao_Paulo",
        description="Timezone used to format dates shown to users",
    )
    app_url: str = Field(
        default="https://growspace.app",
        description="Public application URL linked from transactional emails",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    notification_recipient: str | None = Field(
        default=None,
        description="Fixed recipient for every notification email (overrides user lookup)",
    )
    notification_batch_size: int = Field(
        default=50,
        description="Maximum number of pending notifications processed per batch",
        gt=0,
    )
    email_send_delay_ms: int = Field(
        default=600,
        description="Pause between consecutive sends to respect the provider rate limit",
        ge=0,
    )
    overdue_after_days: int = Field(
        default=5,
        description="Age in days after which an open reminder is escalated to overdue",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        if self.notification_recipient and "@" not in self.notification_recipient:
            raise ValueError("NOTIFICATION_RECIPIENT must be a valid email address")
        return self

    @property
    def email_enabled(self) -> bool:
        return bool(self.sendgrid_api_key and self.sendgrid_sender)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
