"""
Chat notification configuration.

All settings can be overridden via environment variables prefixed with
NOTIFY_.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotifyConfig(BaseSettings):
    """
    Configuration for Slack notifications sent by scheduled runs.

    Example:
        NOTIFY_SLACK_WEBHOOK_URL=https://hooks.slack.com/services/...
        NOTIFY_LOW_ARTICLE_COUNT_ENABLED=false
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    slack_webhook_url: SecretStr | None = Field(
        default=None,
        description="Slack incoming webhook URL (unset disables notifications)",
    )
    slack_channel: str | None = Field(
        default=None,
        description="Channel override for the webhook",
    )
    timeout: float = Field(default=10.0, gt=0.0, le=60.0)
    rss_processing_updates_enabled: bool = Field(
        default=True,
        description="Post a summary after each daily selection run",
    )
    low_article_count_enabled: bool = Field(
        default=True,
        description="Post an alert when a run selects too few articles",
    )
    dashboard_url: str | None = Field(
        default=None,
        description="Base URL of the operations console, linked from messages",
    )

    @property
    def slack_enabled(self) -> bool:
        return self.slack_webhook_url is not None
