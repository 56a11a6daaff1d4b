"""
Daily selection job configuration.

All settings can be overridden via environment variables prefixed with
SELECTION_.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SelectionConfig(BaseSettings):
    """
    Configuration for the daily article selection run.

    Example:
        SELECTION_TOP_N=12
        SELECTION_WINDOW_HOURS=36
        SELECTION_EVALUATE_UNRATED=false
        SELECTION_DEDUPLICATE=false
    """

    model_config = SettingsConfigDict(
        env_prefix="SELECTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    top_n: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Maximum number of articles selected per campaign",
    )
    window_hours: int = Field(
        default=24,
        ge=1,
        le=24 * 14,
        description="Recency window of the content snapshot, ending at the close of the target day",
    )
    min_articles_alert: int = Field(
        default=7,
        ge=0,
        description="Send a low-article alert when fewer articles are selected",
    )
    evaluate_unrated: bool = Field(
        default=True,
        description="Rate unrated snapshot items with the content evaluator when it is configured",
    )
    deduplicate: bool = Field(
        default=True,
        description="Drop snapshot items the content evaluator groups as the same story",
    )
    populate_events: bool = Field(
        default=True,
        description="Attach the campaign's event window after selection",
    )
    notify: bool = Field(
        default=True,
        description="Post a chat notification when the run finishes",
    )
