"""Chat notifications for scheduled runs."""

from src.notifications.config import NotifyConfig
from src.notifications.slack import SlackNotifier

__all__ = ["NotifyConfig", "SlackNotifier"]
