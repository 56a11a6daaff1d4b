"""Slack incoming-webhook notifications for scheduled runs.

Delivery never raises: failures are logged and reported as False so a
notification problem cannot fail the run that triggered it.
"""

import logging
from datetime import date

import httpx

from src.notifications.config import NotifyConfig

logger = logging.getLogger(__name__)


class SlackNotifier:
    """Posts Block Kit messages to a Slack incoming webhook.

    Creates a new ``httpx.AsyncClient`` per call.
    """

    def __init__(self, config: NotifyConfig | None = None) -> None:
        self._config = config or NotifyConfig()

    @property
    def enabled(self) -> bool:
        return self._config.slack_enabled

    def _payload(self, title: str, text: str, context: str | None = None) -> dict:
        blocks: list[dict] = [
            {"type": "header", "text": {"type": "plain_text", "text": title}},
            {"type": "section", "text": {"type": "mrkdwn", "text": text}},
        ]
        if context:
            blocks.append({
                "type": "context",
                "elements": [{"type": "mrkdwn", "text": context}],
            })

        payload: dict = {"text": f"{title}\n{text}", "blocks": blocks}
        if self._config.slack_channel:
            payload["channel"] = self._config.slack_channel
        return payload

    async def send(self, title: str, text: str, context: str | None = None) -> bool:
        """Post one message. Returns True on a 2xx response."""
        if not self.enabled:
            logger.debug("Slack webhook not configured; dropping %r", title)
            return False

        url = self._config.slack_webhook_url.get_secret_value()
        payload = self._payload(title, text, context)
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout) as client:
                resp = await client.post(url, json=payload)
                if resp.is_success:
                    return True
                logger.warning(
                    "Slack webhook returned %d for %r", resp.status_code, title,
                )
                return False
        except httpx.TimeoutException:
            logger.warning("Slack webhook timed out for %r", title)
            return False
        except httpx.HTTPError as e:
            logger.warning("Slack webhook failed for %r: %s", title, e)
            return False

    def _review_link(self, campaign_id: str) -> str | None:
        if not self._config.dashboard_url:
            return None
        base = self._config.dashboard_url.rstrip("/")
        return f"Review: {base}/dashboard/campaigns/{campaign_id}"

    async def notify_selection_complete(
        self,
        campaign_id: str,
        campaign_date: date,
        candidates: int,
        selected: int,
        events_linked: int,
        errors: int = 0,
    ) -> bool:
        """Summary posted after a daily selection run."""
        if not self._config.rss_processing_updates_enabled:
            return False

        status = ":white_check_mark: completed" if not errors else f":warning: completed with {errors} error(s)"
        text = (
            f"*Campaign:* {campaign_date.isoformat()} ({status})\n"
            f"*Candidates:* {candidates}\n"
            f"*Articles selected:* {selected}\n"
            f"*Events linked:* {events_linked}"
        )
        return await self.send(
            "RSS processing complete", text, context=self._review_link(campaign_id),
        )

    async def notify_low_article_count(
        self,
        campaign_id: str,
        campaign_date: date,
        selected: int,
        threshold: int,
    ) -> bool:
        """Alert posted when a run selects fewer than ``threshold`` articles."""
        if not self._config.low_article_count_enabled:
            return False

        text = (
            f":rotating_light: Only *{selected}* article(s) selected for the "
            f"{campaign_date.isoformat()} newsletter (minimum {threshold}). "
            "Check the RSS feeds and ratings before the issue is reviewed."
        )
        return await self.send(
            "Low article count", text, context=self._review_link(campaign_id),
        )
