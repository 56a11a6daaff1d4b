"""Daily-Run Guard.

One ``app_settings`` row per task key holds the ISO date the task last ran.
``try_claim`` is a single conditional upsert, so among concurrent callers on
the same day exactly one sees True.
"""

import logging
from datetime import date, datetime

from src.core.dates import parse_iso_date
from src.core.errors import ValidationError
from src.storage.database import Database

logger = logging.getLogger(__name__)

RSS_PROCESSING = "last_rss_processing_run"
CAMPAIGN_CREATION = "last_campaign_creation_run"
SUBJECT_GENERATION = "last_subject_generation_run"
FINAL_SEND = "last_final_send_run"

TASK_KEYS: tuple[str, ...] = (
    RSS_PROCESSING,
    CAMPAIGN_CREATION,
    SUBJECT_GENERATION,
    FINAL_SEND,
)

# Reset value: earlier than any real run date.
RESET_SENTINEL = "1900-01-01"

_UPSERT_SQL = """
INSERT INTO app_settings (key, value, updated_at)
VALUES ($1, $2, NOW())
ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = NOW()
"""

_CLAIM_SQL = """
INSERT INTO app_settings (key, value, updated_at)
VALUES ($1, $2, NOW())
ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = NOW()
WHERE app_settings.value IS DISTINCT FROM EXCLUDED.value
RETURNING key
"""


def _check_key(task_key: str) -> str:
    if not isinstance(task_key, str) or not task_key.strip():
        raise ValidationError("task_key must be a non-empty string")
    return task_key


def _iso_day(today: str | date | datetime) -> str:
    return parse_iso_date(today).isoformat()


class DailyRunGuard:
    """Tracks the last run date per scheduled task."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def last_run(self, task_key: str) -> str | None:
        """Stored last-run date for ``task_key``, or None if never recorded."""
        return await self._db.fetchval(
            "SELECT value FROM app_settings WHERE key = $1", _check_key(task_key),
        )

    async def should_run(self, task_key: str, today: str | date | datetime) -> bool:
        """True unless the task is already recorded as run on ``today``."""
        day = _iso_day(today)
        stored = await self.last_run(task_key)
        if stored is None:
            return True
        return stored[:10] != day

    async def mark_ran(self, task_key: str, today: str | date | datetime) -> None:
        day = _iso_day(today)
        await self._db.execute(_UPSERT_SQL, _check_key(task_key), day)
        logger.info("Marked %s as run on %s", task_key, day)

    async def try_claim(self, task_key: str, today: str | date | datetime) -> bool:
        """Atomically check and mark the task for ``today``.

        Returns:
            True if this caller claimed the day, False if it was already run.
        """
        day = _iso_day(today)
        claimed = await self._db.fetchval(_CLAIM_SQL, _check_key(task_key), day)
        if claimed is None:
            logger.info("%s already ran on %s", task_key, day)
            return False
        logger.info("Claimed %s for %s", task_key, day)
        return True

    async def reset(self, task_key: str) -> None:
        """Force the next ``should_run`` / ``try_claim`` to succeed."""
        await self._db.execute(_UPSERT_SQL, _check_key(task_key), RESET_SENTINEL)
        logger.warning("Reset daily-run guard for %s", task_key)

    async def status(self, keys: tuple[str, ...] | list[str] = TASK_KEYS) -> dict[str, str | None]:
        """Last-run date for each key (None when never recorded)."""
        keys = [_check_key(k) for k in keys]
        rows = await self._db.fetch(
            "SELECT key, value FROM app_settings WHERE key = ANY($1::text[])", keys,
        )
        stored = {r["key"]: r["value"] for r in rows}
        return {k: stored.get(k) for k in keys}
