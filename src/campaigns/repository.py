"""Database repository for campaigns and their articles."""

import logging
from datetime import date
from typing import Any

from src.campaigns.schemas import Article, Campaign, CampaignStatus
from src.campaigns.transitions import validate_transition
from src.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from src.storage.database import Database

logger = logging.getLogger(__name__)

_ARTICLE_UPSERT_SQL = """
INSERT INTO articles (campaign_id, post_id, headline, body, rank)
VALUES ($1, $2, $3, $4, $5)
ON CONFLICT (campaign_id, post_id) DO UPDATE SET
    rank = EXCLUDED.rank,
    updated_at = NOW()
RETURNING *
"""


class CampaignRepository:
    """CRUD operations for newsletter campaigns and articles."""

    def __init__(self, database: Database) -> None:
        self._db = database

    # ── Campaigns ─────────────────────────────────────────

    async def get_by_id(self, campaign_id: str) -> Campaign | None:
        row = await self._db.fetchrow(
            "SELECT * FROM newsletter_campaigns WHERE id = $1", campaign_id,
        )
        return _row_to_campaign(row) if row else None

    async def get_by_date(self, issue_date: date) -> Campaign | None:
        row = await self._db.fetchrow(
            "SELECT * FROM newsletter_campaigns WHERE date = $1", issue_date,
        )
        return _row_to_campaign(row) if row else None

    async def require(self, campaign_id: str) -> Campaign:
        """Fetch a campaign or raise NotFoundError."""
        campaign = await self.get_by_id(campaign_id)
        if campaign is None:
            raise NotFoundError("Campaign", campaign_id)
        return campaign

    async def get_or_create_for_date(self, issue_date: date) -> tuple[Campaign, bool]:
        """Return the campaign for ``issue_date``, creating a draft if absent.

        Returns:
            (campaign, created) where created is False when it already existed.
        """
        row = await self._db.fetchrow(
            """
            INSERT INTO newsletter_campaigns (date, status)
            VALUES ($1, 'draft')
            ON CONFLICT (date) DO NOTHING
            RETURNING *
            """,
            issue_date,
        )
        if row is not None:
            logger.info("Created campaign %s for %s", row["id"], issue_date)
            return _row_to_campaign(row), True

        campaign = await self.get_by_date(issue_date)
        if campaign is None:
            # Deleted between the insert and the read.
            raise NotFoundError("Campaign", issue_date.isoformat())
        return campaign, False

    async def transition_status(
        self,
        campaign_id: str,
        to_status: CampaignStatus | str,
    ) -> Campaign:
        """Move a campaign to ``to_status`` if the transition table allows it.

        The update is conditional on the status read beforehand, so a
        concurrent change makes this call fail instead of overwriting it.

        Raises:
            NotFoundError: Campaign does not exist.
            InvalidTransitionError: Disallowed move or lost race.
        """
        campaign = await self.require(campaign_id)
        from_status, dst = validate_transition(campaign.status, to_status)

        row = await self._db.fetchrow(
            """
            UPDATE newsletter_campaigns
            SET status = $2, updated_at = NOW()
            WHERE id = $1 AND status = $3
            RETURNING *
            """,
            campaign_id, dst.value, from_status.value,
        )
        if row is None:
            raise InvalidTransitionError("campaign", from_status.value, dst.value)

        logger.info(
            "Campaign %s status %s -> %s", campaign_id, from_status.value, dst.value,
        )
        return _row_to_campaign(row)

    async def set_subject_line(self, campaign_id: str, subject_line: str) -> Campaign:
        subject_line = (subject_line or "").strip()
        if not subject_line:
            raise ValidationError("subject_line must not be empty")

        row = await self._db.fetchrow(
            """
            UPDATE newsletter_campaigns
            SET subject_line = $2, updated_at = NOW()
            WHERE id = $1
            RETURNING *
            """,
            campaign_id, subject_line,
        )
        if row is None:
            raise NotFoundError("Campaign", campaign_id)
        return _row_to_campaign(row)

    # ── Articles ──────────────────────────────────────────

    async def upsert_article(
        self,
        campaign_id: str,
        post_id: str,
        headline: str,
        body: str = "",
        rank: int | None = None,
    ) -> Article:
        """Ensure an article exists for ``(campaign_id, post_id)``.

        New articles start active. Existing ones only get their rank
        refreshed so editorial activate/deactivate decisions survive re-runs.
        """
        row = await self._db.fetchrow(
            _ARTICLE_UPSERT_SQL, campaign_id, post_id, headline, body, rank,
        )
        return _row_to_article(row)

    async def deactivate_articles_except(
        self,
        campaign_id: str,
        keep_post_ids: list[str],
    ) -> int:
        """Deactivate active articles whose post is not in ``keep_post_ids``.

        Returns:
            Number of articles deactivated.
        """
        result = await self._db.execute(
            """
            UPDATE articles
            SET is_active = FALSE, updated_at = NOW()
            WHERE campaign_id = $1
              AND is_active = TRUE
              AND NOT (post_id = ANY($2::uuid[]))
            """,
            campaign_id, keep_post_ids,
        )
        return _affected(result)

    async def list_articles(
        self,
        campaign_id: str,
        active_only: bool = False,
    ) -> list[Article]:
        sql = "SELECT * FROM articles WHERE campaign_id = $1"
        if active_only:
            sql += " AND is_active = TRUE"
        sql += " ORDER BY rank ASC NULLS LAST, created_at ASC"
        rows = await self._db.fetch(sql, campaign_id)
        return [_row_to_article(r) for r in rows]

    async def set_article_active(self, article_id: str, active: bool) -> Article:
        """Activate or deactivate an article.

        Raises:
            NotFoundError: Article does not exist.
        """
        row = await self._db.fetchrow(
            """
            UPDATE articles
            SET is_active = $2, updated_at = NOW()
            WHERE id = $1
            RETURNING *
            """,
            article_id, active,
        )
        if row is None:
            raise NotFoundError("Article", article_id)
        return _row_to_article(row)


def _affected(result: str) -> int:
    """Parse the row count from an asyncpg status string like ``UPDATE 3``."""
    try:
        return int(result.split()[-1])
    except (ValueError, IndexError, AttributeError):
        return 0


def _row_to_campaign(row: Any) -> Campaign:
    """Convert an asyncpg Record to a Campaign."""
    return Campaign(
        id=str(row["id"]),
        date=row["date"],
        status=CampaignStatus(row["status"]),
        subject_line=row.get("subject_line"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _row_to_article(row: Any) -> Article:
    """Convert an asyncpg Record to an Article."""
    return Article(
        id=str(row["id"]),
        campaign_id=str(row["campaign_id"]),
        post_id=str(row["post_id"]),
        headline=row["headline"],
        body=row.get("body") or "",
        rank=row.get("rank"),
        is_active=row["is_active"],
        created_at=row.get("created_at"),
    )
