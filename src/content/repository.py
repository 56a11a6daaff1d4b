"""Database repositories for ingested content items and their duplicate groups."""

import logging
from datetime import datetime
from typing import Any

from src.content.schemas import ContentItem, DuplicateGroup
from src.rating.schemas import Rating
from src.storage.database import Database

logger = logging.getLogger(__name__)

# LEFT JOIN keeps unrated items in the snapshot; the selector drops them.
# Posts already recorded as duplicates of another post are left out.
_SNAPSHOT_SQL = """
SELECT
    p.id, p.title, p.body, p.published_at, p.feed_name,
    p.created_at, p.campaign_id,
    r.interest_level, r.local_relevance, r.community_impact,
    r.ai_reasoning, r.created_at AS rated_at
FROM rss_posts p
LEFT JOIN post_ratings r ON r.post_id = p.id
WHERE p.created_at >= $1 AND p.created_at < $2
  AND NOT EXISTS (SELECT 1 FROM duplicate_posts d WHERE d.post_id = p.id)
ORDER BY p.created_at ASC, p.id ASC
"""

_INSERT_GROUP_SQL = """
INSERT INTO duplicate_groups (campaign_id, primary_post_id, topic_signature)
VALUES ($1, $2, $3)
RETURNING id
"""

_INSERT_DUPLICATE_SQL = """
INSERT INTO duplicate_posts (group_id, post_id, similarity_score)
VALUES ($1, $2, $3)
ON CONFLICT (post_id) DO NOTHING
"""

DEFAULT_SIMILARITY = 0.8


class ContentRepository:
    """Read/write operations for content items."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get_snapshot(
        self,
        since: datetime,
        until: datetime,
        weights: tuple[float, float, float] | None = None,
    ) -> list[ContentItem]:
        """Items ingested in ``[since, until)`` with their ratings joined.

        Ordered by ingestion time so equal-score ties resolve to the
        earlier item downstream.
        """
        rows = await self._db.fetch(_SNAPSHOT_SQL, since, until)
        return [_row_to_item(r, with_rating=True, weights=weights) for r in rows]

    async def assign_to_campaign(self, item_ids: list[str], campaign_id: str) -> int:
        """Associate items with a campaign. Returns the number of rows updated."""
        if not item_ids:
            return 0
        result = await self._db.execute(
            "UPDATE rss_posts SET campaign_id = $2 WHERE id = ANY($1::uuid[])",
            item_ids, campaign_id,
        )
        try:
            return int(result.split()[-1])
        except (ValueError, IndexError):
            return 0


class DuplicateRepository:
    """Stores duplicate-story groups found among snapshot posts."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def record_group(
        self,
        campaign_id: str,
        items: list[ContentItem],
        group: DuplicateGroup,
        similarity_score: float = DEFAULT_SIMILARITY,
    ) -> str:
        """
        Store one group and its duplicate posts in a single transaction.

        Args:
            campaign_id: Campaign whose run found the group.
            items: The item list ``group`` indexes into.
            group: Primary and duplicate positions within ``items``.
            similarity_score: Score stored on each duplicate post.

        Returns:
            Id of the new ``duplicate_groups`` row. A post already listed in
            an earlier group keeps that membership.
        """
        primary_id = items[group.primary_index].id
        duplicate_ids = [items[i].id for i in group.duplicate_indices]

        async with self._db.transaction() as conn:
            group_id = await conn.fetchval(
                _INSERT_GROUP_SQL, campaign_id, primary_id, group.topic_signature,
            )
            await conn.executemany(
                _INSERT_DUPLICATE_SQL,
                [(group_id, post_id, similarity_score) for post_id in duplicate_ids],
            )

        logger.info(
            "Recorded duplicate group %s for campaign %s: primary=%s duplicates=%d",
            group_id, campaign_id, primary_id, len(duplicate_ids),
        )
        return str(group_id)


def _row_to_item(
    row: Any,
    with_rating: bool = False,
    weights: tuple[float, float, float] | None = None,
) -> ContentItem:
    """Convert an asyncpg Record to a ContentItem."""
    rating = None
    if with_rating and row.get("interest_level") is not None:
        rating = Rating(
            post_id=str(row["id"]),
            interest_level=row["interest_level"],
            local_relevance=row["local_relevance"],
            community_impact=row["community_impact"],
            weights=weights,
            ai_reasoning=row.get("ai_reasoning"),
            created_at=row.get("rated_at"),
        )

    campaign_id = row.get("campaign_id")
    return ContentItem(
        id=str(row["id"]),
        title=row["title"],
        body=row.get("body") or "",
        published_at=row.get("published_at"),
        feed_name=row.get("feed_name") or "",
        created_at=row.get("created_at"),
        campaign_id=str(campaign_id) if campaign_id else None,
        rating=rating,
    )
