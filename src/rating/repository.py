"""Database repository for the post_ratings table."""

import logging
from typing import Any

from src.rating.schemas import Rating
from src.storage.database import Database

logger = logging.getLogger(__name__)

_UPSERT_SQL = """
INSERT INTO post_ratings (
    post_id, interest_level, local_relevance, community_impact,
    total_score, ai_reasoning
) VALUES ($1, $2, $3, $4, $5, $6)
ON CONFLICT (post_id) DO UPDATE SET
    interest_level = EXCLUDED.interest_level,
    local_relevance = EXCLUDED.local_relevance,
    community_impact = EXCLUDED.community_impact,
    total_score = EXCLUDED.total_score,
    ai_reasoning = EXCLUDED.ai_reasoning
RETURNING *
"""


class RatingRepository:
    """CRUD operations for post ratings.

    ``total_score`` is written as a cache for SQL ordering only; readers
    rebuild the total from components via ``Rating.total_score``.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get_by_post_id(
        self,
        post_id: str,
        weights: tuple[float, float, float] | None = None,
    ) -> Rating | None:
        """Fetch the rating of one content item, or None if unrated."""
        row = await self._db.fetchrow(
            "SELECT * FROM post_ratings WHERE post_id = $1",
            post_id,
        )
        return _row_to_rating(row, weights) if row else None

    async def upsert(self, rating: Rating) -> Rating:
        """Insert or replace the rating for ``rating.post_id``."""
        row = await self._db.fetchrow(
            _UPSERT_SQL,
            rating.post_id,
            rating.interest_level,
            rating.local_relevance,
            rating.community_impact,
            rating.total_score,
            rating.ai_reasoning,
        )
        return _row_to_rating(row, rating.weights)

    async def list_with_stored_totals(self) -> list[tuple[Rating, int | None]]:
        """All ratings paired with their cached total (newest first)."""
        rows = await self._db.fetch(
            "SELECT * FROM post_ratings ORDER BY created_at DESC"
        )
        return [(_row_to_rating(r), r["total_score"]) for r in rows]

    async def update_total(self, post_id: str, total_score: int) -> bool:
        """Overwrite the cached total. Returns True if a row was updated."""
        result = await self._db.execute(
            "UPDATE post_ratings SET total_score = $2 WHERE post_id = $1",
            post_id,
            total_score,
        )
        return result.endswith(" 1")


def _row_to_rating(
    row: Any,
    weights: tuple[float, float, float] | None = None,
) -> Rating:
    """Convert an asyncpg Record to a Rating."""
    return Rating(
        post_id=str(row["post_id"]),
        interest_level=row["interest_level"],
        local_relevance=row["local_relevance"],
        community_impact=row["community_impact"],
        weights=weights,
        ai_reasoning=row.get("ai_reasoning"),
        created_at=row.get("created_at"),
    )
