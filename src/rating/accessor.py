"""Rating Store Accessor.

Single entry point for reading and writing ratings. Applies the configured
component weights so every total handed to callers is computed the same way.
"""

import logging

from src.core.errors import UpstreamFailure
from src.rating.config import RatingConfig
from src.rating.repository import RatingRepository
from src.rating.schemas import Rating, RecalculationResult
from src.storage.database import Database

logger = logging.getLogger(__name__)


class RatingAccessor:
    """Read/write access to ratings with weight-aware totals.

    Args:
        database: Connected Database instance.
        config: Rating configuration (default: from env).
    """

    def __init__(
        self,
        database: Database,
        config: RatingConfig | None = None,
    ) -> None:
        self._config = config or RatingConfig()
        self._repo = RatingRepository(database)

    @property
    def weights(self) -> tuple[float, float, float] | None:
        return self._config.component_weights

    @property
    def repository(self) -> RatingRepository:
        """Access the underlying repository for direct DB operations."""
        return self._repo

    async def get_rating(self, post_id: str) -> Rating | None:
        """Return the rating for ``post_id``; None means "not rated", not an error."""
        try:
            return await self._repo.get_by_post_id(post_id, weights=self.weights)
        except Exception as e:
            raise UpstreamFailure(f"Failed to load rating for {post_id}: {e}") from e

    async def save_rating(
        self,
        post_id: str,
        interest_level: int,
        local_relevance: int,
        community_impact: int,
        ai_reasoning: str | None = None,
    ) -> Rating:
        """Validate components and store them with the derived total."""
        rating = Rating(
            post_id=post_id,
            interest_level=interest_level,
            local_relevance=local_relevance,
            community_impact=community_impact,
            weights=self.weights,
            ai_reasoning=ai_reasoning,
        )
        try:
            return await self._repo.upsert(rating)
        except Exception as e:
            raise UpstreamFailure(f"Failed to store rating for {post_id}: {e}") from e

    async def recalculate_totals(self) -> RecalculationResult:
        """Rewrite every cached total that disagrees with the current weights.

        Per-row failures are counted and do not stop the pass.
        """
        try:
            rows = await self._repo.list_with_stored_totals()
        except Exception as e:
            raise UpstreamFailure(f"Failed to list ratings: {e}") from e

        result = RecalculationResult(total=len(rows))
        for rating, stored_total in rows:
            rating.weights = self.weights
            new_total = rating.total_score
            if stored_total == new_total:
                result.skipped += 1
                continue
            try:
                await self._repo.update_total(rating.post_id, new_total)
            except Exception as e:
                result.errors += 1
                logger.error("Failed to update total for %s: %s", rating.post_id, e)
                continue
            result.updated += 1
            result.changes.append({
                "post_id": rating.post_id,
                "old_total": stored_total,
                "new_total": new_total,
            })

        logger.info(
            "Recalculated rating totals: %d updated, %d skipped, %d errors",
            result.updated, result.skipped, result.errors,
        )
        return result
