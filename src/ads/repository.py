"""Database repository for advertisements."""

import logging
from typing import Any

from src.ads.schemas import AD_TRANSITIONS, AdStatus, Advertisement
from src.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from src.storage.database import Database

logger = logging.getLogger(__name__)

_TRANSITION_SQL = """
UPDATE advertisements SET
    status = $2,
    approved_by = CASE WHEN $2 = 'approved' THEN $4 ELSE approved_by END,
    approved_at = CASE WHEN $2 = 'approved' THEN NOW() ELSE approved_at END,
    rejection_reason = CASE WHEN $2 = 'rejected' THEN $5 ELSE rejection_reason END,
    updated_at = NOW()
WHERE id = $1 AND status = $3
RETURNING *
"""


class AdRepository:
    """CRUD operations and status workflow for advertisements."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get_by_id(self, ad_id: str) -> Advertisement | None:
        row = await self._db.fetchrow(
            "SELECT * FROM advertisements WHERE id = $1", ad_id,
        )
        return _row_to_ad(row) if row else None

    async def transition(
        self,
        ad_id: str,
        to_status: AdStatus | str,
        approved_by: str | None = None,
        reason: str | None = None,
    ) -> Advertisement:
        """Move an ad along the review workflow.

        Raises:
            NotFoundError: Ad does not exist.
            ValidationError: Approval without ``approved_by``.
            InvalidTransitionError: Disallowed move or concurrent change.
        """
        ad = await self.get_by_id(ad_id)
        if ad is None:
            raise NotFoundError("Advertisement", ad_id)

        try:
            dst = AdStatus(to_status)
        except ValueError as e:
            raise InvalidTransitionError("advertisement", ad.status.value, str(to_status)) from e

        if dst not in AD_TRANSITIONS[ad.status]:
            raise InvalidTransitionError("advertisement", ad.status.value, dst.value)
        if dst == AdStatus.APPROVED and not (approved_by or "").strip():
            raise ValidationError("approved_by is required to approve an advertisement")

        row = await self._db.fetchrow(
            _TRANSITION_SQL, ad_id, dst.value, ad.status.value, approved_by, reason,
        )
        if row is None:
            raise InvalidTransitionError("advertisement", ad.status.value, dst.value)

        logger.info("Advertisement %s status %s -> %s", ad_id, ad.status.value, dst.value)
        return _row_to_ad(row)


def _row_to_ad(row: Any) -> Advertisement:
    """Convert an asyncpg Record to an Advertisement."""
    return Advertisement(
        id=str(row["id"]),
        title=row["title"],
        body=row.get("body") or "",
        status=AdStatus(row["status"]),
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        rejection_reason=row.get("rejection_reason"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )
