"""Database repositories for events and campaign event links."""

import logging
from datetime import date
from typing import Any

from src.core.errors import ConflictIgnorable, NotFoundError, ValidationError
from src.events.schemas import CampaignEvent, Event
from src.storage.database import Database

logger = logging.getLogger(__name__)

# Calendar-day match on the naive start timestamp.
_ACTIVE_IN_WINDOW_SQL = """
SELECT * FROM events
WHERE active = TRUE
  AND start_date::date = ANY($1::date[])
ORDER BY start_date ASC, id ASC
"""

# New links are appended after the current last position for that day.
# Existing links are left untouched.
_INSERT_LINK_SQL = """
INSERT INTO campaign_events (
    campaign_id, event_id, event_date, is_selected, is_featured, display_order
)
SELECT
    $1::uuid, $2::integer, $3::date, FALSE, FALSE,
    COALESCE((
        SELECT MAX(display_order) FROM campaign_events
        WHERE campaign_id = $1::uuid AND event_date = $3::date
    ), 0) + 1
ON CONFLICT (campaign_id, event_id, event_date) DO NOTHING
RETURNING *
"""

_LIST_LINKS_SQL = """
SELECT
    ce.*,
    e.title, e.venue, e.start_date, e.end_date, e.active
FROM campaign_events ce
JOIN events e ON e.id = ce.event_id
WHERE ce.campaign_id = $1
ORDER BY ce.event_date ASC, ce.display_order ASC NULLS LAST, ce.id ASC
"""


class EventRepository:
    """Read/write operations for community events."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get_active_in_window(self, dates: list[date]) -> list[Event]:
        """Active events starting on any of ``dates``, ordered by start."""
        if not dates:
            return []
        rows = await self._db.fetch(_ACTIVE_IN_WINDOW_SQL, dates)
        return [_row_to_event(r) for r in rows]


class CampaignEventRepository:
    """Operations on the campaign_events join table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def insert_link(
        self,
        campaign_id: str,
        event_id: int,
        event_date: date,
    ) -> CampaignEvent:
        """Insert a link if absent.

        Raises:
            ConflictIgnorable: The link already exists and was left as is.
        """
        row = await self._db.fetchrow(_INSERT_LINK_SQL, campaign_id, event_id, event_date)
        if row is None:
            raise ConflictIgnorable(
                f"Event {event_id} already linked to campaign {campaign_id} on {event_date}"
            )
        return _row_to_link(row)

    async def list_for_campaign(self, campaign_id: str) -> list[CampaignEvent]:
        rows = await self._db.fetch(_LIST_LINKS_SQL, campaign_id)
        return [_row_to_link(r, with_event=True) for r in rows]

    async def update_flags(
        self,
        campaign_id: str,
        event_id: int,
        event_date: date,
        is_selected: bool | None = None,
        is_featured: bool | None = None,
        display_order: int | None = None,
    ) -> CampaignEvent:
        """Update curator flags on an existing link; None leaves a field as is.

        Raises:
            ValidationError: No field to update.
            NotFoundError: The link does not exist.
        """
        if is_selected is None and is_featured is None and display_order is None:
            raise ValidationError("No fields to update")

        row = await self._db.fetchrow(
            """
            UPDATE campaign_events SET
                is_selected = COALESCE($4, is_selected),
                is_featured = COALESCE($5, is_featured),
                display_order = COALESCE($6, display_order)
            WHERE campaign_id = $1 AND event_id = $2 AND event_date = $3
            RETURNING *
            """,
            campaign_id, event_id, event_date, is_selected, is_featured, display_order,
        )
        if row is None:
            raise NotFoundError(
                "CampaignEvent", f"{campaign_id}/{event_id}/{event_date.isoformat()}",
            )
        return _row_to_link(row)


def _row_to_event(row: Any) -> Event:
    """Convert an asyncpg Record to an Event."""
    return Event(
        id=row["id"],
        title=row["title"],
        start_date=row["start_date"],
        venue=row.get("venue"),
        end_date=row.get("end_date"),
        active=row.get("active", True),
    )


def _row_to_link(row: Any, with_event: bool = False) -> CampaignEvent:
    """Convert an asyncpg Record to a CampaignEvent."""
    event = None
    if with_event:
        event = Event(
            id=row["event_id"],
            title=row["title"],
            start_date=row["start_date"],
            venue=row.get("venue"),
            end_date=row.get("end_date"),
            active=row.get("active", True),
        )
    return CampaignEvent(
        id=row.get("id"),
        campaign_id=str(row["campaign_id"]),
        event_id=row["event_id"],
        event_date=row["event_date"],
        is_selected=row["is_selected"],
        is_featured=row["is_featured"],
        display_order=row.get("display_order"),
        event=event,
    )
