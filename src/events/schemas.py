"""Schema definitions for community events and their campaign links.

Event maps to ``events``; CampaignEvent maps to ``campaign_events`` and is
unique per (campaign, event, event_date).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

EVENT_WINDOW_DAYS = 3


@dataclass
class Event:
    """A community event listing."""

    id: int
    title: str
    start_date: datetime
    venue: str | None = None
    end_date: datetime | None = None
    active: bool = True

    @property
    def start_day(self) -> date:
        """Calendar day the event starts on."""
        return self.start_date.date()

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "venue": self.venue,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "active": self.active,
        }


@dataclass
class CampaignEvent:
    """
    An event attached to a campaign for one day of its display window.

    Attributes:
        campaign_id: Owning campaign.
        event_id: Linked event.
        event_date: Calendar day within the campaign's window.
        is_selected: Curator picked this event for the issue.
        is_featured: Curator featured this event.
        display_order: Position among the links for the same day.
        event: Joined event details, when loaded with the link.
    """

    campaign_id: str
    event_id: int
    event_date: date
    is_selected: bool = False
    is_featured: bool = False
    display_order: int | None = None
    id: int | None = None
    event: Event | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "campaign_id": self.campaign_id,
            "event_id": self.event_id,
            "event_date": self.event_date.isoformat(),
            "is_selected": self.is_selected,
            "is_featured": self.is_featured,
            "display_order": self.display_order,
            "event": self.event.to_dict() if self.event else None,
        }


@dataclass
class PopulateResult:
    """Outcome of one populate run for a campaign.

    A run that stops on an upstream failure still reports what it did
    before stopping; links committed up to that point are kept.
    """

    campaign_id: str
    dates: list[date] = field(default_factory=list)
    events_found: int = 0
    links_created: int = 0
    links_existing: int = 0
    links_failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "campaign_id": self.campaign_id,
            "dates": [d.isoformat() for d in self.dates],
            "events_found": self.events_found,
            "links_created": self.links_created,
            "links_existing": self.links_existing,
            "links_failed": self.links_failed,
            "errors": list(self.errors),
            "success": self.success,
        }
