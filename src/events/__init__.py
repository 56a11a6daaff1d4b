"""Community events and their attachment to campaigns."""

from src.events.populator import event_window, populate_events_for_campaign
from src.events.repository import CampaignEventRepository, EventRepository
from src.events.schemas import CampaignEvent, Event, PopulateResult

__all__ = [
    "CampaignEvent",
    "CampaignEventRepository",
    "Event",
    "EventRepository",
    "PopulateResult",
    "event_window",
    "populate_events_for_campaign",
]
