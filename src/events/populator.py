"""Campaign Event Populator.

Attaches every active event that starts within a campaign's three-day
display window. Re-running is safe: each link is a single insert keyed on
(campaign, event, date) that does nothing when the link already exists, so
curator flags and display order on existing links are never touched.
"""

import logging
from datetime import date, datetime

from src.campaigns.repository import CampaignRepository
from src.core.dates import day_offsets, parse_iso_date
from src.core.errors import ConflictIgnorable, NotFoundError, UpstreamFailure
from src.events.repository import CampaignEventRepository, EventRepository
from src.events.schemas import EVENT_WINDOW_DAYS, PopulateResult
from src.observability.metrics import MetricsCollector, get_metrics
from src.storage.database import Database

logger = logging.getLogger(__name__)


def event_window(reference_date: str | date | datetime) -> list[date]:
    """The three consecutive calendar days starting at ``reference_date``.

    Time-of-day is discarded; ``2025-10-04T18:00`` yields the same window
    as ``2025-10-04``.
    """
    return day_offsets(parse_iso_date(reference_date), EVENT_WINDOW_DAYS)


async def populate_events_for_campaign(
    database: Database,
    campaign_id: str,
    metrics: MetricsCollector | None = None,
) -> PopulateResult:
    """
    Ensure campaign_events rows exist for the campaign's event window.

    Args:
        database: Connected Database instance (caller manages lifecycle).
        campaign_id: Campaign to populate.
        metrics: Metrics collector (default: global instance).

    Returns:
        PopulateResult with counts. An upstream failure while loading
        events or inserting a link stops the run and is reported in
        ``errors``; links inserted before it stay committed.

    Raises:
        NotFoundError: The campaign does not exist.
        UpstreamFailure: The campaign could not be loaded.
    """
    metrics = metrics or get_metrics()
    campaigns = CampaignRepository(database)

    try:
        campaign = await campaigns.get_by_id(campaign_id)
    except Exception as e:
        raise UpstreamFailure(f"Failed to load campaign {campaign_id}: {e}") from e
    if campaign is None:
        raise NotFoundError("Campaign", campaign_id)

    dates = event_window(campaign.date)
    result = PopulateResult(campaign_id=campaign_id, dates=dates)

    try:
        events = await EventRepository(database).get_active_in_window(dates)
    except Exception as e:
        logger.error("Failed to load events for campaign %s: %s", campaign_id, e)
        result.errors.append(f"fetch_events: {e}")
        return result

    in_window = set(dates)
    outside = [e.id for e in events if e.start_day not in in_window]
    if outside:
        logger.warning(
            "Ignoring %d events outside %s..%s for campaign %s: %s",
            len(outside), dates[0], dates[-1], campaign_id, outside,
        )
        events = [e for e in events if e.start_day in in_window]

    result.events_found = len(events)
    links = CampaignEventRepository(database)

    for index, event in enumerate(events):
        try:
            await links.insert_link(campaign_id, event.id, event.start_day)
        except ConflictIgnorable:
            result.links_existing += 1
            continue
        except Exception as e:
            result.links_failed += 1
            remaining = len(events) - index - 1
            logger.error(
                "Failed to link event %s to campaign %s (%d remaining not attempted): %s",
                event.id, campaign_id, remaining, e,
            )
            result.errors.append(f"link:{event.id}: {e}")
            break

        result.links_created += 1

    metrics.record_population(
        result.links_created, result.links_existing, result.links_failed,
    )
    logger.info(
        "Populated events for campaign %s (%s..%s): found=%d created=%d existing=%d failed=%d",
        campaign_id, dates[0], dates[-1],
        result.events_found, result.links_created,
        result.links_existing, result.links_failed,
    )
    return result
