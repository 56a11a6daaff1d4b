"""Daily article selection run.

Runs once per calendar day, gated by the Daily-Run Guard:
1. Claims ``last_rss_processing_run`` for the target date (skipped if taken)
2. Gets or creates the draft campaign for the date
3. Loads the content snapshot for the selection window
4. Rates unrated snapshot items and drops duplicate stories with the content
   evaluator, when configured
5. Ranks the snapshot and keeps the top N
6. Upserts the selected articles and deactivates ones no longer selected
7. Attaches the campaign's event window
8. Moves the campaign from draft to in_review
9. Posts a Slack summary, or a low-article alert

Designed for external cron scheduling: ``0 5 * * * newsletter-ops run-daily``
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from src.campaigns.repository import CampaignRepository
from src.campaigns.schemas import Campaign, CampaignStatus
from src.config.settings import get_settings
from src.content.repository import ContentRepository, DuplicateRepository
from src.content.schemas import ContentItem
from src.core.dates import parse_iso_date, today_in
from src.core.errors import InvalidTransitionError
from src.events.populator import populate_events_for_campaign
from src.events.schemas import PopulateResult
from src.notifications.slack import SlackNotifier
from src.observability.metrics import MetricsCollector, get_metrics
from src.rating.accessor import RatingAccessor
from src.rating.config import RatingConfig
from src.scheduling.guard import RSS_PROCESSING, DailyRunGuard
from src.selection.config import SelectionConfig
from src.selection.selector import ScoredItem, select_top_n
from src.storage.database import Database

logger = logging.getLogger(__name__)


@dataclass
class DailySelectionResult:
    """Summary of one daily selection run."""

    date: date
    skipped: bool = False
    campaign_id: str | None = None
    campaign_created: bool = False
    campaign_status: str | None = None
    candidates: int = 0
    evaluated: int = 0
    evaluation_failures: int = 0
    duplicates_removed: int = 0
    selected: list[ScoredItem] = field(default_factory=list)
    articles_upserted: int = 0
    articles_deactivated: int = 0
    events: PopulateResult | None = None
    notified: bool = False
    errors: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "date": self.date.isoformat(),
            "skipped": self.skipped,
            "success": self.success,
            "campaign_id": self.campaign_id,
            "campaign_created": self.campaign_created,
            "campaign_status": self.campaign_status,
            "candidates": self.candidates,
            "evaluated": self.evaluated,
            "evaluation_failures": self.evaluation_failures,
            "duplicates_removed": self.duplicates_removed,
            "selected": [s.to_dict() for s in self.selected],
            "articles_upserted": self.articles_upserted,
            "articles_deactivated": self.articles_deactivated,
            "events": self.events.to_dict() if self.events else None,
            "notified": self.notified,
            "errors": list(self.errors),
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }


def selection_window(target_date: date, hours: int, tz_name: str) -> tuple[datetime, datetime]:
    """``[since, until)`` ending at local midnight after ``target_date``."""
    tz = ZoneInfo(tz_name)
    until = datetime(target_date.year, target_date.month, target_date.day, tzinfo=tz)
    until += timedelta(days=1)
    return until - timedelta(hours=hours), until


async def run_daily_selection(
    database: Database,
    target_date: str | date | None = None,
    config: SelectionConfig | None = None,
    force: bool = False,
    rating_config: RatingConfig | None = None,
    evaluator: Any = None,
    notifier: SlackNotifier | None = None,
    metrics: MetricsCollector | None = None,
) -> DailySelectionResult:
    """
    Run the daily selection pipeline for one issue date.

    Args:
        database: Connected Database instance (caller manages lifecycle).
        target_date: Issue date (default: today in the configured timezone).
        config: Selection configuration (default: from env).
        force: Run even if the guard already recorded today. The guard is
            still marked for the date.
        rating_config: Rating configuration (default: from env).
        evaluator: Content evaluator for unrated items (default: built from
            ``rating_config`` when credentials are configured).
        notifier: Slack notifier (default: from env).
        metrics: Metrics collector (default: global instance).

    Returns:
        DailySelectionResult with counts and any errors.

    Raises:
        ValidationError: ``target_date`` is malformed.
    """
    settings = get_settings()
    config = config or SelectionConfig()
    rating_config = rating_config or RatingConfig()
    metrics = metrics or get_metrics()
    if target_date is None:
        target = today_in(settings.timezone)
    else:
        target = parse_iso_date(target_date)
    result = DailySelectionResult(date=target)
    start_time = time.monotonic()

    def _finish(outcome: str) -> DailySelectionResult:
        result.elapsed_seconds = time.monotonic() - start_time
        metrics.record_daily_run(
            outcome, articles=len(result.selected), latency=result.elapsed_seconds,
        )
        return result

    # Phase 1: Daily-run guard
    guard = DailyRunGuard(database)
    try:
        if force:
            await guard.mark_ran(RSS_PROCESSING, target)
        elif not await guard.try_claim(RSS_PROCESSING, target):
            logger.info("Daily selection already ran for %s; skipping", target)
            result.skipped = True
            return _finish("skipped")
    except Exception as e:
        logger.exception("Daily-run guard check failed")
        result.errors.append(f"guard: {e}")
        return _finish("failed")

    # Phase 2: Campaign
    campaigns = CampaignRepository(database)
    try:
        campaign, created = await campaigns.get_or_create_for_date(target)
    except Exception as e:
        logger.exception("Failed to get or create campaign for %s", target)
        result.errors.append(f"campaign: {e}")
        return _finish("failed")
    result.campaign_id = campaign.id
    result.campaign_created = created
    result.campaign_status = campaign.status.value

    # Phase 3: Snapshot
    content = ContentRepository(database)
    since, until = selection_window(target, config.window_hours, settings.timezone)
    try:
        items = await content.get_snapshot(
            since, until, weights=rating_config.component_weights,
        )
    except Exception as e:
        logger.exception("Failed to load content snapshot")
        result.errors.append(f"snapshot: {e}")
        return _finish("failed")
    result.candidates = len(items)

    # Phase 4: Rate unrated items and drop duplicate stories (optional)
    wants_rating = config.evaluate_unrated and any(not item.is_rated for item in items)
    wants_dedupe = config.deduplicate and len(items) > 1
    if wants_rating or wants_dedupe:
        items = await _run_evaluator(
            database, campaign, items, config, rating_config, evaluator, result,
        )

    # Phase 5: Top-N
    result.selected = select_top_n(
        items, n=config.top_n, weights=rating_config.component_weights,
    )

    # Phase 6: Articles
    try:
        await _sync_articles(campaigns, content, campaign, result)
    except Exception as e:
        logger.exception("Failed to sync articles for campaign %s", campaign.id)
        result.errors.append(f"articles: {e}")
        return _finish("failed")

    # Phase 7: Events
    if config.populate_events:
        try:
            result.events = await populate_events_for_campaign(
                database, campaign.id, metrics=metrics,
            )
            result.errors.extend(f"events: {err}" for err in result.events.errors)
        except Exception as e:
            logger.exception("Event population failed for campaign %s", campaign.id)
            result.errors.append(f"events: {e}")

    # Phase 8: Ready for review
    if campaign.status == CampaignStatus.DRAFT:
        try:
            updated = await campaigns.transition_status(campaign.id, CampaignStatus.IN_REVIEW)
            result.campaign_status = updated.status.value
        except InvalidTransitionError as e:
            logger.warning("Campaign %s status changed concurrently: %s", campaign.id, e)
        except Exception as e:
            logger.exception("Failed to move campaign %s to review", campaign.id)
            result.errors.append(f"status: {e}")

    # Phase 9: Notify
    if config.notify:
        result.notified = await _notify(notifier, campaign, config, result)

    _finish("completed" if result.success else "failed")
    logger.info(
        "Daily selection complete for %s: campaign=%s candidates=%d evaluated=%d "
        "selected=%d deactivated=%d events_created=%d errors=%d elapsed=%.2fs",
        target,
        campaign.id,
        result.candidates,
        result.evaluated,
        len(result.selected),
        result.articles_deactivated,
        result.events.links_created if result.events else 0,
        len(result.errors),
        result.elapsed_seconds,
    )
    return result


# ── Helper functions ─────────────────────────────────────────


async def _run_evaluator(
    database: Database,
    campaign: Campaign,
    items: list[ContentItem],
    config: SelectionConfig,
    rating_config: RatingConfig,
    evaluator: Any,
    result: DailySelectionResult,
) -> list[ContentItem]:
    """Rate unrated items, then drop duplicate stories.

    Returns the items left for selection. Evaluator problems never stop the
    run.
    """
    owned = False
    if evaluator is None:
        if not rating_config.evaluator_configured:
            logger.info("Content evaluator not configured; rating and deduplication skipped")
            return items
        from src.rating.evaluator import ContentEvaluator

        evaluator = ContentEvaluator(rating_config)
        owned = True

    try:
        if config.evaluate_unrated and any(not item.is_rated for item in items):
            await _evaluate_unrated(database, items, rating_config, evaluator, result)
        if config.deduplicate and len(items) > 1:
            items = await _drop_duplicates(database, campaign, items, evaluator, result)
    finally:
        if owned:
            await evaluator.close()
    return items


async def _evaluate_unrated(
    database: Database,
    items: list[ContentItem],
    rating_config: RatingConfig,
    evaluator: Any,
    result: DailySelectionResult,
) -> None:
    """Rate unrated items in place."""
    accessor = RatingAccessor(database, rating_config)
    try:
        batch = await evaluator.rate_unrated(items, accessor)
        result.evaluated = batch.rated
        result.evaluation_failures = batch.failed + batch.skipped
    except Exception as e:
        logger.error("Content evaluation pass failed: %s", e)
        result.evaluation_failures = sum(1 for item in items if not item.is_rated)


async def _drop_duplicates(
    database: Database,
    campaign: Campaign,
    items: list[ContentItem],
    evaluator: Any,
    result: DailySelectionResult,
) -> list[ContentItem]:
    """Record duplicate groups and return the items minus the duplicates.

    Duplicates are dropped for this run even when storing their group fails;
    on detection failure every item stays.
    """
    try:
        groups = await evaluator.find_duplicate_groups(items)
    except Exception as e:
        logger.warning("Duplicate detection failed; keeping all items: %s", e)
        return items

    repo = DuplicateRepository(database)
    dropped: set[str] = set()
    for group in groups:
        try:
            await repo.record_group(campaign.id, items, group)
        except Exception as e:
            logger.warning(
                "Failed to record duplicate group %r for campaign %s: %s",
                group.topic_signature, campaign.id, e,
            )
        dropped.update(items[i].id for i in group.duplicate_indices)

    result.duplicates_removed = len(dropped)
    if dropped:
        logger.info("Dropped %d duplicate items before selection", len(dropped))
    return [item for item in items if item.id not in dropped]


async def _sync_articles(
    campaigns: CampaignRepository,
    content: ContentRepository,
    campaign: Campaign,
    result: DailySelectionResult,
) -> None:
    """Upsert selected items as ranked articles; deactivate the rest."""
    post_ids = []
    for rank, scored in enumerate(result.selected, start=1):
        item = scored.item
        await campaigns.upsert_article(
            campaign.id, item.id, item.title, item.body, rank,
        )
        post_ids.append(item.id)
    result.articles_upserted = len(post_ids)

    result.articles_deactivated = await campaigns.deactivate_articles_except(
        campaign.id, post_ids,
    )
    await content.assign_to_campaign(post_ids, campaign.id)


async def _notify(
    notifier: SlackNotifier | None,
    campaign: Campaign,
    config: SelectionConfig,
    result: DailySelectionResult,
) -> bool:
    """Send the run summary, or a low-article alert. Never raises."""
    notifier = notifier or SlackNotifier()
    selected = len(result.selected)
    try:
        if selected < config.min_articles_alert:
            return await notifier.notify_low_article_count(
                campaign.id, campaign.date, selected, config.min_articles_alert,
            )
        return await notifier.notify_selection_complete(
            campaign.id,
            campaign.date,
            candidates=result.candidates,
            selected=selected,
            events_linked=result.events.links_created if result.events else 0,
            errors=len(result.errors),
        )
    except Exception as e:
        logger.warning("Notification failed for campaign %s: %s", campaign.id, e)
        return False
