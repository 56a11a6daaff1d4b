"""
Dependency injection for FastAPI endpoints.
"""

from fastapi import Depends

from src.ads.repository import AdRepository
from src.campaigns.repository import CampaignRepository
from src.events.repository import CampaignEventRepository
from src.rating.accessor import RatingAccessor
from src.rating.config import RatingConfig
from src.scheduling.guard import DailyRunGuard
from src.storage.database import Database, close_database
from src.storage.database import get_database as _get_global_database


async def get_database() -> Database:
    """Get the shared, connected Database instance."""
    return await _get_global_database()


async def get_campaign_repository(
    db: Database = Depends(get_database),
) -> CampaignRepository:
    return CampaignRepository(db)


async def get_campaign_event_repository(
    db: Database = Depends(get_database),
) -> CampaignEventRepository:
    return CampaignEventRepository(db)


async def get_rating_accessor(
    db: Database = Depends(get_database),
) -> RatingAccessor:
    """Rating accessor using weights from RATING_* settings."""
    return RatingAccessor(db, RatingConfig())


async def get_daily_run_guard(
    db: Database = Depends(get_database),
) -> DailyRunGuard:
    return DailyRunGuard(db)


async def get_ad_repository(
    db: Database = Depends(get_database),
) -> AdRepository:
    return AdRepository(db)


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    await close_database()
