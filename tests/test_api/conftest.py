"""Shared fixtures for API tests."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.ads.repository import AdRepository
from src.api.app import create_app
from src.api.auth import verify_api_key
from src.api.dependencies import (
    get_ad_repository,
    get_campaign_event_repository,
    get_campaign_repository,
    get_daily_run_guard,
    get_database,
    get_rating_accessor,
)
from src.campaigns.repository import CampaignRepository
from src.campaigns.schemas import Article, Campaign, CampaignStatus
from src.events.repository import CampaignEventRepository
from src.rating.accessor import RatingAccessor
from src.scheduling.guard import DailyRunGuard

CAMPAIGN_ID = "7f1d2c9e-0b5a-4e8e-9a54-2b9c1f0e6a11"
ARTICLE_ID = "c1e4a7b2-9d3f-4c6e-8a1b-5f2d7e9c0a33"
POST_ID = "0d9a8b7c-6e5f-4a3b-9c2d-1e0f9a8b7c66"


def _make_campaign(status: CampaignStatus = CampaignStatus.DRAFT, **kwargs) -> Campaign:
    """Helper to create a Campaign with sensible defaults."""
    return Campaign(
        id=kwargs.pop("id", CAMPAIGN_ID),
        date=kwargs.pop("date", date(2025, 10, 4)),
        status=status,
        created_at=kwargs.pop(
            "created_at", datetime(2025, 10, 4, 10, 0, tzinfo=timezone.utc)
        ),
        **kwargs,
    )


def _make_article(**kwargs) -> Article:
    """Helper to create an Article with sensible defaults."""
    return Article(
        id=kwargs.pop("id", ARTICLE_ID),
        campaign_id=kwargs.pop("campaign_id", CAMPAIGN_ID),
        post_id=kwargs.pop("post_id", POST_ID),
        headline=kwargs.pop("headline", "Council approves downtown budget"),
        **kwargs,
    )


@pytest.fixture
def mock_db():
    db = AsyncMock()
    db.health_check = AsyncMock(return_value=True)
    return db


@pytest.fixture
def mock_campaign_repo():
    repo = AsyncMock(spec=CampaignRepository)
    repo.require = AsyncMock(return_value=_make_campaign())
    repo.get_by_date = AsyncMock(return_value=None)
    repo.list_articles = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_link_repo():
    repo = AsyncMock(spec=CampaignEventRepository)
    repo.list_for_campaign = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_accessor():
    return AsyncMock(spec=RatingAccessor)


@pytest.fixture
def mock_guard():
    return AsyncMock(spec=DailyRunGuard)


@pytest.fixture
def mock_ad_repo():
    return AsyncMock(spec=AdRepository)


@pytest.fixture
def client(
    mock_db,
    mock_campaign_repo,
    mock_link_repo,
    mock_accessor,
    mock_guard,
    mock_ad_repo,
):
    """FastAPI TestClient with dependency overrides."""
    app = create_app()

    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[get_database] = lambda: mock_db
    app.dependency_overrides[get_campaign_repository] = lambda: mock_campaign_repo
    app.dependency_overrides[get_campaign_event_repository] = lambda: mock_link_repo
    app.dependency_overrides[get_rating_accessor] = lambda: mock_accessor
    app.dependency_overrides[get_daily_run_guard] = lambda: mock_guard
    app.dependency_overrides[get_ad_repository] = lambda: mock_ad_repo

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
