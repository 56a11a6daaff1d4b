"""Campaign lookup, lifecycle, and article review endpoints."""

from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Query

from src.api.auth import verify_api_key
from src.api.dependencies import get_campaign_repository
from src.api.models import (
    ArticleItem,
    ArticleListResponse,
    CampaignItem,
    CampaignStatusRequest,
    ErrorResponse,
    SubjectLineRequest,
)
from src.campaigns.repository import CampaignRepository
from src.core.dates import parse_iso_date
from src.core.errors import NotFoundError

logger = structlog.get_logger(__name__)
router = APIRouter()

_ERRORS = {
    401: {"model": ErrorResponse, "description": "Invalid API key"},
    404: {"model": ErrorResponse, "description": "Not found"},
    422: {"model": ErrorResponse, "description": "Invalid request"},
}


@router.get(
    "/campaigns/by-date/{issue_date}",
    response_model=CampaignItem,
    responses=_ERRORS,
    summary="Get the campaign for an issue date",
)
async def get_campaign_by_date(
    issue_date: str,
    api_key: str = Depends(verify_api_key),
    repo: CampaignRepository = Depends(get_campaign_repository),
) -> CampaignItem:
    day = parse_iso_date(issue_date)
    campaign = await repo.get_by_date(day)
    if campaign is None:
        raise NotFoundError("Campaign", day.isoformat())
    return CampaignItem(**campaign.to_dict())


@router.get(
    "/campaigns/{campaign_id}",
    response_model=CampaignItem,
    responses=_ERRORS,
    summary="Get a campaign",
)
async def get_campaign(
    campaign_id: UUID,
    api_key: str = Depends(verify_api_key),
    repo: CampaignRepository = Depends(get_campaign_repository),
) -> CampaignItem:
    campaign = await repo.require(str(campaign_id))
    return CampaignItem(**campaign.to_dict())


@router.post(
    "/campaigns/{campaign_id}/status",
    response_model=CampaignItem,
    responses=_ERRORS,
    summary="Change a campaign's status",
    description=(
        "Allowed: draft -> in_review -> approved -> sent; any unsent status "
        "-> failed; failed -> draft."
    ),
)
async def change_campaign_status(
    campaign_id: UUID,
    body: CampaignStatusRequest,
    api_key: str = Depends(verify_api_key),
    repo: CampaignRepository = Depends(get_campaign_repository),
) -> CampaignItem:
    campaign = await repo.transition_status(str(campaign_id), body.status)
    logger.info(
        "Campaign status changed",
        campaign_id=campaign.id,
        status=campaign.status.value,
    )
    return CampaignItem(**campaign.to_dict())


@router.put(
    "/campaigns/{campaign_id}/subject-line",
    response_model=CampaignItem,
    responses=_ERRORS,
    summary="Set a campaign's subject line",
)
async def set_subject_line(
    campaign_id: UUID,
    body: SubjectLineRequest,
    api_key: str = Depends(verify_api_key),
    repo: CampaignRepository = Depends(get_campaign_repository),
) -> CampaignItem:
    campaign = await repo.set_subject_line(str(campaign_id), body.subject_line)
    return CampaignItem(**campaign.to_dict())


@router.get(
    "/campaigns/{campaign_id}/articles",
    response_model=ArticleListResponse,
    responses=_ERRORS,
    summary="List a campaign's articles",
)
async def list_articles(
    campaign_id: UUID,
    active_only: bool = Query(default=False, description="Only active articles"),
    api_key: str = Depends(verify_api_key),
    repo: CampaignRepository = Depends(get_campaign_repository),
) -> ArticleListResponse:
    campaign = await repo.require(str(campaign_id))
    articles = await repo.list_articles(campaign.id, active_only=active_only)
    return ArticleListResponse(
        campaign_id=campaign.id,
        articles=[ArticleItem(**a.to_dict()) for a in articles],
        total=len(articles),
    )


@router.post(
    "/articles/{article_id}/activate",
    response_model=ArticleItem,
    responses=_ERRORS,
    summary="Include an article in its issue",
)
async def activate_article(
    article_id: UUID,
    api_key: str = Depends(verify_api_key),
    repo: CampaignRepository = Depends(get_campaign_repository),
) -> ArticleItem:
    article = await repo.set_article_active(str(article_id), True)
    return ArticleItem(**article.to_dict())


@router.post(
    "/articles/{article_id}/deactivate",
    response_model=ArticleItem,
    responses=_ERRORS,
    summary="Exclude an article from its issue",
)
async def deactivate_article(
    article_id: UUID,
    api_key: str = Depends(verify_api_key),
    repo: CampaignRepository = Depends(get_campaign_repository),
) -> ArticleItem:
    article = await repo.set_article_active(str(article_id), False)
    return ArticleItem(**article.to_dict())
