"""Campaign event population and curation endpoints."""

from uuid import UUID

import structlog
from fastapi import APIRouter, Depends

from src.api.auth import verify_api_key
from src.api.dependencies import (
    get_campaign_event_repository,
    get_campaign_repository,
    get_database,
)
from src.api.models import (
    CampaignEventItem,
    CampaignEventListResponse,
    CampaignEventUpdateRequest,
    ErrorResponse,
    PopulateResponse,
)
from src.campaigns.repository import CampaignRepository
from src.core.dates import parse_iso_date
from src.events.populator import populate_events_for_campaign
from src.events.repository import CampaignEventRepository
from src.storage.database import Database

logger = structlog.get_logger(__name__)
router = APIRouter()

_ERRORS = {
    401: {"model": ErrorResponse, "description": "Invalid API key"},
    404: {"model": ErrorResponse, "description": "Campaign or link not found"},
    422: {"model": ErrorResponse, "description": "Invalid request"},
    502: {"model": ErrorResponse, "description": "Store call failed"},
}


@router.post(
    "/campaigns/{campaign_id}/events/populate",
    response_model=PopulateResponse,
    responses=_ERRORS,
    summary="Attach the campaign's event window",
    description=(
        "Links every active event starting within the three days beginning at "
        "the campaign date. Safe to re-run: existing links and their curator "
        "flags are left untouched."
    ),
)
async def populate_events(
    campaign_id: UUID,
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
) -> PopulateResponse:
    result = await populate_events_for_campaign(db, str(campaign_id))
    logger.info(
        "Campaign events populated",
        campaign_id=result.campaign_id,
        created=result.links_created,
        existing=result.links_existing,
        failed=result.links_failed,
    )
    return PopulateResponse(**result.to_dict())


@router.get(
    "/campaigns/{campaign_id}/events",
    response_model=CampaignEventListResponse,
    responses=_ERRORS,
    summary="List a campaign's event links",
)
async def list_campaign_events(
    campaign_id: UUID,
    api_key: str = Depends(verify_api_key),
    campaigns: CampaignRepository = Depends(get_campaign_repository),
    links: CampaignEventRepository = Depends(get_campaign_event_repository),
) -> CampaignEventListResponse:
    campaign = await campaigns.require(str(campaign_id))
    items = await links.list_for_campaign(campaign.id)
    return CampaignEventListResponse(
        campaign_id=campaign.id,
        events=[CampaignEventItem(**link.to_dict()) for link in items],
        total=len(items),
    )


@router.patch(
    "/campaigns/{campaign_id}/events/{event_id}",
    response_model=CampaignEventItem,
    responses=_ERRORS,
    summary="Curate a campaign event link",
)
async def update_campaign_event(
    campaign_id: UUID,
    event_id: int,
    body: CampaignEventUpdateRequest,
    api_key: str = Depends(verify_api_key),
    links: CampaignEventRepository = Depends(get_campaign_event_repository),
) -> CampaignEventItem:
    link = await links.update_flags(
        str(campaign_id),
        event_id,
        parse_iso_date(body.event_date),
        is_selected=body.is_selected,
        is_featured=body.is_featured,
        display_order=body.display_order,
    )
    return CampaignEventItem(**link.to_dict())
