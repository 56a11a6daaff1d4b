"""Advertisement review workflow endpoints."""

from uuid import UUID

import structlog
from fastapi import APIRouter, Depends

from src.ads.repository import AdRepository
from src.ads.schemas import AdStatus
from src.api.auth import verify_api_key
from src.api.dependencies import get_ad_repository
from src.api.models import AdApproveRequest, AdItem, AdRejectRequest, ErrorResponse

logger = structlog.get_logger(__name__)
router = APIRouter()

_ERRORS = {
    401: {"model": ErrorResponse, "description": "Invalid API key"},
    404: {"model": ErrorResponse, "description": "Advertisement not found"},
    422: {"model": ErrorResponse, "description": "Transition not allowed"},
}


async def _transition(
    repo: AdRepository,
    ad_id: UUID,
    to_status: AdStatus,
    approved_by: str | None = None,
    reason: str | None = None,
) -> AdItem:
    ad = await repo.transition(str(ad_id), to_status, approved_by=approved_by, reason=reason)
    logger.info("Advertisement status changed", ad_id=ad.id, status=ad.status.value)
    return AdItem(**ad.to_dict())


@router.post(
    "/ads/{ad_id}/approve",
    response_model=AdItem,
    responses=_ERRORS,
    summary="Approve a pending advertisement",
)
async def approve_ad(
    ad_id: UUID,
    body: AdApproveRequest,
    api_key: str = Depends(verify_api_key),
    repo: AdRepository = Depends(get_ad_repository),
) -> AdItem:
    return await _transition(repo, ad_id, AdStatus.APPROVED, approved_by=body.approved_by)


@router.post(
    "/ads/{ad_id}/reject",
    response_model=AdItem,
    responses=_ERRORS,
    summary="Reject a pending advertisement",
)
async def reject_ad(
    ad_id: UUID,
    body: AdRejectRequest | None = None,
    api_key: str = Depends(verify_api_key),
    repo: AdRepository = Depends(get_ad_repository),
) -> AdItem:
    reason = body.reason if body else None
    return await _transition(repo, ad_id, AdStatus.REJECTED, reason=reason)


@router.post(
    "/ads/{ad_id}/activate",
    response_model=AdItem,
    responses=_ERRORS,
    summary="Start running an approved advertisement",
)
async def activate_ad(
    ad_id: UUID,
    api_key: str = Depends(verify_api_key),
    repo: AdRepository = Depends(get_ad_repository),
) -> AdItem:
    return await _transition(repo, ad_id, AdStatus.ACTIVE)


@router.post(
    "/ads/{ad_id}/complete",
    response_model=AdItem,
    responses=_ERRORS,
    summary="Mark an active advertisement as completed",
)
async def complete_ad(
    ad_id: UUID,
    api_key: str = Depends(verify_api_key),
    repo: AdRepository = Depends(get_ad_repository),
) -> AdItem:
    return await _transition(repo, ad_id, AdStatus.COMPLETED)
