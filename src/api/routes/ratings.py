"""Rating lookup and total recalculation endpoints."""

import time
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends
from starlette.requests import Request

from src.api.auth import verify_api_key
from src.api.dependencies import get_rating_accessor
from src.api.models import ErrorResponse, RatingItem, RatingResponse, RecalculationResponse
from src.api.rate_limit import limiter
from src.config.settings import get_settings as _get_settings
from src.rating.accessor import RatingAccessor

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get(
    "/ratings/{post_id}",
    response_model=RatingResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        502: {"model": ErrorResponse, "description": "Store call failed"},
    },
    summary="Get a content item's rating",
    description="Returns rated=false (not 404) when the item has no rating.",
)
async def get_rating(
    post_id: UUID,
    api_key: str = Depends(verify_api_key),
    accessor: RatingAccessor = Depends(get_rating_accessor),
) -> RatingResponse:
    rating = await accessor.get_rating(str(post_id))
    if rating is None:
        return RatingResponse(post_id=str(post_id), rated=False)
    return RatingResponse(
        post_id=rating.post_id,
        rated=True,
        rating=RatingItem(**rating.to_dict()),
    )


@router.post(
    "/ratings/recalculate",
    response_model=RecalculationResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        502: {"model": ErrorResponse, "description": "Store call failed"},
    },
    summary="Recompute stored totals",
    description="Rewrites every stored total that disagrees with the configured weights.",
)
@limiter.limit(lambda: _get_settings().rate_limit_admin)
async def recalculate_totals(
    request: Request,
    api_key: str = Depends(verify_api_key),
    accessor: RatingAccessor = Depends(get_rating_accessor),
) -> RecalculationResponse:
    start_time = time.perf_counter()
    result = await accessor.recalculate_totals()
    logger.info(
        "Rating totals recalculated",
        total=result.total,
        updated=result.updated,
        errors=result.errors,
        latency_ms=round((time.perf_counter() - start_time) * 1000, 2),
    )
    return RecalculationResponse(
        total=result.total,
        updated=result.updated,
        skipped=result.skipped,
        errors=result.errors,
        changes=result.changes,
    )
