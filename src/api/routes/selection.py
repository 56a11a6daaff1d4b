"""Daily selection trigger."""

import structlog
from fastapi import APIRouter, Depends
from starlette.requests import Request

from src.api.auth import verify_api_key
from src.api.dependencies import get_database
from src.api.models import ErrorResponse, SelectionRunRequest, SelectionRunResponse
from src.api.rate_limit import limiter
from src.config.settings import get_settings as _get_settings
from src.selection.daily_job import run_daily_selection
from src.storage.database import Database

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/selection/run",
    response_model=SelectionRunResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        422: {"model": ErrorResponse, "description": "Malformed date"},
    },
    summary="Run daily article selection",
    description=(
        "Select the top-rated content of the day into the campaign for the "
        "given date and attach its event window. Returns skipped=true when the "
        "run was already recorded for that date, unless force is set."
    ),
)
@limiter.limit(lambda: _get_settings().rate_limit_admin)
async def run_selection(
    request: Request,
    body: SelectionRunRequest | None = None,
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
) -> SelectionRunResponse:
    body = body or SelectionRunRequest()
    result = await run_daily_selection(db, target_date=body.date, force=body.force)

    logger.info(
        "Selection run finished",
        date=result.date.isoformat(),
        skipped=result.skipped,
        selected=len(result.selected),
        errors=len(result.errors),
    )
    return SelectionRunResponse(**result.to_dict())
