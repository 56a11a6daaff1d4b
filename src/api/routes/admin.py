"""Daily-run guard administration endpoints."""

import structlog
from fastapi import APIRouter, Depends
from starlette.requests import Request

from src.api.auth import verify_api_key
from src.api.dependencies import get_daily_run_guard
from src.api.models import DailyRunStatusResponse, ErrorResponse, GuardResetResponse
from src.api.rate_limit import limiter
from src.config.settings import get_settings as _get_settings
from src.core.errors import NotFoundError
from src.scheduling.guard import RESET_SENTINEL, TASK_KEYS, DailyRunGuard

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get(
    "/admin/daily-runs",
    response_model=DailyRunStatusResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid API key"}},
    summary="Last run date of each scheduled task",
)
async def daily_run_status(
    api_key: str = Depends(verify_api_key),
    guard: DailyRunGuard = Depends(get_daily_run_guard),
) -> DailyRunStatusResponse:
    return DailyRunStatusResponse(tasks=await guard.status(TASK_KEYS))


@router.post(
    "/admin/daily-runs/{task_key}/reset",
    response_model=GuardResetResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        404: {"model": ErrorResponse, "description": "Unknown task key"},
    },
    summary="Reset a task's daily-run guard",
    description="The next scheduled invocation of the task runs regardless of its last run.",
)
@limiter.limit(lambda: _get_settings().rate_limit_admin)
async def reset_daily_run(
    request: Request,
    task_key: str,
    api_key: str = Depends(verify_api_key),
    guard: DailyRunGuard = Depends(get_daily_run_guard),
) -> GuardResetResponse:
    if task_key not in TASK_KEYS:
        raise NotFoundError("Task", task_key)

    await guard.reset(task_key)
    logger.warning("Daily-run guard reset", task_key=task_key)
    return GuardResetResponse(task_key=task_key, value=RESET_SENTINEL)
