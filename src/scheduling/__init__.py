"""Once-per-day gating for scheduled tasks."""

from src.scheduling.guard import RESET_SENTINEL, TASK_KEYS, DailyRunGuard

__all__ = ["DailyRunGuard", "RESET_SENTINEL", "TASK_KEYS"]
