"""Shared error kinds and calendar helpers."""

from src.core.errors import (
    ConflictIgnorable,
    InvalidTransitionError,
    NewsletterError,
    NotFoundError,
    UpstreamFailure,
    ValidationError,
)

__all__ = [
    "ConflictIgnorable",
    "InvalidTransitionError",
    "NewsletterError",
    "NotFoundError",
    "UpstreamFailure",
    "ValidationError",
]
