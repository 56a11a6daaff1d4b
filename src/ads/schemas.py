"""Schema definitions for advertisements and their review workflow.

Maps to the ``advertisements`` table. Status moves only along
``AD_TRANSITIONS``; approval records the reviewer, rejection an optional
reason.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class AdStatus(str, Enum):
    """Review status of an advertisement."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    COMPLETED = "completed"


AD_TRANSITIONS: dict[AdStatus, frozenset[AdStatus]] = {
    AdStatus.PENDING: frozenset({AdStatus.APPROVED, AdStatus.REJECTED}),
    AdStatus.APPROVED: frozenset({AdStatus.ACTIVE}),
    AdStatus.REJECTED: frozenset(),
    AdStatus.ACTIVE: frozenset({AdStatus.COMPLETED}),
    AdStatus.COMPLETED: frozenset(),
}


@dataclass
class Advertisement:
    """An advertisement submitted for a newsletter slot."""

    id: str
    title: str
    body: str = ""
    status: AdStatus = AdStatus.PENDING
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.status, AdStatus):
            self.status = AdStatus(self.status)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "status": self.status.value,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "rejection_reason": self.rejection_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
