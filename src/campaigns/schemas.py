"""Schema definitions for newsletter campaigns and their articles.

Campaign maps to ``newsletter_campaigns`` (one row per issue date) and
Article to ``articles``. Articles are deactivated, never deleted, when a
later selection or an editor drops them.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


class CampaignStatus(str, Enum):
    """Lifecycle status of a newsletter issue."""

    DRAFT = "draft"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    SENT = "sent"
    FAILED = "failed"


@dataclass
class Campaign:
    """
    One newsletter issue.

    Attributes:
        id: Database identifier.
        date: Issue reference date (unique).
        status: Current lifecycle status.
        subject_line: Email subject, None until generated.
        created_at: When the campaign row was created.
        updated_at: When the campaign row was last modified.
    """

    id: str
    date: date
    status: CampaignStatus = CampaignStatus.DRAFT
    subject_line: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.status, CampaignStatus):
            self.status = CampaignStatus(self.status)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "status": self.status.value,
            "subject_line": self.subject_line,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class Article:
    """A content item promoted into a campaign."""

    id: str
    campaign_id: str
    post_id: str
    headline: str
    body: str = ""
    rank: int | None = None
    is_active: bool = True
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "campaign_id": self.campaign_id,
            "post_id": self.post_id,
            "headline": self.headline,
            "body": self.body,
            "rank": self.rank,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
