"""
Request and response models for the newsletter operations API.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(
        ...,
        description="Error message",
    )
    error_type: str = Field(
        default="error",
        description="Error type: not_found, validation, invalid_transition, upstream, internal",
    )


# Health models


class ComponentHealth(BaseModel):
    """Health status of a single infrastructure component."""

    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = Field(default=None, description="Check latency in milliseconds")
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(
        ...,
        description="Overall service status: healthy, degraded, or unhealthy",
    )
    components: dict[str, ComponentHealth] = Field(
        default_factory=dict,
        description="Per-component health",
    )
    evaluator_configured: bool = Field(
        default=False,
        description="Whether the content evaluator has credentials",
    )
    slack_configured: bool = Field(
        default=False,
        description="Whether a Slack webhook is configured",
    )
    version: str = Field(..., description="Service version")


# Selection models


class SelectionRunRequest(BaseModel):
    """Request model for triggering the daily selection run."""

    date: str | None = Field(
        default=None,
        description="Issue date (YYYY-MM-DD); defaults to today in the configured timezone",
    )
    force: bool = Field(
        default=False,
        description="Run even if the daily-run guard already recorded this date",
    )


class SelectedItem(BaseModel):
    """One content item chosen by the selector."""

    post_id: str
    title: str
    total_score: int


class PopulateResponse(BaseModel):
    """Outcome of populating a campaign's events."""

    campaign_id: str
    dates: list[str] = Field(..., description="The three calendar days of the event window")
    events_found: int
    links_created: int
    links_existing: int
    links_failed: int
    errors: list[str] = Field(default_factory=list)
    success: bool


class SelectionRunResponse(BaseModel):
    """Outcome of a daily selection run."""

    date: str
    skipped: bool = Field(..., description="True when the run was already claimed for this date")
    success: bool
    campaign_id: str | None = None
    campaign_created: bool = False
    campaign_status: str | None = None
    candidates: int = 0
    evaluated: int = 0
    evaluation_failures: int = 0
    duplicates_removed: int = Field(0, description="Snapshot items dropped as duplicate stories")
    selected: list[SelectedItem] = Field(default_factory=list)
    articles_upserted: int = 0
    articles_deactivated: int = 0
    events: PopulateResponse | None = None
    notified: bool = False
    errors: list[str] = Field(default_factory=list)
    elapsed_seconds: float = 0.0


# Campaign models


class CampaignItem(BaseModel):
    """A newsletter campaign."""

    id: str
    date: str = Field(..., description="Issue date (ISO format)")
    status: str = Field(..., description="draft, in_review, approved, sent, or failed")
    subject_line: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class CampaignStatusRequest(BaseModel):
    """Request model for changing a campaign's status."""

    status: str = Field(..., description="Target status")


class SubjectLineRequest(BaseModel):
    """Request model for setting a campaign's subject line."""

    subject_line: str = Field(..., min_length=1, max_length=300)


class ArticleItem(BaseModel):
    """An article selected into a campaign."""

    id: str
    campaign_id: str
    post_id: str
    headline: str
    body: str = ""
    rank: int | None = None
    is_active: bool
    created_at: str | None = None


class ArticleListResponse(BaseModel):
    """Articles of one campaign."""

    campaign_id: str
    articles: list[ArticleItem]
    total: int


# Event models


class EventItem(BaseModel):
    """A community event."""

    id: int
    title: str
    venue: str | None = None
    start_date: str
    end_date: str | None = None
    active: bool = True


class CampaignEventItem(BaseModel):
    """An event linked to a campaign for one day of its window."""

    id: int | None = None
    campaign_id: str
    event_id: int
    event_date: str
    is_selected: bool
    is_featured: bool
    display_order: int | None = None
    event: EventItem | None = None


class CampaignEventListResponse(BaseModel):
    """Event links of one campaign."""

    campaign_id: str
    events: list[CampaignEventItem]
    total: int


class CampaignEventUpdateRequest(BaseModel):
    """Request model for curating a campaign event link."""

    event_date: str = Field(..., description="Day of the link (YYYY-MM-DD)")
    is_selected: bool | None = None
    is_featured: bool | None = None
    display_order: int | None = Field(default=None, ge=0)


# Rating models


class RatingItem(BaseModel):
    """Component scores and derived total of one content item."""

    post_id: str
    interest_level: int = Field(..., ge=1, le=10)
    local_relevance: int = Field(..., ge=1, le=10)
    community_impact: int = Field(..., ge=1, le=10)
    total_score: int
    weights: list[float] | None = None
    ai_reasoning: str | None = None
    created_at: str | None = None


class RatingResponse(BaseModel):
    """Rating lookup result; ``rated`` is False when the item has no rating."""

    post_id: str
    rated: bool
    rating: RatingItem | None = None


class RecalculationResponse(BaseModel):
    """Outcome of recomputing stored totals."""

    total: int
    updated: int
    skipped: int
    errors: int
    changes: list[dict[str, Any]] = Field(default_factory=list)


# Admin models


class DailyRunStatusResponse(BaseModel):
    """Last recorded run date per scheduled task."""

    tasks: dict[str, str | None]


class GuardResetResponse(BaseModel):
    """Result of resetting a task's daily-run guard."""

    task_key: str
    value: str


# Advertisement models


class AdItem(BaseModel):
    """An advertisement."""

    id: str
    title: str
    body: str = ""
    status: str
    approved_by: str | None = None
    approved_at: str | None = None
    rejection_reason: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class AdApproveRequest(BaseModel):
    """Request model for approving an advertisement."""

    approved_by: str = Field(..., min_length=1, max_length=200)


class AdRejectRequest(BaseModel):
    """Request model for rejecting an advertisement."""

    reason: str | None = Field(default=None, max_length=2000)
