"""Schema definitions for post ratings.

Maps to the ``post_ratings`` table. Only the three component scores are
authoritative; ``total_score`` is derived on every access.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.rating.scoring import compute_total_score, validate_component


@dataclass
class Rating:
    """A quality assessment of one content item.

    Attributes:
        post_id: The rated content item.
        interest_level: How engaging the story is (1-10).
        local_relevance: How relevant to local residents (1-10).
        community_impact: Effect on residents' daily lives (1-10).
        weights: Optional per-component weights applied to the total.
        ai_reasoning: Free-text explanation from the evaluator.
        created_at: When the rating was stored.
    """

    post_id: str
    interest_level: int
    local_relevance: int
    community_impact: int
    weights: tuple[float, float, float] | None = None
    ai_reasoning: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        validate_component("interest_level", self.interest_level)
        validate_component("local_relevance", self.local_relevance)
        validate_component("community_impact", self.community_impact)

    @property
    def components(self) -> tuple[int, int, int]:
        return (self.interest_level, self.local_relevance, self.community_impact)

    @property
    def total_score(self) -> int:
        """Total recomputed from components and weights."""
        return compute_total_score(*self.components, weights=self.weights)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "post_id": self.post_id,
            "interest_level": self.interest_level,
            "local_relevance": self.local_relevance,
            "community_impact": self.community_impact,
            "total_score": self.total_score,
            "weights": list(self.weights) if self.weights else None,
            "ai_reasoning": self.ai_reasoning,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class RecalculationResult:
    """Outcome of rewriting stored totals under the current weights."""

    total: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    changes: list[dict[str, Any]] = field(default_factory=list)
