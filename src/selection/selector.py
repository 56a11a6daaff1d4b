"""Top-N selection over a snapshot of content items.

Pure functions: no I/O, no mutation of the input. Items without a rating are
never selectable; ties on total score keep their input order.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from src.content.schemas import ContentItem
from src.core.errors import ValidationError
from src.rating.scoring import compute_total_score

DEFAULT_TOP_N = 10


@dataclass(frozen=True)
class ScoredItem:
    """A selected content item paired with the total it was ranked by."""

    item: ContentItem
    total_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "post_id": self.item.id,
            "title": self.item.title,
            "total_score": self.total_score,
        }


def score_items(
    items: Iterable[ContentItem],
    weights: Sequence[float] | None = None,
) -> list[ScoredItem]:
    """Pair every rated item with its total, dropping unrated items.

    When ``weights`` is given the total is recomputed from the components
    with those weights; otherwise the rating's own weighting applies.
    """
    scored = []
    for item in items:
        rating = item.rating
        if rating is None:
            continue
        if weights is None:
            total = rating.total_score
        else:
            total = compute_total_score(*rating.components, weights=weights)
        scored.append(ScoredItem(item=item, total_score=total))
    return scored


def select_top_n(
    items: Iterable[ContentItem],
    n: int = DEFAULT_TOP_N,
    weights: Sequence[float] | None = None,
) -> list[ScoredItem]:
    """Return at most ``n`` rated items, highest total first.

    ``sorted`` is stable, so equal totals stay in input order.

    Raises:
        ValidationError: If ``n`` is negative.
    """
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise ValidationError(f"n must be a non-negative integer, got {n!r}")
    if n == 0:
        return []

    scored = score_items(items, weights=weights)
    ranked = sorted(scored, key=lambda s: s.total_score, reverse=True)
    return ranked[:n]
