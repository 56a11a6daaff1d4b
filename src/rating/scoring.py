"""Total score computation from rating components.

The total is always derived from (interest_level, local_relevance,
community_impact). Equal weighting is a plain sum; configured weights give a
weighted sum rounded half-up to the nearest integer.
"""

import math
from typing import Sequence

from src.core.errors import ValidationError

COMPONENT_MIN = 1
COMPONENT_MAX = 10
COMPONENT_NAMES = ("interest_level", "local_relevance", "community_impact")


def validate_component(name: str, value: object) -> int:
    """Return ``value`` as an int if it is an integer within 1..10."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if not COMPONENT_MIN <= value <= COMPONENT_MAX:
        raise ValidationError(
            f"{name} must be between {COMPONENT_MIN} and {COMPONENT_MAX}, got {value}"
        )
    return value


def parse_weights(raw: str | Sequence[float] | None) -> tuple[float, float, float] | None:
    """Parse ``"2,1,1"`` (or a 3-sequence) into a weight triple.

    Empty or None means equal weighting and returns None.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
        try:
            parts = [float(p) for p in raw.split(",")]
        except ValueError as e:
            raise ValidationError(f"Malformed weights {raw!r}") from e
    else:
        parts = [float(p) for p in raw]

    if len(parts) != len(COMPONENT_NAMES):
        raise ValidationError(
            f"Expected {len(COMPONENT_NAMES)} weights, got {len(parts)}"
        )
    if any(p < 0 or math.isnan(p) for p in parts):
        raise ValidationError("Weights must be non-negative numbers")
    return (parts[0], parts[1], parts[2])


def compute_total_score(
    interest_level: int,
    local_relevance: int,
    community_impact: int,
    weights: Sequence[float] | None = None,
) -> int:
    """Compute the total score for one rating.

    Examples:
        >>> compute_total_score(7, 8, 9)
        24
        >>> compute_total_score(7, 8, 9, weights=(2, 1, 1))
        31
    """
    components = (
        validate_component("interest_level", interest_level),
        validate_component("local_relevance", local_relevance),
        validate_component("community_impact", community_impact),
    )
    if weights is None:
        return sum(components)

    w = parse_weights(weights)
    weighted = sum(c * wt for c, wt in zip(components, w))
    return math.floor(weighted + 0.5)
