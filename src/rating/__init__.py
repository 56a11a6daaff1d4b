"""Content ratings: component scores, weighted totals and the rating store."""

from src.rating.accessor import RatingAccessor
from src.rating.config import RatingConfig
from src.rating.schemas import Rating, RecalculationResult
from src.rating.scoring import compute_total_score, parse_weights

__all__ = [
    "Rating",
    "RatingAccessor",
    "RatingConfig",
    "RecalculationResult",
    "compute_total_score",
    "parse_weights",
]
