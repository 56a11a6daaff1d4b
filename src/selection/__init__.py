"""Article selection: top-N ranking and the daily selection run."""

from src.selection.config import SelectionConfig
from src.selection.selector import ScoredItem, select_top_n

__all__ = ["ScoredItem", "SelectionConfig", "select_top_n"]
