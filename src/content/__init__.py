"""Content items ingested from external feeds."""

from src.content.repository import ContentRepository
from src.content.schemas import ContentItem

__all__ = ["ContentItem", "ContentRepository"]
