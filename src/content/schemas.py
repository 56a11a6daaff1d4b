"""Schema definitions for ingested content items.

Maps to the ``rss_posts`` table. Items are immutable after ingestion except
for their campaign association; the optional ``rating`` is joined in from
``post_ratings`` when a snapshot is loaded.

DuplicateGroup is the in-memory form of one ``duplicate_groups`` row and its
``duplicate_posts`` members.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.rating.schemas import Rating


@dataclass
class ContentItem:
    """One ingested post that may become a newsletter article.

    Attributes:
        id: Database identifier.
        title: Post headline from the feed.
        body: Post text (description or full content).
        published_at: Publication timestamp reported by the feed.
        feed_name: Name of the source feed.
        created_at: When the item was ingested.
        campaign_id: Campaign the item is associated with, if any.
        rating: Joined rating, or None when the item is unrated.
    """

    id: str
    title: str
    body: str = ""
    published_at: datetime | None = None
    feed_name: str = ""
    created_at: datetime | None = None
    campaign_id: str | None = None
    rating: Rating | None = None

    @property
    def is_rated(self) -> bool:
        return self.rating is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "feed_name": self.feed_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "campaign_id": self.campaign_id,
            "rating": self.rating.to_dict() if self.rating else None,
        }


@dataclass
class DuplicateGroup:
    """
    Posts that cover the same story.

    Indices point into the list of items that was grouped. The primary post
    stays selectable; the duplicates are dropped from selection.

    Attributes:
        primary_index: Position of the post kept for the story.
        duplicate_indices: Positions of the other posts on the story.
        topic_signature: Short description of the shared story.
    """

    primary_index: int
    duplicate_indices: list[int] = field(default_factory=list)
    topic_signature: str = ""
