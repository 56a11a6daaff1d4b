"""Advertisement review workflow."""

from src.ads.repository import AdRepository
from src.ads.schemas import AD_TRANSITIONS, AdStatus, Advertisement

__all__ = ["AD_TRANSITIONS", "AdRepository", "AdStatus", "Advertisement"]
