"""Newsletter campaigns, their lifecycle and selected articles."""

from src.campaigns.repository import CampaignRepository
from src.campaigns.schemas import Article, Campaign, CampaignStatus
from src.campaigns.transitions import CAMPAIGN_TRANSITIONS, validate_transition

__all__ = [
    "Article",
    "CAMPAIGN_TRANSITIONS",
    "Campaign",
    "CampaignRepository",
    "CampaignStatus",
    "validate_transition",
]
