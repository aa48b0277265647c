"""
Campaign Review Service Events

Event publishers for campaign review transitions.
"""

from .models import (
    CampaignReviewEventType,
    CampaignTransitionEventData,
    CampaignSubmittedEventData,
    CampaignApprovedEventData,
    CampaignRejectedEventData,
    CampaignPausedEventData,
    CampaignResumedEventData,
    CampaignCompletedEventData,
    CampaignEditEventData,
)
from .publishers import CampaignReviewEventPublisher

__all__ = [
    # Event Types
    "CampaignReviewEventType",
    # Event Data Models
    "CampaignTransitionEventData",
    "CampaignSubmittedEventData",
    "CampaignApprovedEventData",
    "CampaignRejectedEventData",
    "CampaignPausedEventData",
    "CampaignResumedEventData",
    "CampaignCompletedEventData",
    "CampaignEditEventData",
    # Publishers
    "CampaignReviewEventPublisher",
]
