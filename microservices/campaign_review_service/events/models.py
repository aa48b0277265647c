"""
Campaign Review Event Data Models

Event type definitions and data structures for campaign review events.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Event Type Definitions
# =============================================================================


class CampaignReviewEventType(str, Enum):
    """
    Events published by campaign_review_service.

    Other services (notifications, brand dashboards) subscribe to these.
    """
    # Campaign lifecycle events
    SUBMITTED = "campaign.submitted"
    APPROVED = "campaign.approved"
    REJECTED = "campaign.rejected"
    PAUSED = "campaign.paused"
    RESUMED = "campaign.resumed"
    COMPLETED = "campaign.completed"

    # Edit review events
    EDIT_SUBMITTED = "campaign.edit.submitted"
    EDIT_APPROVED = "campaign.edit.approved"
    EDIT_REJECTED = "campaign.edit.rejected"


# =============================================================================
# Event Data Models
# =============================================================================


class CampaignTransitionEventData(BaseModel):
    """Common payload of every lifecycle transition"""
    campaign_id: str = Field(..., description="Campaign ID")
    brand_id: str = Field(..., description="Owning brand")
    title: str = Field(..., description="Campaign title")
    previous_status: str = Field(..., description="Status before the transition")
    status: str = Field(..., description="Status after the transition")
    actor_id: str = Field(..., description="Caller who performed the transition")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


class CampaignSubmittedEventData(CampaignTransitionEventData):
    """campaign.submitted event data"""
    budget: int = Field(..., description="Submitted budget")


class CampaignApprovedEventData(CampaignTransitionEventData):
    """campaign.approved event data"""
    notes: Optional[str] = Field(None, description="Reviewer notes")


class CampaignRejectedEventData(CampaignTransitionEventData):
    """campaign.rejected event data"""
    reasons: str = Field(..., description="Why the campaign was rejected")
    recommendations: str = Field(..., description="What the brand should change")


class CampaignPausedEventData(CampaignTransitionEventData):
    """campaign.paused event data"""
    reason: str = Field(..., description="Pause reason")


class CampaignResumedEventData(CampaignTransitionEventData):
    """campaign.resumed event data"""


class CampaignCompletedEventData(CampaignTransitionEventData):
    """campaign.completed event data"""
    reason: Optional[str] = Field(None, description="Completion reason")


class CampaignEditEventData(BaseModel):
    """campaign.edit.* event data"""
    edit_id: str = Field(..., description="Edit request ID")
    campaign_id: str = Field(..., description="Campaign ID")
    status: str = Field(..., description="Edit request status")
    actor_id: str = Field(..., description="Caller who acted on the edit")
    key_changes: List[str] = Field(default_factory=list, description="Changed fields")
    change_reason: Optional[str] = Field(None, description="Brand's reason for the edit")
    notes: Optional[str] = Field(None, description="Reviewer notes or rejection reason")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")
