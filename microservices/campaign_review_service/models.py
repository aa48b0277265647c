"""
Campaign Review Service Data Models

Canonical data structures for the campaign review console. Every record read
from the store is converted into these models exactly once, at the gateway.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from .calculations import (
    DEFAULT_ORIGINAL_ALLOCATION,
    DEFAULT_ORIGINAL_RATE,
    DEFAULT_REPURPOSED_ALLOCATION,
    DEFAULT_REPURPOSED_RATE,
    compute_view_targets,
)


# =============================================================================
# ENUMS
# =============================================================================

class CampaignStatus(str, Enum):
    """Campaign lifecycle status"""
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    REJECTED = "rejected"


class ContentType(str, Enum):
    """Kind of content creators produce for a campaign"""
    ORIGINAL = "original"
    REPURPOSED = "repurposed"
    BOTH = "both"


class EditRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CreatorParticipationStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"


class UserRole(str, Enum):
    """Caller roles supplied by the identity provider"""
    ADMIN = "admin"
    BRAND = "brand"
    CREATOR = "creator"


class LifecycleEvent(str, Enum):
    """Events accepted by the lifecycle state machine"""
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    PAUSE = "pause"
    RESUME = "resume"
    COMPLETE = "complete"


class CampaignListType(str, Enum):
    """Console list tabs"""
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class DataProvenance(str, Enum):
    """Where the data shown for a record came from"""
    LIVE = "live"
    STALE = "stale"
    MOCK = "mock"


# =============================================================================
# BASE MODELS
# =============================================================================

class BaseContract(BaseModel):
    """Base model for all contracts"""

    model_config = {
        "from_attributes": True,
    }


class RecordContract(BaseContract):
    """Base model for immutable store records"""

    model_config = {
        "from_attributes": True,
        "frozen": True,
    }


# =============================================================================
# CAMPAIGN MODELS
# =============================================================================

class PerContentTypeText(RecordContract):
    """Free text kept separately for original and repurposed content"""
    original: Optional[str] = None
    repurposed: Optional[str] = None


class PerContentTypeList(RecordContract):
    """List values (guidelines, hashtags) kept per content type"""
    original: List[str] = Field(default_factory=list)
    repurposed: List[str] = Field(default_factory=list)


class PayoutRate(RecordContract):
    """Currency paid per 1,000,000 views"""
    original: int = Field(default=DEFAULT_ORIGINAL_RATE, ge=0)
    repurposed: int = Field(default=DEFAULT_REPURPOSED_RATE, ge=0)


class BudgetAllocation(RecordContract):
    """Budget split in percent; only meaningful for ``both`` campaigns"""
    original: int = Field(default=DEFAULT_ORIGINAL_ALLOCATION, ge=0, le=100)
    repurposed: int = Field(default=DEFAULT_REPURPOSED_ALLOCATION, ge=0, le=100)

    @property
    def total(self) -> int:
        return self.original + self.repurposed


class ViewTargets(RecordContract):
    total: int = 0
    original: int = 0
    repurposed: int = 0


class CampaignMetrics(RecordContract):
    """Opaque performance aggregates"""
    views: int = 0
    engagement: float = 0.0
    creators_joined: int = 0
    posts_submitted: int = 0
    posts_approved: int = 0


class RejectionFeedback(RecordContract):
    """Structured reviewer feedback stored on rejection"""
    reasons: str
    recommendations: str


class Campaign(RecordContract):
    """Canonical campaign record"""
    campaign_id: str
    brand_id: str
    brand_name: Optional[str] = None
    title: str = ""
    brief: PerContentTypeText = Field(default_factory=PerContentTypeText)
    content_type: ContentType = ContentType.ORIGINAL
    budget: int = 0
    platforms: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    # Requirements
    content_guidelines: PerContentTypeList = Field(default_factory=PerContentTypeList)
    hashtags: PerContentTypeList = Field(default_factory=PerContentTypeList)
    payout_rate: PayoutRate = Field(default_factory=PayoutRate)
    min_views_for_payout: int = 0
    budget_allocation: BudgetAllocation = Field(default_factory=BudgetAllocation)

    # Lifecycle
    status: CampaignStatus = CampaignStatus.DRAFT
    rejection_feedback: Optional[RejectionFeedback] = None
    pause_reason: Optional[str] = None
    approval_notes: Optional[str] = None
    completion_reason: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    metrics: CampaignMetrics = Field(default_factory=CampaignMetrics)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field
    @property
    def view_targets(self) -> ViewTargets:
        targets = compute_view_targets(
            budget=self.budget,
            content_type=self.content_type.value,
            original_rate=self.payout_rate.original,
            repurposed_rate=self.payout_rate.repurposed,
            original_allocation=self.budget_allocation.original,
            repurposed_allocation=self.budget_allocation.repurposed,
        )
        return ViewTargets(**targets)

    @property
    def display_brand_name(self) -> str:
        return self.brand_name or f"Brand {self.brand_id[:6]}"


class CampaignCreator(RecordContract):
    """Join record between a creator and a campaign"""
    creator_id: str
    campaign_id: str
    creator_name: Optional[str] = None
    status: CreatorParticipationStatus = CreatorParticipationStatus.PENDING
    platforms: List[str] = Field(default_factory=list)
    joined_at: Optional[datetime] = None


class EditRequest(RecordContract):
    """Brand-proposed change to a live campaign"""
    edit_id: str
    campaign_id: str
    old_data: Dict[str, Any] = Field(default_factory=dict)
    new_data: Dict[str, Any] = Field(default_factory=dict)
    change_reason: str
    requested_by: str
    requested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    key_changes: List[str] = Field(default_factory=list)
    status: EditRequestStatus = EditRequestStatus.PENDING
    review_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None


class CallerIdentity(BaseContract):
    """Caller identity and role supplied by the identity provider"""
    user_id: str
    role: UserRole
    brand_id: Optional[str] = None

    @property
    def is_reviewer(self) -> bool:
        return self.role == UserRole.ADMIN

    def owns(self, campaign: Campaign) -> bool:
        return self.role == UserRole.BRAND and (self.brand_id or self.user_id) == campaign.brand_id


# =============================================================================
# READ RESULTS (provenance lives here, never on Campaign)
# =============================================================================

class CampaignPage(BaseContract):
    """One page of campaigns straight from the store"""
    campaigns: List[Campaign] = Field(default_factory=list)
    total: int = 0


class CampaignCollection(BaseContract):
    """A list read as served to the console, with provenance flags"""
    list_type: CampaignListType
    campaigns: List[Campaign] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 25
    search: Optional[str] = None
    is_stale: bool = False
    is_mock_data: bool = False
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def provenance(self) -> DataProvenance:
        if self.is_mock_data:
            return DataProvenance.MOCK
        if self.is_stale:
            return DataProvenance.STALE
        return DataProvenance.LIVE

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total


class CampaignDetail(BaseContract):
    """A campaign with its creator join records, with provenance flags"""
    campaign: Campaign
    creators: List[CampaignCreator] = Field(default_factory=list)
    is_stale: bool = False
    is_mock_data: bool = False

    @property
    def provenance(self) -> DataProvenance:
        if self.is_mock_data:
            return DataProvenance.MOCK
        if self.is_stale:
            return DataProvenance.STALE
        return DataProvenance.LIVE


class EditReviewSummary(BaseContract):
    """Reviewer-facing view of an edit request"""
    edit_id: str
    campaign_id: str
    key_changes: List[str] = Field(default_factory=list)
    platforms: List[str] = Field(default_factory=list)
    content_guidelines: Dict[str, List[str]] = Field(default_factory=dict)
    hashtags: Dict[str, List[str]] = Field(default_factory=dict)
    min_views_for_payout: Optional[int] = None
    total_budget: int = 0
    change_reason: str = ""


# =============================================================================
# REQUEST MODELS
# =============================================================================
# Required text fields are Optional here so that missing values reach the
# engines and surface as CampaignValidationError rather than a framework 422.

class ApproveCampaignRequest(BaseContract):
    notes: Optional[str] = None


class RejectCampaignRequest(BaseContract):
    reasons: Optional[str] = None
    recommendations: Optional[str] = None


class PauseCampaignRequest(BaseContract):
    reason: Optional[str] = None


class CompleteCampaignRequest(BaseContract):
    reason: Optional[str] = None


class SubmitEditRequest(BaseContract):
    new_data: Dict[str, Any] = Field(default_factory=dict)
    change_reason: Optional[str] = None


class ApproveEditRequest(BaseContract):
    notes: Optional[str] = None


class RejectEditRequest(BaseContract):
    reason: Optional[str] = None


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class CampaignResponse(BaseContract):
    campaign: Campaign
    message: Optional[str] = None


class EditRequestResponse(BaseContract):
    edit_request: EditRequest
    campaign: Optional[Campaign] = None
    message: Optional[str] = None


class EditRequestListResponse(BaseContract):
    edit_requests: List[EditRequest] = Field(default_factory=list)
    total: int = 0


class HealthResponse(BaseContract):
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseContract):
    detail: str
    error_code: str
