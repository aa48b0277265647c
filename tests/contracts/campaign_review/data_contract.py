"""
Campaign Review Service Data Contract

Re-exports the service models and provides test data factories for the
Campaign Review Service. Store rows are produced in the shape the PostgreSQL
repository returns them, including legacy spellings where a test asks for
them.

All tests MUST use these models and factories.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4
import random

from microservices.campaign_review_service.models import (
    # Enums
    CampaignStatus,
    ContentType,
    EditRequestStatus,
    CreatorParticipationStatus,
    UserRole,
    LifecycleEvent,
    CampaignListType,
    DataProvenance,
    # Records
    PerContentTypeText,
    PerContentTypeList,
    PayoutRate,
    BudgetAllocation,
    ViewTargets,
    CampaignMetrics,
    RejectionFeedback,
    Campaign,
    CampaignCreator,
    EditRequest,
    CallerIdentity,
    # Read results
    CampaignPage,
    CampaignCollection,
    CampaignDetail,
    EditReviewSummary,
)


# Fixed clock used by services under test
FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class CampaignReviewTestDataFactory:
    """Factory for generating test data for campaign review tests

    Usage:
        factory = CampaignReviewTestDataFactory()
        row = factory.make_campaign_row(status="pending-approval")
        campaign = factory.make_campaign(status=CampaignStatus.ACTIVE)
        admin = factory.make_admin()
    """

    @staticmethod
    def make_campaign_id() -> str:
        """Generate campaign ID"""
        return f"cmp_{uuid4().hex[:16]}"

    @staticmethod
    def make_brand_id() -> str:
        """Generate brand ID"""
        return f"brand_{uuid4().hex[:12]}"

    @staticmethod
    def make_user_id() -> str:
        """Generate user ID"""
        return f"usr_{uuid4().hex[:16]}"

    @staticmethod
    def make_creator_id() -> str:
        return f"crt_{uuid4().hex[:16]}"

    @staticmethod
    def make_edit_id() -> str:
        return f"edit_{uuid4().hex[:16]}"

    @staticmethod
    def make_title() -> str:
        """Generate random campaign title"""
        adjectives = ["Summer", "Holiday", "Launch", "Spring", "Creator", "Weekend"]
        nouns = ["Drop", "Challenge", "Showcase", "Collab", "Series"]
        return f"{random.choice(adjectives)} {random.choice(nouns)} {random.randint(1, 100)}"

    # ====================
    # Callers
    # ====================

    @classmethod
    def make_admin(cls, user_id: Optional[str] = None) -> CallerIdentity:
        return CallerIdentity(user_id=user_id or cls.make_user_id(), role=UserRole.ADMIN)

    @classmethod
    def make_brand(cls, brand_id: str) -> CallerIdentity:
        return CallerIdentity(user_id=cls.make_user_id(), role=UserRole.BRAND, brand_id=brand_id)

    @classmethod
    def make_creator_caller(cls) -> CallerIdentity:
        return CallerIdentity(user_id=cls.make_user_id(), role=UserRole.CREATOR)

    # ====================
    # Store rows
    # ====================

    @classmethod
    def make_campaign_row(cls, **overrides: Any) -> Dict[str, Any]:
        """
        A campaign row as the repository returns it.

        Defaults describe a submittable draft starting in the future relative
        to FIXED_NOW.
        """
        start = FIXED_NOW.date() + timedelta(days=7)
        row = {
            "campaign_id": cls.make_campaign_id(),
            "brand_id": cls.make_brand_id(),
            "brand_name": "Acme Outdoors",
            "title": cls.make_title(),
            "brief": {"original": "Show the product in use", "repurposed": None},
            "content_type": "original",
            "budget": 5000,
            "platforms": ["tiktok"],
            "start_date": start,
            "end_date": start + timedelta(days=30),
            "content_guidelines": {"original": ["Keep it under 60s"], "repurposed": []},
            "hashtags": {"original": ["#acme"], "repurposed": []},
            "payout_rate": {"original": 500, "repurposed": 250},
            "min_views_for_payout": 1000,
            "budget_allocation": {"original": 70, "repurposed": 30},
            "status": "draft",
            "rejection_feedback": None,
            "pause_reason": None,
            "approval_notes": None,
            "completion_reason": None,
            "reviewed_by": None,
            "reviewed_at": None,
            "metrics": {"views": 0, "engagement": 0.0, "creators_joined": 0},
            "created_at": FIXED_NOW - timedelta(days=1),
            "updated_at": FIXED_NOW - timedelta(days=1),
        }
        row.update(overrides)
        return row

    @classmethod
    def make_creator_row(
        cls, campaign_id: str, status: str = "active", **overrides: Any
    ) -> Dict[str, Any]:
        row = {
            "creator_id": cls.make_creator_id(),
            "campaign_id": campaign_id,
            "creator_name": "Test Creator",
            "status": status,
            "platforms": ["tiktok"],
            "joined_at": FIXED_NOW - timedelta(days=2),
        }
        row.update(overrides)
        return row

    @classmethod
    def make_edit_row(cls, campaign_id: str, **overrides: Any) -> Dict[str, Any]:
        row = {
            "edit_id": cls.make_edit_id(),
            "campaign_id": campaign_id,
            "old_data": {"title": "Old title", "budget": 5000},
            "new_data": {"title": "New title"},
            "change_reason": "Rebrand",
            "requested_by": cls.make_user_id(),
            "requested_at": FIXED_NOW - timedelta(hours=1),
            "key_changes": ["title"],
            "status": "pending",
            "review_notes": None,
            "rejection_reason": None,
            "reviewed_by": None,
            "reviewed_at": None,
        }
        row.update(overrides)
        return row

    # ====================
    # Models
    # ====================

    @classmethod
    def make_campaign(cls, **overrides: Any) -> Campaign:
        """Canonical campaign model with sensible defaults"""
        start = FIXED_NOW.date() + timedelta(days=7)
        values = {
            "campaign_id": cls.make_campaign_id(),
            "brand_id": cls.make_brand_id(),
            "title": cls.make_title(),
            "budget": 5000,
            "platforms": ["tiktok"],
            "start_date": start,
            "end_date": start + timedelta(days=30),
            "status": CampaignStatus.ACTIVE,
            "created_at": FIXED_NOW,
            "updated_at": FIXED_NOW,
        }
        values.update(overrides)
        return Campaign(**values)

    @classmethod
    def make_collection(
        cls,
        list_type: CampaignListType,
        campaigns: Optional[List[Campaign]] = None,
        **overrides: Any,
    ) -> CampaignCollection:
        campaigns = campaigns if campaigns is not None else [cls.make_campaign()]
        values = {
            "list_type": list_type,
            "campaigns": campaigns,
            "total": len(campaigns),
        }
        values.update(overrides)
        return CampaignCollection(**values)


__all__ = [
    "FIXED_NOW",
    "CampaignReviewTestDataFactory",
    "CampaignStatus",
    "ContentType",
    "EditRequestStatus",
    "CreatorParticipationStatus",
    "UserRole",
    "LifecycleEvent",
    "CampaignListType",
    "DataProvenance",
    "PerContentTypeText",
    "PerContentTypeList",
    "PayoutRate",
    "BudgetAllocation",
    "ViewTargets",
    "CampaignMetrics",
    "RejectionFeedback",
    "Campaign",
    "CampaignCreator",
    "EditRequest",
    "CallerIdentity",
    "CampaignPage",
    "CampaignCollection",
    "CampaignDetail",
    "EditReviewSummary",
]
