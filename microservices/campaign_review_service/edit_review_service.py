"""
Edit Review Engine

Brands propose changes to live campaigns as edit requests; reviewers approve
or reject them. A pending edit never touches the live record. Approval applies
the proposed fields and resolves the request in one atomic store operation.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from .campaign_gateway import CampaignStoreGateway
from .edit_diff import (
    build_candidate,
    build_review_summary,
    compute_key_changes,
    proposed_fields,
    snapshot,
)
from .events.models import CampaignReviewEventType
from .events.publishers import CampaignReviewEventPublisher
from .models import (
    CallerIdentity,
    Campaign,
    CampaignStatus,
    EditRequest,
    EditRequestStatus,
    EditReviewSummary,
)
from .protocols import (
    CampaignValidationError,
    EditAlreadyResolvedError,
    EditNotFoundError,
    InvalidTransitionError,
    UnauthorizedError,
)
from .validation import campaign_field_errors, is_blank, raise_for_errors, require_text

logger = logging.getLogger(__name__)


class EditReviewService:
    """Edit request workflow for live campaigns"""

    def __init__(
        self,
        gateway: CampaignStoreGateway,
        event_publisher: Optional[CampaignReviewEventPublisher] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.gateway = gateway
        self.event_publisher = event_publisher
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @staticmethod
    def _require_reviewer(caller: CallerIdentity, action: str) -> None:
        if not caller.is_reviewer:
            raise UnauthorizedError(f"Only reviewers can {action} edit requests")

    @staticmethod
    def _require_live(campaign: Campaign, action: str) -> None:
        if campaign.status != CampaignStatus.ACTIVE:
            raise InvalidTransitionError(
                f"Cannot {action} for campaign {campaign.campaign_id}: "
                f"status is {campaign.status.value}, edits require active",
                current_status=campaign.status,
                requested="edit",
            )

    async def _get_pending(self, edit_id: str) -> EditRequest:
        edit = await self.gateway.get_edit_request(edit_id)
        if edit is None:
            raise EditNotFoundError(f"Edit request not found: {edit_id}")
        if edit.status != EditRequestStatus.PENDING:
            raise EditAlreadyResolvedError(
                f"Edit request {edit_id} is already {edit.status.value}"
            )
        return edit

    async def submit_edit(
        self,
        caller: CallerIdentity,
        campaign_id: str,
        new_data: Dict[str, Any],
        change_reason: Optional[str],
    ) -> EditRequest:
        """Owning brand proposes a change to a live campaign"""
        campaign = await self.gateway.get_campaign(campaign_id)
        if not caller.owns(campaign):
            raise UnauthorizedError(f"Only the owning brand can edit campaign {campaign_id}")
        self._require_live(campaign, "request an edit")
        require_text(change_reason, "change_reason", "Change reason")

        if await self.gateway.has_pending_edit(campaign_id):
            raise CampaignValidationError(
                f"Campaign {campaign_id} already has a pending edit request",
                fields=["campaign_id"],
            )

        new_data = dict(new_data or {})
        candidate = build_candidate(campaign, new_data)
        old_data = snapshot(campaign)
        key_changes = compute_key_changes(old_data, candidate)
        if not key_changes:
            raise CampaignValidationError("Edit request does not change any campaign field", fields=["new_data"])
        raise_for_errors(campaign_field_errors(candidate), "Edit request is invalid")

        edit = EditRequest(
            edit_id=f"edit_{uuid.uuid4().hex[:16]}",
            campaign_id=campaign_id,
            old_data=old_data,
            new_data=new_data,
            change_reason=change_reason,
            requested_by=caller.user_id,
            requested_at=self.clock(),
            key_changes=key_changes,
        )
        created = await self.gateway.create_edit_request(edit)
        logger.info(f"Edit request {created.edit_id} submitted for campaign {campaign_id}: {key_changes}")

        if self.event_publisher:
            await self.event_publisher.publish_edit_event(
                CampaignReviewEventType.EDIT_SUBMITTED, created, caller.user_id
            )
        return created

    async def approve_edit(
        self, caller: CallerIdentity, edit_id: str, notes: Optional[str] = None
    ) -> Tuple[Campaign, EditRequest]:
        """Reviewer approves an edit; the live campaign takes the proposed values"""
        self._require_reviewer(caller, "approve")
        edit = await self._get_pending(edit_id)

        campaign = await self.gateway.get_campaign(edit.campaign_id)
        self._require_live(campaign, "apply an edit")

        candidate = build_candidate(campaign, edit.new_data)
        raise_for_errors(campaign_field_errors(candidate), "Edit request is invalid")

        edit_fields = {
            "status": EditRequestStatus.APPROVED,
            "review_notes": None if is_blank(notes) else notes,
            "reviewed_by": caller.user_id,
            "reviewed_at": self.clock(),
        }
        updated, resolved = await self.gateway.apply_edit_request(
            edit, campaign, proposed_fields(candidate, edit.new_data), edit_fields
        )
        logger.info(f"Edit request {edit_id} approved; campaign {campaign.campaign_id} updated")

        if self.event_publisher:
            await self.event_publisher.publish_edit_event(
                CampaignReviewEventType.EDIT_APPROVED, resolved, caller.user_id, notes=edit_fields["review_notes"]
            )
        return updated, resolved

    async def reject_edit(
        self, caller: CallerIdentity, edit_id: str, reason: Optional[str]
    ) -> EditRequest:
        """Reviewer rejects an edit; the live campaign is left untouched"""
        self._require_reviewer(caller, "reject")
        require_text(reason, "reason", "Rejection reason")
        await self._get_pending(edit_id)

        resolved = await self.gateway.update_edit_request(
            edit_id,
            {
                "status": EditRequestStatus.REJECTED,
                "rejection_reason": reason,
                "reviewed_by": caller.user_id,
                "reviewed_at": self.clock(),
            },
        )
        logger.info(f"Edit request {edit_id} rejected")

        if self.event_publisher:
            await self.event_publisher.publish_edit_event(
                CampaignReviewEventType.EDIT_REJECTED, resolved, caller.user_id, notes=reason
            )
        return resolved

    async def list_pending_edits(self, caller: CallerIdentity) -> List[EditRequest]:
        self._require_reviewer(caller, "list")
        return await self.gateway.list_edit_requests(EditRequestStatus.PENDING)

    async def get_review_summary(self, caller: CallerIdentity, edit_id: str) -> EditReviewSummary:
        self._require_reviewer(caller, "review")
        edit = await self.gateway.get_edit_request(edit_id)
        if edit is None:
            raise EditNotFoundError(f"Edit request not found: {edit_id}")
        return build_review_summary(edit)
