"""
Campaign Lifecycle Engine

Owns the campaign state machine. Every transition validates its input,
reads the live record, checks the caller's role and the transition table and
then performs exactly one store write. A campaign with a pending edit request
cannot be approved, paused or completed until that edit is resolved. Write
failures surface to the caller; nothing here retries or falls back to cached
data.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from .campaign_gateway import CampaignStoreGateway
from .events.publishers import CampaignReviewEventPublisher
from .models import (
    CallerIdentity,
    Campaign,
    CampaignStatus,
    LifecycleEvent,
    RejectionFeedback,
)
from .protocols import InvalidTransitionError, UnauthorizedError
from .validation import (
    MIN_BUDGET,
    campaign_field_errors,
    is_blank,
    raise_for_errors,
    require_text,
)

logger = logging.getLogger(__name__)


class CampaignLifecycleService:
    """Campaign lifecycle state machine"""

    MIN_BUDGET = MIN_BUDGET

    # event -> (allowed source statuses, target status)
    TRANSITIONS: Dict[LifecycleEvent, Tuple[Tuple[CampaignStatus, ...], CampaignStatus]] = {
        LifecycleEvent.SUBMIT: ((CampaignStatus.DRAFT,), CampaignStatus.PENDING_APPROVAL),
        LifecycleEvent.APPROVE: ((CampaignStatus.PENDING_APPROVAL,), CampaignStatus.ACTIVE),
        LifecycleEvent.REJECT: ((CampaignStatus.PENDING_APPROVAL,), CampaignStatus.REJECTED),
        LifecycleEvent.PAUSE: ((CampaignStatus.ACTIVE,), CampaignStatus.PAUSED),
        LifecycleEvent.RESUME: ((CampaignStatus.PAUSED,), CampaignStatus.ACTIVE),
        LifecycleEvent.COMPLETE: (
            (CampaignStatus.ACTIVE, CampaignStatus.PAUSED),
            CampaignStatus.COMPLETED,
        ),
    }

    REVIEWER_EVENTS = frozenset({
        LifecycleEvent.APPROVE,
        LifecycleEvent.REJECT,
        LifecycleEvent.PAUSE,
        LifecycleEvent.RESUME,
        LifecycleEvent.COMPLETE,
    })

    def __init__(
        self,
        gateway: CampaignStoreGateway,
        event_publisher: Optional[CampaignReviewEventPublisher] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.gateway = gateway
        self.event_publisher = event_publisher
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # ====================
    # State machine
    # ====================

    @classmethod
    def can_transition(cls, status: CampaignStatus, event: LifecycleEvent) -> bool:
        sources, _ = cls.TRANSITIONS[event]
        return status in sources

    @classmethod
    def target_status(cls, event: LifecycleEvent) -> CampaignStatus:
        return cls.TRANSITIONS[event][1]

    def _check_transition(self, campaign: Campaign, event: LifecycleEvent) -> CampaignStatus:
        sources, target = self.TRANSITIONS[event]
        if campaign.status in sources:
            return target

        if campaign.status == target:
            message = (
                f"Cannot {event.value} campaign {campaign.campaign_id}: "
                f"it is already {campaign.status.value}"
            )
        else:
            allowed = ", ".join(status.value for status in sources)
            message = (
                f"Cannot {event.value} campaign {campaign.campaign_id}: "
                f"status is {campaign.status.value}, {target.value} requires {allowed}"
            )
        raise InvalidTransitionError(message, current_status=campaign.status, requested=target.value)

    def _authorize(self, caller: CallerIdentity, event: LifecycleEvent, campaign: Campaign) -> None:
        if event in self.REVIEWER_EVENTS:
            if not caller.is_reviewer:
                raise UnauthorizedError(f"Only reviewers can {event.value} campaigns")
        elif not caller.owns(campaign):
            raise UnauthorizedError(
                f"Only the owning brand can {event.value} campaign {campaign.campaign_id}"
            )

    async def _begin(
        self, caller: CallerIdentity, campaign_id: str, event: LifecycleEvent
    ) -> Tuple[Campaign, CampaignStatus]:
        campaign = await self.gateway.get_campaign(campaign_id)
        self._authorize(caller, event, campaign)
        target = self._check_transition(campaign, event)
        return campaign, target

    async def _refuse_pending_edit(
        self, campaign: Campaign, event: LifecycleEvent, target: CampaignStatus
    ) -> None:
        if await self.gateway.has_pending_edit(campaign.campaign_id):
            raise InvalidTransitionError(
                f"Cannot {event.value} campaign {campaign.campaign_id}: it has a pending edit request",
                current_status=campaign.status,
                requested=target.value,
            )

    def _review_fields(self, caller: CallerIdentity) -> Dict[str, Any]:
        return {"reviewed_by": caller.user_id, "reviewed_at": self.clock()}

    async def _commit(
        self, campaign: Campaign, event: LifecycleEvent, fields: Dict[str, Any]
    ) -> Campaign:
        updated = await self.gateway.write_campaign(campaign, fields)
        logger.info(
            f"Campaign {campaign.campaign_id} {event.value}: "
            f"{campaign.status.value} -> {updated.status.value}"
        )
        return updated

    # ====================
    # Transitions
    # ====================

    async def submit(self, caller: CallerIdentity, campaign_id: str) -> Campaign:
        """Brand submits a draft for review"""
        campaign, target = await self._begin(caller, campaign_id, LifecycleEvent.SUBMIT)

        today = self.clock().date()
        raise_for_errors(campaign_field_errors(campaign, today=today), "Campaign cannot be submitted")

        updated = await self._commit(campaign, LifecycleEvent.SUBMIT, {"status": target})
        if self.event_publisher:
            await self.event_publisher.publish_campaign_submitted(updated, campaign.status, caller.user_id)
        return updated

    async def approve(
        self, caller: CallerIdentity, campaign_id: str, notes: Optional[str] = None
    ) -> Campaign:
        """Reviewer approves a pending campaign; it goes live"""
        campaign, target = await self._begin(caller, campaign_id, LifecycleEvent.APPROVE)
        await self._refuse_pending_edit(campaign, LifecycleEvent.APPROVE, target)

        fields = {
            "status": target,
            "approval_notes": None if is_blank(notes) else notes,
            "rejection_feedback": None,
            **self._review_fields(caller),
        }
        updated = await self._commit(campaign, LifecycleEvent.APPROVE, fields)
        if self.event_publisher:
            await self.event_publisher.publish_campaign_approved(
                updated, campaign.status, caller.user_id, notes=fields["approval_notes"]
            )
        return updated

    async def reject(
        self,
        caller: CallerIdentity,
        campaign_id: str,
        reasons: Optional[str],
        recommendations: Optional[str],
    ) -> Campaign:
        """Reviewer rejects a pending campaign with structured feedback"""
        missing = [
            name for name, value in (("reasons", reasons), ("recommendations", recommendations))
            if is_blank(value)
        ]
        if missing:
            raise_for_errors(
                [(name, f"rejection {name} are required") for name in missing],
                "Campaign cannot be rejected",
            )

        campaign, target = await self._begin(caller, campaign_id, LifecycleEvent.REJECT)

        feedback = RejectionFeedback(reasons=reasons, recommendations=recommendations)
        fields = {
            "status": target,
            "rejection_feedback": feedback,
            **self._review_fields(caller),
        }
        updated = await self._commit(campaign, LifecycleEvent.REJECT, fields)
        if self.event_publisher:
            await self.event_publisher.publish_campaign_rejected(
                updated, campaign.status, caller.user_id, reasons, recommendations
            )
        return updated

    async def pause(self, caller: CallerIdentity, campaign_id: str, reason: Optional[str]) -> Campaign:
        """Reviewer pauses a live campaign"""
        require_text(reason, "pause_reason", "Pause reason")
        campaign, target = await self._begin(caller, campaign_id, LifecycleEvent.PAUSE)
        await self._refuse_pending_edit(campaign, LifecycleEvent.PAUSE, target)

        fields = {"status": target, "pause_reason": reason, **self._review_fields(caller)}
        updated = await self._commit(campaign, LifecycleEvent.PAUSE, fields)
        if self.event_publisher:
            await self.event_publisher.publish_campaign_paused(updated, campaign.status, caller.user_id, reason)
        return updated

    async def resume(self, caller: CallerIdentity, campaign_id: str) -> Campaign:
        """Reviewer resumes a paused campaign"""
        campaign, target = await self._begin(caller, campaign_id, LifecycleEvent.RESUME)

        fields = {"status": target, "pause_reason": None, **self._review_fields(caller)}
        updated = await self._commit(campaign, LifecycleEvent.RESUME, fields)
        if self.event_publisher:
            await self.event_publisher.publish_campaign_resumed(updated, campaign.status, caller.user_id)
        return updated

    async def complete(
        self, caller: CallerIdentity, campaign_id: str, reason: Optional[str] = None
    ) -> Campaign:
        """Reviewer ends a live or paused campaign"""
        campaign, target = await self._begin(caller, campaign_id, LifecycleEvent.COMPLETE)
        await self._refuse_pending_edit(campaign, LifecycleEvent.COMPLETE, target)

        fields = {
            "status": target,
            "completion_reason": None if is_blank(reason) else reason,
            **self._review_fields(caller),
        }
        updated = await self._commit(campaign, LifecycleEvent.COMPLETE, fields)
        if self.event_publisher:
            await self.event_publisher.publish_campaign_completed(
                updated, campaign.status, caller.user_id, reason=fields["completion_reason"]
            )
        return updated

    async def apply(
        self, caller: CallerIdentity, campaign_id: str, event: LifecycleEvent, **payload: Any
    ) -> Campaign:
        """Dispatch a lifecycle event by name"""
        handlers = {
            LifecycleEvent.SUBMIT: self.submit,
            LifecycleEvent.APPROVE: self.approve,
            LifecycleEvent.REJECT: self.reject,
            LifecycleEvent.PAUSE: self.pause,
            LifecycleEvent.RESUME: self.resume,
            LifecycleEvent.COMPLETE: self.complete,
        }
        return await handlers[event](caller, campaign_id, **payload)
