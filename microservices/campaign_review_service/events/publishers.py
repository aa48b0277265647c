"""
Campaign Review Event Publishers

Publishes lifecycle and edit-review events to NATS JetStream.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.nats_client import Event, ServiceSource

from ..models import Campaign, CampaignStatus, EditRequest
from .models import (
    CampaignReviewEventType,
    CampaignApprovedEventData,
    CampaignCompletedEventData,
    CampaignEditEventData,
    CampaignPausedEventData,
    CampaignRejectedEventData,
    CampaignResumedEventData,
    CampaignSubmittedEventData,
)

logger = logging.getLogger(__name__)


class CampaignReviewEventPublisher:
    """Publisher for campaign review events"""

    def __init__(self, event_bus=None):
        self.event_bus = event_bus
        self.source = ServiceSource.CAMPAIGN_REVIEW_SERVICE

    async def publish(
        self,
        event_type: CampaignReviewEventType,
        data: Dict[str, Any],
        subject: Optional[str] = None,
    ) -> bool:
        """
        Publish an event to NATS.

        Args:
            event_type: The event type enum
            data: Event data payload
            subject: Optional entity id the event is about

        Returns:
            True if published successfully, False otherwise
        """
        if not self.event_bus:
            logger.debug(f"Event bus not configured, skipping publish: {event_type.value}")
            return False

        try:
            event = Event(
                event_type=event_type,
                source=self.source,
                data=data,
                subject=subject,
            )
            published = await self.event_bus.publish_event(event)
            if published:
                logger.debug(f"Published event: {event_type.value}")
            else:
                logger.warning(f"Event bus did not accept {event_type.value}")
            return bool(published)

        except Exception as e:
            logger.error(f"Failed to publish event {event_type.value}: {e}")
            return False

    @staticmethod
    def _transition_fields(
        campaign: Campaign, previous_status: CampaignStatus, actor_id: str
    ) -> Dict[str, Any]:
        return {
            "campaign_id": campaign.campaign_id,
            "brand_id": campaign.brand_id,
            "title": campaign.title,
            "previous_status": previous_status.value,
            "status": campaign.status.value,
            "actor_id": actor_id,
            "timestamp": datetime.now(timezone.utc),
        }

    # ====================
    # Campaign Lifecycle Events
    # ====================

    async def publish_campaign_submitted(
        self, campaign: Campaign, previous_status: CampaignStatus, actor_id: str
    ) -> bool:
        """Publish campaign.submitted event"""
        data = CampaignSubmittedEventData(
            **self._transition_fields(campaign, previous_status, actor_id),
            budget=campaign.budget,
        )
        return await self.publish(
            CampaignReviewEventType.SUBMITTED, data.model_dump(mode="json"), campaign.campaign_id
        )

    async def publish_campaign_approved(
        self,
        campaign: Campaign,
        previous_status: CampaignStatus,
        actor_id: str,
        notes: Optional[str] = None,
    ) -> bool:
        """Publish campaign.approved event"""
        data = CampaignApprovedEventData(
            **self._transition_fields(campaign, previous_status, actor_id),
            notes=notes,
        )
        return await self.publish(
            CampaignReviewEventType.APPROVED, data.model_dump(mode="json"), campaign.campaign_id
        )

    async def publish_campaign_rejected(
        self,
        campaign: Campaign,
        previous_status: CampaignStatus,
        actor_id: str,
        reasons: str,
        recommendations: str,
    ) -> bool:
        """Publish campaign.rejected event"""
        data = CampaignRejectedEventData(
            **self._transition_fields(campaign, previous_status, actor_id),
            reasons=reasons,
            recommendations=recommendations,
        )
        return await self.publish(
            CampaignReviewEventType.REJECTED, data.model_dump(mode="json"), campaign.campaign_id
        )

    async def publish_campaign_paused(
        self, campaign: Campaign, previous_status: CampaignStatus, actor_id: str, reason: str
    ) -> bool:
        """Publish campaign.paused event"""
        data = CampaignPausedEventData(
            **self._transition_fields(campaign, previous_status, actor_id),
            reason=reason,
        )
        return await self.publish(
            CampaignReviewEventType.PAUSED, data.model_dump(mode="json"), campaign.campaign_id
        )

    async def publish_campaign_resumed(
        self, campaign: Campaign, previous_status: CampaignStatus, actor_id: str
    ) -> bool:
        """Publish campaign.resumed event"""
        data = CampaignResumedEventData(**self._transition_fields(campaign, previous_status, actor_id))
        return await self.publish(
            CampaignReviewEventType.RESUMED, data.model_dump(mode="json"), campaign.campaign_id
        )

    async def publish_campaign_completed(
        self,
        campaign: Campaign,
        previous_status: CampaignStatus,
        actor_id: str,
        reason: Optional[str] = None,
    ) -> bool:
        """Publish campaign.completed event"""
        data = CampaignCompletedEventData(
            **self._transition_fields(campaign, previous_status, actor_id),
            reason=reason,
        )
        return await self.publish(
            CampaignReviewEventType.COMPLETED, data.model_dump(mode="json"), campaign.campaign_id
        )

    # ====================
    # Edit Review Events
    # ====================

    async def publish_edit_event(
        self,
        event_type: CampaignReviewEventType,
        edit: EditRequest,
        actor_id: str,
        notes: Optional[str] = None,
    ) -> bool:
        """Publish one of the campaign.edit.* events"""
        data = CampaignEditEventData(
            edit_id=edit.edit_id,
            campaign_id=edit.campaign_id,
            status=edit.status.value,
            actor_id=actor_id,
            key_changes=edit.key_changes,
            change_reason=edit.change_reason,
            notes=notes,
            timestamp=datetime.now(timezone.utc),
        )
        return await self.publish(event_type, data.model_dump(mode="json"), edit.campaign_id)
