"""
NATS JetStream Client for the Campaign Review Console

Publishes lifecycle notifications to the notification runtime using nats-py.
"""

import json
import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

import nats
from nats.aio.client import Client as NATSClient
from nats.js import JetStreamContext

from core.config import InfraConfig, get_settings


class DecimalEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles Decimal and date types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


logger = logging.getLogger(__name__)


class ServiceSource(Enum):
    """Service sources"""

    CAMPAIGN_REVIEW_SERVICE = "campaign_review_service"


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: Enum,
        source: ServiceSource,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value
        self.source = source.value
        self.data = data
        self.subject = subject
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }


class NATSEventBus:
    """NATS JetStream event bus"""

    def __init__(
        self,
        service_name: str,
        config: Optional[InfraConfig] = None,
    ):
        """
        Initialize NATS Event Bus.

        Args:
            service_name: Name of the service (used as the connection name)
            config: Optional infrastructure config override
        """
        self.service_name = service_name
        self.config = config or get_settings().infrastructure
        self.servers = self.config.nats_servers

        self._client: Optional[NATSClient] = None
        self._jetstream: Optional[JetStreamContext] = None
        self._streams: Dict[str, bool] = {}
        self._is_connected = False

        logger.info(f"NATS EventBus initialized: {self.servers}")

    async def connect(self):
        """Connect to NATS"""
        try:
            self._client = await nats.connect(
                servers=[self.servers],
                name=self.service_name,
            )
            self._jetstream = self._client.jetstream()
            self._is_connected = True
            logger.info(f"Connected to NATS as {self.service_name}")
        except Exception as e:
            logger.error(f"Failed to connect to NATS: {e}")
            raise

    async def _ensure_stream(self, stream_name: str, subject_prefix: str) -> None:
        if self._streams.get(stream_name):
            return
        try:
            await self._jetstream.add_stream(name=stream_name, subjects=[f"{subject_prefix}.>"])
        except Exception as e:
            logger.debug(f"Stream creation note: {e}")
        self._streams[stream_name] = True

    async def publish_event(self, event: Event) -> bool:
        """
        Publish an event to NATS JetStream.

        The subject is the event type (e.g. "campaign.approved"); the stream is
        derived from its first segment ("campaign" -> "campaign-stream").
        """
        if not self._is_connected or not self._jetstream:
            logger.error("Not connected to NATS")
            return False

        try:
            subject = event.type
            data = json.dumps(event.to_dict(), cls=DecimalEncoder).encode()

            subject_prefix = subject.split('.')[0]
            stream_name = f"{subject_prefix}-stream"
            await self._ensure_stream(stream_name, subject_prefix)

            ack = await self._jetstream.publish(subject, data)
            logger.info(f"Published event {event.type} [{event.id}] to stream {stream_name}, seq={ack.seq}")
            return True

        except Exception as e:
            logger.error(f"Error publishing event {event.id}: {e}")
            return False

    async def close(self):
        """Close NATS connection"""
        if self._client:
            await self._client.drain()
            self._client = None
            self._jetstream = None

        self._is_connected = False
        logger.info("Disconnected from NATS")

    @property
    def is_connected(self) -> bool:
        """Check if connected to NATS"""
        return self._is_connected

