"""
Campaign Review Service Factory

Factory for creating campaign review components with proper dependency injection.
"""

import logging
from typing import Optional

from core.config import AppConfig, get_settings
from core.nats_client import NATSEventBus

from .campaign_gateway import CampaignStoreGateway
from .campaign_repository import CampaignRepository
from .console_controller import CampaignConsoleController
from .edit_review_service import EditReviewService
from .events.publishers import CampaignReviewEventPublisher
from .lifecycle_service import CampaignLifecycleService
from .resilience import ResilientCampaignReader

logger = logging.getLogger(__name__)

SERVICE_NAME = "campaign_review_service"


class CampaignReviewServiceFactory:
    """Factory for creating campaign review service components"""

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or get_settings()
        self._repository: Optional[CampaignRepository] = None
        self._gateway: Optional[CampaignStoreGateway] = None
        self._reader: Optional[ResilientCampaignReader] = None
        self._nats_client: Optional[NATSEventBus] = None
        self._event_publisher: Optional[CampaignReviewEventPublisher] = None
        self._lifecycle: Optional[CampaignLifecycleService] = None
        self._edit_review: Optional[EditReviewService] = None
        self._controller: Optional[CampaignConsoleController] = None

    async def initialize(self) -> None:
        """Initialize all components"""
        logger.info("Initializing Campaign Review Service components...")
        infra = self.config.infrastructure
        console = self.config.console

        # An unreachable store must not block startup; reads fall back until it returns
        self._repository = CampaignRepository(infra)
        try:
            await self._repository.initialize()
        except Exception as e:
            logger.warning(f"Campaign store not reachable at startup: {e}")

        self._gateway = CampaignStoreGateway(
            self._repository,
            read_timeout=console.read_timeout_seconds,
            write_timeout=console.write_timeout_seconds,
        )
        self._reader = ResilientCampaignReader(self._gateway, max_cached=console.fallback_cache_size)

        # Initialize NATS client
        if infra.nats_enabled:
            try:
                self._nats_client = NATSEventBus(service_name=SERVICE_NAME, config=infra)
                await self._nats_client.connect()
                logger.info("NATS client connected")
            except Exception as e:
                logger.warning(f"NATS client initialization failed: {e}")
                self._nats_client = None
        self._event_publisher = CampaignReviewEventPublisher(self._nats_client)

        self._lifecycle = CampaignLifecycleService(self._gateway, self._event_publisher)
        self._edit_review = EditReviewService(self._gateway, self._event_publisher)
        self._controller = CampaignConsoleController(
            self._reader,
            self._lifecycle,
            self._edit_review,
            page_size=console.page_size,
            poll_interval=console.poll_interval_seconds,
        )

        logger.info("Campaign Review Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing Campaign Review Service components...")

        if self._controller:
            await self._controller.close()

        if self._nats_client:
            await self._nats_client.close()

        if self._repository:
            await self._repository.close()

        logger.info("Campaign Review Service components closed")

    @property
    def repository(self) -> CampaignRepository:
        if not self._repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._repository

    @property
    def gateway(self) -> CampaignStoreGateway:
        if not self._gateway:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._gateway

    @property
    def reader(self) -> ResilientCampaignReader:
        if not self._reader:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._reader

    @property
    def lifecycle(self) -> CampaignLifecycleService:
        if not self._lifecycle:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._lifecycle

    @property
    def edit_review(self) -> EditReviewService:
        if not self._edit_review:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._edit_review

    @property
    def controller(self) -> CampaignConsoleController:
        if not self._controller:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._controller

    @property
    def nats_client(self) -> Optional[NATSEventBus]:
        """Get NATS client"""
        return self._nats_client

    @property
    def event_publisher(self) -> Optional[CampaignReviewEventPublisher]:
        """Get event publisher"""
        return self._event_publisher


# Global factory instance
_factory: Optional[CampaignReviewServiceFactory] = None


async def get_factory() -> CampaignReviewServiceFactory:
    """Get or create factory instance"""
    global _factory
    if _factory is None:
        _factory = CampaignReviewServiceFactory()
        await _factory.initialize()
    return _factory


async def close_factory() -> None:
    """Close factory instance"""
    global _factory
    if _factory:
        await _factory.close()
        _factory = None


__all__ = [
    "CampaignReviewServiceFactory",
    "get_factory",
    "close_factory",
]
