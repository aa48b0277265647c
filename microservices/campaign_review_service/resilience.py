"""
Resilience Layer

Wraps the gateway's bulk and detail reads. When the store is schema-unavailable
or times out, the last successful result for the same query is served flagged
``is_stale``; with nothing cached, a placeholder result flagged
``is_mock_data`` is served instead. Every other failure propagates.

Both caches hold at most ``max_cached`` entries; the least recently stored
entry is evicted first.

Writes never pass through here.
"""

import logging
from typing import Dict, Optional, Tuple, TypeVar

from .campaign_gateway import CampaignStoreGateway
from .fallback_data import build_mock_collection, build_mock_detail
from .models import CampaignCollection, CampaignDetail, CampaignListType
from .protocols import StoreUnavailableError

logger = logging.getLogger(__name__)

QueryKey = Tuple[CampaignListType, int, int, Optional[str]]

K = TypeVar("K")
V = TypeVar("V")


class ResilientCampaignReader:
    """Serves console reads, falling back to cached or placeholder data"""

    DEFAULT_MAX_CACHED = 256

    def __init__(self, gateway: CampaignStoreGateway, max_cached: int = DEFAULT_MAX_CACHED):
        self.gateway = gateway
        self.max_cached = max(1, max_cached)
        self._collections: Dict[QueryKey, CampaignCollection] = {}
        self._details: Dict[str, CampaignDetail] = {}

    async def list_pending(
        self, page: int = 1, page_size: int = 25, search: Optional[str] = None
    ) -> CampaignCollection:
        return await self.list_campaigns(CampaignListType.PENDING, page, page_size, search)

    async def list_active(
        self, page: int = 1, page_size: int = 25, search: Optional[str] = None
    ) -> CampaignCollection:
        return await self.list_campaigns(CampaignListType.ACTIVE, page, page_size, search)

    async def list_completed(
        self, page: int = 1, page_size: int = 25, search: Optional[str] = None
    ) -> CampaignCollection:
        return await self.list_campaigns(CampaignListType.COMPLETED, page, page_size, search)

    async def list_campaigns(
        self,
        list_type: CampaignListType,
        page: int = 1,
        page_size: int = 25,
        search: Optional[str] = None,
    ) -> CampaignCollection:
        search = search or None
        key = (list_type, page, page_size, search)
        try:
            result = await self.gateway.list_campaigns(list_type, page, page_size, search)
        except StoreUnavailableError as e:
            return self._fallback_collection(key, e)

        collection = CampaignCollection(
            list_type=list_type,
            campaigns=result.campaigns,
            total=result.total,
            page=page,
            page_size=page_size,
            search=search,
        )
        self._remember(self._collections, key, collection)
        return collection

    def _remember(self, cache: Dict[K, V], key: K, value: V) -> None:
        cache.pop(key, None)
        if len(cache) >= self.max_cached:
            oldest_key = next(iter(cache))
            del cache[oldest_key]
        cache[key] = value

    def _fallback_collection(self, key: QueryKey, error: StoreUnavailableError) -> CampaignCollection:
        list_type, page, page_size, search = key
        cached = self._collections.get(key)
        if cached is not None:
            logger.warning(
                f"Serving cached {list_type.value} campaigns from {cached.fetched_at.isoformat()}: {error}"
            )
            return cached.model_copy(update={"is_stale": True})

        logger.warning(f"No cached {list_type.value} campaigns, serving placeholder data: {error}")
        return build_mock_collection(list_type, page, page_size, search)

    async def get_with_creators(self, campaign_id: str) -> CampaignDetail:
        try:
            campaign, creators = await self.gateway.get_with_creators(campaign_id)
        except StoreUnavailableError as e:
            return self._fallback_detail(campaign_id, e)

        detail = CampaignDetail(campaign=campaign, creators=creators)
        self._remember(self._details, campaign_id, detail)
        return detail

    def _fallback_detail(self, campaign_id: str, error: StoreUnavailableError) -> CampaignDetail:
        cached = self._details.get(campaign_id)
        if cached is not None:
            logger.warning(f"Serving cached detail for campaign {campaign_id}: {error}")
            return cached.model_copy(update={"is_stale": True})

        for collection in self._collections.values():
            for campaign in collection.campaigns:
                if campaign.campaign_id == campaign_id:
                    logger.warning(f"Serving campaign {campaign_id} from a cached list without creators: {error}")
                    return CampaignDetail(campaign=campaign, is_stale=True)

        mock = build_mock_detail(campaign_id)
        if mock is not None:
            logger.warning(f"Serving placeholder detail for {campaign_id}: {error}")
            return mock

        logger.error(f"No fallback data for campaign {campaign_id}: {error}")
        raise error

    def clear(self) -> None:
        """Forget every cached result"""
        self._collections.clear()
        self._details.clear()
