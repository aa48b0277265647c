"""
Placeholder campaigns shown when the store is unreachable and nothing has been
cached yet. The dataset is fixed so the console renders the same rows on every
fallback; ids carry the ``mock-`` prefix.
"""

from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from .models import (
    Campaign,
    CampaignCollection,
    CampaignCreator,
    CampaignDetail,
    CampaignListType,
    CampaignMetrics,
    CampaignStatus,
    ContentType,
    CreatorParticipationStatus,
    PerContentTypeList,
    PerContentTypeText,
)

MOCK_ID_PREFIX = "mock-"

_MOCK_TIMESTAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)

_MOCK_TITLES: Dict[CampaignListType, List[str]] = {
    CampaignListType.PENDING: ["Summer Collection Launch", "Fitness App Challenge"],
    CampaignListType.ACTIVE: ["Holiday Gift Guide", "Coffee Morning Routine"],
    CampaignListType.COMPLETED: ["Spring Sneaker Drop"],
}

_LIST_STATUS: Dict[CampaignListType, CampaignStatus] = {
    CampaignListType.PENDING: CampaignStatus.PENDING_APPROVAL,
    CampaignListType.ACTIVE: CampaignStatus.ACTIVE,
    CampaignListType.COMPLETED: CampaignStatus.COMPLETED,
}


def is_mock_id(campaign_id: str) -> bool:
    return campaign_id.startswith(MOCK_ID_PREFIX)


def _mock_campaign(list_type: CampaignListType, index: int, title: str) -> Campaign:
    content_type = (ContentType.ORIGINAL, ContentType.BOTH, ContentType.REPURPOSED)[index % 3]
    status = _LIST_STATUS[list_type]
    live = status != CampaignStatus.PENDING_APPROVAL
    return Campaign(
        campaign_id=f"{MOCK_ID_PREFIX}{list_type.value}-{index + 1}",
        brand_id=f"mock-brand-{index + 1}",
        brand_name="Sample Brand",
        title=title,
        brief=PerContentTypeText(original=f"Sample brief for {title}."),
        content_type=content_type,
        budget=5000 * (index + 1),
        platforms=["tiktok", "instagram"],
        start_date=date(2024, 1, 15),
        end_date=date(2024, 2, 15),
        hashtags=PerContentTypeList(original=["#sample"]),
        status=status,
        metrics=CampaignMetrics(
            views=120000 * (index + 1) if live else 0,
            creators_joined=3 * (index + 1) if live else 0,
        ),
        created_at=_MOCK_TIMESTAMP,
        updated_at=_MOCK_TIMESTAMP,
    )


def mock_campaigns(list_type: CampaignListType) -> List[Campaign]:
    return [
        _mock_campaign(list_type, index, title)
        for index, title in enumerate(_MOCK_TITLES[list_type])
    ]


def build_mock_collection(
    list_type: CampaignListType,
    page: int = 1,
    page_size: int = 25,
    search: Optional[str] = None,
) -> CampaignCollection:
    """Placeholder collection for a list, flagged as mock data"""
    campaigns = mock_campaigns(list_type)
    if search:
        campaigns = [c for c in campaigns if search.lower() in c.title.lower()]
    start = (max(page, 1) - 1) * page_size
    return CampaignCollection(
        list_type=list_type,
        campaigns=campaigns[start:start + page_size],
        total=len(campaigns),
        page=page,
        page_size=page_size,
        search=search,
        is_mock_data=True,
        fetched_at=_MOCK_TIMESTAMP,
    )


def build_mock_detail(campaign_id: str) -> Optional[CampaignDetail]:
    """Placeholder detail for a placeholder id; None for any other id"""
    if not is_mock_id(campaign_id):
        return None
    for list_type in CampaignListType:
        for campaign in mock_campaigns(list_type):
            if campaign.campaign_id != campaign_id:
                continue
            creators = [
                CampaignCreator(
                    creator_id=f"mock-creator-{n + 1}",
                    campaign_id=campaign_id,
                    creator_name=f"Sample Creator {n + 1}",
                    status=CreatorParticipationStatus.ACTIVE,
                    platforms=["tiktok"],
                    joined_at=_MOCK_TIMESTAMP,
                )
                for n in range(campaign.metrics.creators_joined)
            ]
            return CampaignDetail(campaign=campaign, creators=creators, is_mock_data=True)
    return None
