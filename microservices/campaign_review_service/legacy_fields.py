"""
Legacy Field Handling

Stored campaigns and edit payloads were written by several generations of
clients. This module maps every known spelling and shape onto the canonical
models. The gateway calls it once per record; edit review uses the accessors
to read proposed payloads.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .models import CampaignStatus, CreatorParticipationStatus

logger = logging.getLogger(__name__)


STATUS_ALIASES: Dict[str, CampaignStatus] = {
    "draft": CampaignStatus.DRAFT,
    "pending_approval": CampaignStatus.PENDING_APPROVAL,
    "pending-approval": CampaignStatus.PENDING_APPROVAL,
    "pending": CampaignStatus.PENDING_APPROVAL,
    "review": CampaignStatus.PENDING_APPROVAL,
    "in_review": CampaignStatus.PENDING_APPROVAL,
    "in-review": CampaignStatus.PENDING_APPROVAL,
    "active": CampaignStatus.ACTIVE,
    "approved": CampaignStatus.ACTIVE,
    "paused": CampaignStatus.PAUSED,
    "completed": CampaignStatus.COMPLETED,
    "complete": CampaignStatus.COMPLETED,
    "cancelled": CampaignStatus.COMPLETED,
    "canceled": CampaignStatus.COMPLETED,
    "rejected": CampaignStatus.REJECTED,
}

CREATOR_STATUS_ALIASES: Dict[str, CreatorParticipationStatus] = {
    "pending": CreatorParticipationStatus.PENDING,
    "invited": CreatorParticipationStatus.PENDING,
    "active": CreatorParticipationStatus.ACTIVE,
    "approved": CreatorParticipationStatus.ACTIVE,
    "rejected": CreatorParticipationStatus.REJECTED,
    "declined": CreatorParticipationStatus.REJECTED,
}


def normalize_status(raw: Any) -> Optional[CampaignStatus]:
    """Map a stored status spelling onto the canonical enum; None if unknown"""
    if isinstance(raw, CampaignStatus):
        return raw
    if raw is None:
        return None
    return STATUS_ALIASES.get(str(raw).strip().lower())


def normalize_creator_status(raw: Any) -> Optional[CreatorParticipationStatus]:
    if isinstance(raw, CreatorParticipationStatus):
        return raw
    if raw is None:
        return None
    return CREATOR_STATUS_ALIASES.get(str(raw).strip().lower())


def stored_spellings(*statuses: CampaignStatus) -> List[str]:
    """Every stored spelling that normalizes to one of ``statuses``"""
    wanted = set(statuses)
    return sorted(raw for raw, status in STATUS_ALIASES.items() if status in wanted)


# ====================
# Shape helpers
# ====================


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, "", [], {}):
            return value
    return None


def _requirements(data: Dict[str, Any]) -> Dict[str, Any]:
    requirements = data.get("requirements")
    return requirements if isinstance(requirements, dict) else {}


def _lookup(data: Dict[str, Any], *keys: str) -> Any:
    """Look a value up at the top level, then under ``requirements``"""
    value = _first_present(data, *keys)
    if value is None:
        value = _first_present(_requirements(data), *keys)
    return value


def _as_list(value: Any) -> List[str]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item not in (None, "")]
    return [str(value)]


def split_by_content_type(value: Any) -> Dict[str, List[str]]:
    """
    Normalize a per-type list value.

    A bare string or list belongs to original content; an object is read as
    ``{"original": ..., "repurposed": ...}`` where each side may itself be a
    string or a list.
    """
    if isinstance(value, dict):
        return {
            "original": _as_list(value.get("original")),
            "repurposed": _as_list(value.get("repurposed")),
        }
    return {"original": _as_list(value), "repurposed": []}


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        return int(round(float(value)))
    except (TypeError, ValueError):
        return None


def parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            logger.warning(f"Unparseable date value: {value!r}")
            return None


# ====================
# Payload accessors
# ====================


def get_platforms(data: Dict[str, Any]) -> List[str]:
    return _as_list(_lookup(data, "platforms"))


def get_content_guidelines_by_type(data: Dict[str, Any]) -> Dict[str, List[str]]:
    return split_by_content_type(_lookup(data, "content_guidelines", "contentGuidelines"))


def get_hashtags(data: Dict[str, Any]) -> Dict[str, List[str]]:
    return split_by_content_type(_lookup(data, "hashtags"))


def get_min_views(data: Dict[str, Any]) -> Optional[int]:
    """Minimum views for payout, or None when not specified"""
    return _as_int(_lookup(data, "min_views_for_payout", "minViewsForPayout"))


def get_total_budget(data: Dict[str, Any]) -> int:
    value = _lookup(data, "total_budget", "totalBudget")
    if value is None:
        value = _first_present(data, "budget")
    return _as_int(value) or 0


def get_brief(data: Dict[str, Any]) -> Optional[Dict[str, Optional[str]]]:
    value = _first_present(data, "brief")
    if value is None:
        return None
    if isinstance(value, dict):
        return {side: value.get(side) for side in ("original", "repurposed") if side in value}
    return {"original": str(value), "repurposed": None}


def get_payout_rate(data: Dict[str, Any]) -> Optional[Dict[str, int]]:
    value = _lookup(data, "payout_rate", "payoutRate")
    if isinstance(value, dict):
        rate = {}
        for side in ("original", "repurposed"):
            parsed = _as_int(value.get(side))
            if parsed is not None:
                rate[side] = parsed
        return rate or None
    original = _as_int(_lookup(data, "original_rate", "originalRate"))
    repurposed = _as_int(_lookup(data, "repurposed_rate", "repurposedRate"))
    if original is None and repurposed is None:
        return None
    rate = {}
    if original is not None:
        rate["original"] = original
    if repurposed is not None:
        rate["repurposed"] = repurposed
    return rate


def get_budget_allocation(data: Dict[str, Any]) -> Optional[Dict[str, int]]:
    value = _lookup(data, "budget_allocation", "budgetAllocation")
    if not isinstance(value, dict):
        return None
    allocation = {}
    for side in ("original", "repurposed"):
        parsed = _as_int(value.get(side))
        if parsed is not None:
            allocation[side] = parsed
    return allocation or None


def extract_campaign_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Read canonical campaign fields out of a legacy-shaped payload.

    Only fields present in ``data`` are returned, so the result can be laid
    over an existing record.
    """
    fields: Dict[str, Any] = {}

    title = _first_present(data, "title", "name")
    if title is not None:
        fields["title"] = str(title)

    brief = get_brief(data)
    if brief is not None:
        fields["brief"] = brief

    content_type = _first_present(data, "content_type", "contentType")
    if content_type is not None:
        fields["content_type"] = str(content_type).lower()

    if _lookup(data, "platforms") is not None:
        fields["platforms"] = get_platforms(data)

    if _lookup(data, "total_budget", "totalBudget") is not None or _first_present(data, "budget") is not None:
        fields["budget"] = get_total_budget(data)

    for target, keys in (
        ("start_date", ("start_date", "startDate")),
        ("end_date", ("end_date", "endDate")),
    ):
        raw = _first_present(data, *keys)
        if raw is not None:
            fields[target] = parse_date(raw)

    if _lookup(data, "content_guidelines", "contentGuidelines") is not None:
        fields["content_guidelines"] = get_content_guidelines_by_type(data)

    if _lookup(data, "hashtags") is not None:
        fields["hashtags"] = get_hashtags(data)

    payout_rate = get_payout_rate(data)
    if payout_rate is not None:
        fields["payout_rate"] = payout_rate

    min_views = get_min_views(data)
    if min_views is not None:
        fields["min_views_for_payout"] = min_views

    allocation = get_budget_allocation(data)
    if allocation is not None:
        fields["budget_allocation"] = allocation

    return fields
