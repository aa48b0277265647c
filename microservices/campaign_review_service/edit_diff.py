"""
Edit request diffing

Builds the proposed campaign from an edit payload, works out which tracked
fields it changes and renders the reviewer summary.
"""

from typing import Any, Dict, List

from pydantic import ValidationError

from .legacy_fields import (
    extract_campaign_fields,
    get_content_guidelines_by_type,
    get_hashtags,
    get_min_views,
    get_platforms,
    get_total_budget,
)
from .models import Campaign, EditRequest, EditReviewSummary
from .protocols import CampaignValidationError

TRACKED_FIELDS = (
    "title",
    "brief",
    "content_type",
    "platforms",
    "budget",
    "start_date",
    "end_date",
    "content_guidelines",
    "hashtags",
    "payout_rate",
    "min_views_for_payout",
    "budget_allocation",
)

# Partial objects in a payload are laid over the current value
MERGED_FIELDS = ("brief", "payout_rate", "budget_allocation")


def snapshot(campaign: Campaign) -> Dict[str, Any]:
    """JSON-safe copy of the tracked fields plus identity and status"""
    return campaign.model_dump(
        mode="json",
        include=set(TRACKED_FIELDS) | {"campaign_id", "brand_id", "status"},
    )


def build_candidate(campaign: Campaign, new_data: Dict[str, Any]) -> Campaign:
    """The campaign as it would look with ``new_data`` applied"""
    fields = extract_campaign_fields(new_data)
    for name in MERGED_FIELDS:
        if name in fields:
            fields[name] = {**getattr(campaign, name).model_dump(), **fields[name]}

    base = campaign.model_dump(exclude={"view_targets"})
    try:
        return Campaign.model_validate({**base, **fields})
    except ValidationError as e:
        names = sorted({str(error["loc"][0]) for error in e.errors() if error.get("loc")})
        raise CampaignValidationError(
            f"Edit payload is invalid for fields: {', '.join(names)}", fields=names
        ) from e


def compute_key_changes(old_data: Dict[str, Any], candidate: Campaign) -> List[str]:
    """Tracked fields whose value differs between the snapshot and candidate"""
    new_data = snapshot(candidate)
    return [name for name in TRACKED_FIELDS if old_data.get(name) != new_data.get(name)]


def build_review_summary(edit: EditRequest) -> EditReviewSummary:
    data = edit.new_data
    return EditReviewSummary(
        edit_id=edit.edit_id,
        campaign_id=edit.campaign_id,
        key_changes=edit.key_changes,
        platforms=get_platforms(data),
        content_guidelines=get_content_guidelines_by_type(data),
        hashtags=get_hashtags(data),
        min_views_for_payout=get_min_views(data),
        total_budget=get_total_budget(data),
        change_reason=edit.change_reason,
    )


def proposed_fields(candidate: Campaign, new_data: Dict[str, Any]) -> Dict[str, Any]:
    """Candidate values for every tracked field the payload mentions"""
    present = extract_campaign_fields(new_data)
    return {name: getattr(candidate, name) for name in TRACKED_FIELDS if name in present}
