"""
Campaign Review Calculations

Pure derivations over campaign data. Nothing here touches the store.
"""

import math
from typing import Any, Dict, Iterable

VIEWS_PER_RATE_UNIT = 1_000_000
DEFAULT_ORIGINAL_RATE = 500
DEFAULT_REPURPOSED_RATE = 250
DEFAULT_ORIGINAL_ALLOCATION = 70
DEFAULT_REPURPOSED_ALLOCATION = 30

# Join-record statuses that count towards creators_joined
ACTIVE_CREATOR_STATUSES = frozenset({"active", "approved"})


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _views_for(budget_share: float, rate: int) -> int:
    if budget_share <= 0:
        return 0
    return _round_half_up(budget_share / rate * VIEWS_PER_RATE_UNIT)


def compute_view_targets(
    budget: int,
    content_type: str,
    original_rate: int = DEFAULT_ORIGINAL_RATE,
    repurposed_rate: int = DEFAULT_REPURPOSED_RATE,
    original_allocation: int = DEFAULT_ORIGINAL_ALLOCATION,
    repurposed_allocation: int = DEFAULT_REPURPOSED_ALLOCATION,
) -> Dict[str, int]:
    """
    Estimate view targets from budget and payout rates.

    Rates are currency per 1,000,000 views. ``original`` and ``repurposed``
    campaigns spend the whole budget at their own rate; ``both`` splits the
    budget by the allocation percentages first.

    Returns:
        dict with ``total``, ``original`` and ``repurposed`` view counts
    """
    if original_rate is None or original_rate <= 0:
        original_rate = DEFAULT_ORIGINAL_RATE
    if repurposed_rate is None or repurposed_rate <= 0:
        repurposed_rate = DEFAULT_REPURPOSED_RATE

    budget = budget or 0
    original_views = 0
    repurposed_views = 0

    if content_type == "original":
        original_views = _views_for(budget, original_rate)
    elif content_type == "repurposed":
        repurposed_views = _views_for(budget, repurposed_rate)
    elif content_type == "both":
        original_views = _views_for(budget * (original_allocation or 0) / 100, original_rate)
        repurposed_views = _views_for(budget * (repurposed_allocation or 0) / 100, repurposed_rate)

    return {
        "total": original_views + repurposed_views,
        "original": original_views,
        "repurposed": repurposed_views,
    }


def _status_value(status: Any) -> str:
    return str(getattr(status, "value", status) or "").lower()


def count_active_creators(creators: Iterable[Any]) -> int:
    """Count join records (models or rows) whose status is active"""
    total = 0
    for creator in creators:
        status = creator.get("status") if isinstance(creator, dict) else getattr(creator, "status", None)
        if _status_value(status) in ACTIVE_CREATOR_STATUSES:
            total += 1
    return total


def allocation_is_balanced(original: int, repurposed: int) -> bool:
    return (original or 0) + (repurposed or 0) == 100
