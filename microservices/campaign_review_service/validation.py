"""
Campaign field rules shared by submission and edit review
"""

from datetime import date
from typing import List, Optional, Tuple

from .calculations import allocation_is_balanced
from .models import Campaign, ContentType
from .protocols import CampaignValidationError

MIN_BUDGET = 1000

FieldError = Tuple[str, str]


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def campaign_field_errors(campaign: Campaign, today: Optional[date] = None) -> List[FieldError]:
    """
    Check the fields a campaign needs before it can go live.

    When ``today`` is given the start date must not be before it; edits to
    running campaigns skip that rule.
    """
    errors: List[FieldError] = []

    if is_blank(campaign.title):
        errors.append(("title", "title is required"))

    if campaign.budget < MIN_BUDGET:
        errors.append(("budget", f"budget must be at least {MIN_BUDGET}"))

    if not campaign.platforms:
        errors.append(("platforms", "at least one platform is required"))

    if campaign.start_date is None:
        errors.append(("start_date", "start date is required"))
    elif today is not None and campaign.start_date < today:
        errors.append(("start_date", "start date cannot be in the past"))

    if campaign.end_date is None:
        errors.append(("end_date", "end date is required"))
    elif campaign.start_date is not None and campaign.end_date <= campaign.start_date:
        errors.append(("end_date", "end date must be after start date"))

    if campaign.content_type == ContentType.BOTH and not allocation_is_balanced(
        campaign.budget_allocation.original, campaign.budget_allocation.repurposed
    ):
        errors.append(("budget_allocation", "budget allocation must total 100%"))

    return errors


def raise_for_errors(errors: List[FieldError], subject: str) -> None:
    if not errors:
        return
    message = f"{subject}: " + "; ".join(text for _, text in errors)
    raise CampaignValidationError(message, fields=[name for name, _ in errors])


def require_text(value: Optional[str], field: str, label: str) -> None:
    if is_blank(value):
        raise CampaignValidationError(f"{label} is required", fields=[field])
