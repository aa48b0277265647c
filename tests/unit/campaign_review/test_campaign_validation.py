"""
Unit Tests for Campaign Field Rules

Rules shared by submission and edit review.
"""

import pytest
from datetime import timedelta

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_review_service.protocols import CampaignValidationError
from microservices.campaign_review_service.validation import (
    MIN_BUDGET,
    campaign_field_errors,
    is_blank,
    raise_for_errors,
    require_text,
)
from tests.contracts.campaign_review.data_contract import (
    FIXED_NOW,
    BudgetAllocation,
    CallerIdentity,
    ContentType,
    UserRole,
)


def _fields(errors):
    return [name for name, _ in errors]


class TestCampaignFieldErrors:

    def test_valid_campaign_has_no_errors(self, factory):
        campaign = factory.make_campaign()

        assert campaign_field_errors(campaign, today=FIXED_NOW.date()) == []

    def test_budget_below_minimum(self, factory):
        campaign = factory.make_campaign(budget=MIN_BUDGET - 1)

        assert _fields(campaign_field_errors(campaign)) == ["budget"]

    def test_budget_at_minimum_is_valid(self, factory):
        campaign = factory.make_campaign(budget=MIN_BUDGET)

        assert campaign_field_errors(campaign) == []

    def test_blank_title(self, factory):
        campaign = factory.make_campaign(title="   ")

        assert "title" in _fields(campaign_field_errors(campaign))

    def test_no_platforms(self, factory):
        campaign = factory.make_campaign(platforms=[])

        assert "platforms" in _fields(campaign_field_errors(campaign))

    def test_missing_dates(self, factory):
        campaign = factory.make_campaign(start_date=None, end_date=None)

        assert _fields(campaign_field_errors(campaign)) == ["start_date", "end_date"]

    def test_end_must_follow_start(self, factory):
        start = FIXED_NOW.date() + timedelta(days=3)
        campaign = factory.make_campaign(start_date=start, end_date=start)

        assert _fields(campaign_field_errors(campaign)) == ["end_date"]

    def test_past_start_only_checked_with_today(self, factory):
        start = FIXED_NOW.date() - timedelta(days=3)
        campaign = factory.make_campaign(start_date=start, end_date=start + timedelta(days=10))

        assert campaign_field_errors(campaign) == []
        assert _fields(campaign_field_errors(campaign, today=FIXED_NOW.date())) == ["start_date"]

    def test_both_requires_full_allocation(self, factory):
        campaign = factory.make_campaign(
            content_type=ContentType.BOTH,
            budget_allocation=BudgetAllocation(original=60, repurposed=30),
        )

        assert _fields(campaign_field_errors(campaign)) == ["budget_allocation"]

    def test_allocation_ignored_for_single_type(self, factory):
        campaign = factory.make_campaign(
            content_type=ContentType.ORIGINAL,
            budget_allocation=BudgetAllocation(original=60, repurposed=30),
        )

        assert campaign_field_errors(campaign) == []

    def test_all_errors_are_reported_together(self, factory):
        campaign = factory.make_campaign(title="", budget=10, platforms=[])

        assert _fields(campaign_field_errors(campaign)) == ["title", "budget", "platforms"]


class TestRaiseForErrors:

    def test_no_errors_is_silent(self):
        raise_for_errors([], "Nothing")

    def test_error_carries_fields(self):
        with pytest.raises(CampaignValidationError) as exc_info:
            raise_for_errors([("budget", "too low"), ("title", "missing")], "Cannot submit")

        assert exc_info.value.fields == ["budget", "title"]
        assert "too low" in str(exc_info.value)
        assert exc_info.value.error_code == "ValidationError"


class TestRequiredText:

    @pytest.mark.parametrize("value", [None, "", "   ", "\n\t"])
    def test_blank_values(self, value):
        assert is_blank(value)
        with pytest.raises(CampaignValidationError):
            require_text(value, "reason", "Reason")

    def test_text_passes(self):
        require_text("Brand request", "reason", "Reason")


class TestCallerIdentity:

    def test_admin_is_reviewer(self):
        assert CallerIdentity(user_id="u1", role=UserRole.ADMIN).is_reviewer

    def test_brand_owns_its_campaigns(self, factory):
        campaign = factory.make_campaign(brand_id="brand_1")

        assert CallerIdentity(user_id="u1", role=UserRole.BRAND, brand_id="brand_1").owns(campaign)
        assert not CallerIdentity(user_id="u1", role=UserRole.BRAND, brand_id="brand_2").owns(campaign)

    def test_brand_without_brand_id_uses_user_id(self, factory):
        campaign = factory.make_campaign(brand_id="brand_1")

        assert CallerIdentity(user_id="brand_1", role=UserRole.BRAND).owns(campaign)

    def test_admin_does_not_own(self, factory):
        campaign = factory.make_campaign(brand_id="brand_1")

        assert not CallerIdentity(user_id="brand_1", role=UserRole.ADMIN, brand_id="brand_1").owns(campaign)
