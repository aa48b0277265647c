"""
Unit Tests for Campaign Derived Calculations

View targets are budget / rate x 1,000,000 views, rounded half up. Campaigns
of type ``both`` split the budget by allocation first.
"""

import pytest

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_review_service.calculations import (
    allocation_is_balanced,
    compute_view_targets,
    count_active_creators,
)
from tests.contracts.campaign_review.data_contract import (
    BudgetAllocation,
    ContentType,
    CreatorParticipationStatus,
    CampaignCreator,
    PayoutRate,
)


class TestComputeViewTargets:
    """View target estimation"""

    def test_original_uses_original_rate(self):
        targets = compute_view_targets(5000, "original", original_rate=500)

        assert targets == {"total": 10_000_000, "original": 10_000_000, "repurposed": 0}

    def test_repurposed_uses_repurposed_rate(self):
        targets = compute_view_targets(5000, "repurposed", repurposed_rate=250)

        assert targets == {"total": 20_000_000, "original": 0, "repurposed": 20_000_000}

    def test_both_splits_budget_by_allocation(self):
        # Given: 10,000 split 70/30 at the default rates
        targets = compute_view_targets(10000, "both", 500, 250, 70, 30)

        # Then: 7,000 / 500 and 3,000 / 250 million views
        assert targets["original"] == 14_000_000
        assert targets["repurposed"] == 12_000_000
        assert targets["total"] == 26_000_000

    def test_fractional_views_are_rounded(self):
        targets = compute_view_targets(1, "original", original_rate=3)

        assert targets["original"] == 333_333

    @pytest.mark.parametrize("rate", [0, -10, None])
    def test_non_positive_rate_falls_back_to_default(self, rate):
        targets = compute_view_targets(5000, "original", original_rate=rate)

        assert targets["original"] == 10_000_000

    @pytest.mark.parametrize("budget", [0, -100, None])
    def test_empty_budget_gives_zero_targets(self, budget):
        targets = compute_view_targets(budget, "both")

        assert targets == {"total": 0, "original": 0, "repurposed": 0}

    def test_unknown_content_type_gives_zero_targets(self):
        assert compute_view_targets(5000, "livestream")["total"] == 0


class TestCampaignViewTargets:
    """Campaign exposes view targets as a derived field"""

    def test_view_targets_follow_budget_and_rates(self, factory):
        campaign = factory.make_campaign(
            budget=10000,
            content_type=ContentType.BOTH,
            payout_rate=PayoutRate(original=500, repurposed=250),
            budget_allocation=BudgetAllocation(original=50, repurposed=50),
        )

        assert campaign.view_targets.original == 10_000_000
        assert campaign.view_targets.repurposed == 20_000_000
        assert campaign.view_targets.total == 30_000_000

    def test_view_targets_are_serialized(self, factory):
        campaign = factory.make_campaign(budget=5000, content_type=ContentType.ORIGINAL)

        dumped = campaign.model_dump(mode="json")

        assert dumped["view_targets"]["total"] == 10_000_000


class TestCountActiveCreators:
    """creators_joined is the number of active join records"""

    def test_counts_active_and_approved_rows(self):
        rows = [
            {"status": "active"},
            {"status": "APPROVED"},
            {"status": "pending"},
            {"status": "rejected"},
            {"status": None},
        ]

        assert count_active_creators(rows) == 2

    def test_counts_models(self):
        creators = [
            CampaignCreator(creator_id="c1", campaign_id="x", status=CreatorParticipationStatus.ACTIVE),
            CampaignCreator(creator_id="c2", campaign_id="x", status=CreatorParticipationStatus.PENDING),
        ]

        assert count_active_creators(creators) == 1

    def test_empty(self):
        assert count_active_creators([]) == 0


class TestAllocationBalance:

    def test_balanced(self):
        assert allocation_is_balanced(70, 30)

    def test_unbalanced(self):
        assert not allocation_is_balanced(60, 30)
