"""
Unit Tests for Edit Request Diffing

Candidate construction, key change detection and the reviewer summary.
"""

import pytest

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_review_service.edit_diff import (
    TRACKED_FIELDS,
    build_candidate,
    build_review_summary,
    compute_key_changes,
    proposed_fields,
    snapshot,
)
from microservices.campaign_review_service.protocols import CampaignValidationError
from tests.contracts.campaign_review.data_contract import (
    EditRequest,
    PayoutRate,
    PerContentTypeText,
)


class TestSnapshot:

    def test_snapshot_holds_tracked_fields_and_identity(self, factory):
        campaign = factory.make_campaign()

        data = snapshot(campaign)

        assert set(data) == set(TRACKED_FIELDS) | {"campaign_id", "brand_id", "status"}
        assert data["status"] == "active"
        assert isinstance(data["start_date"], str)


class TestBuildCandidate:
    """The candidate is the campaign with the payload laid over it"""

    def test_untouched_fields_are_kept(self, factory):
        campaign = factory.make_campaign(title="Old", budget=5000)

        candidate = build_candidate(campaign, {"title": "New"})

        assert candidate.title == "New"
        assert candidate.budget == 5000
        assert candidate.campaign_id == campaign.campaign_id

    def test_partial_payout_rate_is_merged(self, factory):
        campaign = factory.make_campaign(payout_rate=PayoutRate(original=500, repurposed=250))

        candidate = build_candidate(campaign, {"payout_rate": {"repurposed": 300}})

        assert candidate.payout_rate.original == 500
        assert candidate.payout_rate.repurposed == 300

    def test_partial_brief_is_merged(self, factory):
        campaign = factory.make_campaign(brief=PerContentTypeText(original="Keep", repurposed="Old"))

        candidate = build_candidate(campaign, {"brief": {"repurposed": "New"}})

        assert candidate.brief.original == "Keep"
        assert candidate.brief.repurposed == "New"

    def test_invalid_value_raises_validation_error(self, factory):
        campaign = factory.make_campaign()

        with pytest.raises(CampaignValidationError) as exc_info:
            build_candidate(campaign, {"content_type": "hologram"})

        assert "content_type" in exc_info.value.fields

    def test_candidate_does_not_touch_original(self, factory):
        campaign = factory.make_campaign(title="Old")

        build_candidate(campaign, {"title": "New"})

        assert campaign.title == "Old"


class TestComputeKeyChanges:

    def test_only_changed_fields_are_listed(self, factory):
        campaign = factory.make_campaign(title="Old", budget=5000)
        candidate = build_candidate(campaign, {"title": "New", "budget": 5000})

        assert compute_key_changes(snapshot(campaign), candidate) == ["title"]

    def test_changes_follow_tracked_order(self, factory):
        campaign = factory.make_campaign()
        candidate = build_candidate(
            campaign, {"hashtags": ["#new"], "title": "Renamed", "platforms": ["youtube"]}
        )

        assert compute_key_changes(snapshot(campaign), candidate) == ["title", "platforms", "hashtags"]

    def test_same_values_give_no_changes(self, factory):
        campaign = factory.make_campaign(title="Same")
        candidate = build_candidate(campaign, {"title": "Same"})

        assert compute_key_changes(snapshot(campaign), candidate) == []


class TestProposedFields:

    def test_only_payload_fields_are_proposed(self, factory):
        campaign = factory.make_campaign()
        new_data = {"totalBudget": 9000}
        candidate = build_candidate(campaign, new_data)

        fields = proposed_fields(candidate, new_data)

        assert fields == {"budget": 9000}


class TestReviewSummary:
    """Reviewer summary reads the proposed payload through the accessors"""

    def test_summary_from_legacy_payload(self):
        edit = EditRequest(
            edit_id="edit_1",
            campaign_id="cmp_1",
            new_data={
                "totalBudget": 12000,
                "requirements": {
                    "platforms": ["tiktok", "instagram"],
                    "contentGuidelines": {"original": "Daylight only", "repurposed": ["Credit source"]},
                    "hashtags": "#summer",
                    "minViewsForPayout": 5000,
                },
            },
            change_reason="Bigger push",
            requested_by="usr_1",
            key_changes=["budget", "platforms"],
        )

        summary = build_review_summary(edit)

        assert summary.total_budget == 12000
        assert summary.platforms == ["tiktok", "instagram"]
        assert summary.content_guidelines == {
            "original": ["Daylight only"],
            "repurposed": ["Credit source"],
        }
        assert summary.hashtags["original"] == ["#summer"]
        assert summary.min_views_for_payout == 5000
        assert summary.key_changes == ["budget", "platforms"]
        assert summary.change_reason == "Bigger push"

    def test_summary_without_min_views(self):
        edit = EditRequest(
            edit_id="edit_2",
            campaign_id="cmp_1",
            new_data={"title": "Only a title"},
            change_reason="Typo",
            requested_by="usr_1",
        )

        summary = build_review_summary(edit)

        assert summary.min_views_for_payout is None
        assert summary.total_budget == 0
        assert summary.platforms == []
