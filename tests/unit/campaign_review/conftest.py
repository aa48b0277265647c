"""
Unit Test Fixtures for Campaign Review Service

Pure functions only; no store, no event bus.
"""

import pytest

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.contracts.campaign_review.data_contract import CampaignReviewTestDataFactory


@pytest.fixture
def factory():
    """Provide CampaignReviewTestDataFactory"""
    return CampaignReviewTestDataFactory
