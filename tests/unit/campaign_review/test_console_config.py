"""
Unit Tests for Console Configuration
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.config import ENVIRONMENTS_DIR, ReviewConsoleConfig, env_files


class TestEnvironmentFiles:

    def test_shipped_environment_files_exist(self):
        for env in ("development", "dev", "testing", "test"):
            assert (ENVIRONMENTS_DIR / env_files[env]).is_file()

    def test_files_live_in_the_repository(self):
        assert ENVIRONMENTS_DIR.parent.name == "deployment"


class TestReviewConsoleConfig:

    def test_defaults(self, monkeypatch):
        for name in ("CAMPAIGN_PAGE_SIZE", "CAMPAIGN_FALLBACK_CACHE_SIZE", "CAMPAIGN_POLL_INTERVAL"):
            monkeypatch.delenv(name, raising=False)

        config = ReviewConsoleConfig.from_env()

        assert config.page_size == 25
        assert config.fallback_cache_size == 256
        assert config.poll_interval_seconds == 60.0

    def test_overrides_and_bad_values(self, monkeypatch):
        monkeypatch.setenv("CAMPAIGN_FALLBACK_CACHE_SIZE", "32")
        monkeypatch.setenv("CAMPAIGN_PAGE_SIZE", "many")

        config = ReviewConsoleConfig.from_env()

        assert config.fallback_cache_size == 32
        assert config.page_size == 25
