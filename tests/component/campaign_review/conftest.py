"""
Component Test Fixtures for Campaign Review Service

Provides fixtures for component testing with mocked dependencies.
The mock repository stores plain rows exactly like the PostgreSQL adapter and
supports failure injection for reads and writes.
"""

import asyncio
import copy
import pytest
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_review_service.campaign_gateway import CampaignStoreGateway
from microservices.campaign_review_service.console_controller import CampaignConsoleController
from microservices.campaign_review_service.edit_review_service import EditReviewService
from microservices.campaign_review_service.events.publishers import CampaignReviewEventPublisher
from microservices.campaign_review_service.lifecycle_service import CampaignLifecycleService
from microservices.campaign_review_service.resilience import ResilientCampaignReader
from tests.contracts.campaign_review.data_contract import (
    FIXED_NOW,
    CampaignReviewTestDataFactory,
)


ACTIVE_JOIN_STATUSES = ("active", "approved")


# ====================
# Mock Repository
# ====================


class MockCampaignRepository:
    """Row-level mock of the campaign store"""

    def __init__(self):
        self.campaigns: Dict[str, Dict[str, Any]] = {}
        self.creators: Dict[str, List[Dict[str, Any]]] = {}
        self.edits: Dict[str, Dict[str, Any]] = {}

        self.read_error: Optional[BaseException] = None
        self.write_error: Optional[BaseException] = None
        self.read_delay: float = 0.0
        self.read_gate: Optional[asyncio.Event] = None
        self.write_gate: Optional[asyncio.Event] = None
        # (status, gate): list reads covering the status wait after capturing rows
        self.list_hold: Optional[Tuple[str, asyncio.Event]] = None
        self.held_reads = 0

        self.read_calls: List[str] = []
        self.write_calls: List[str] = []

    # Test helpers
    def add_campaign(self, row: Dict[str, Any]) -> Dict[str, Any]:
        self.campaigns[row["campaign_id"]] = copy.deepcopy(row)
        return row

    def add_creator(self, row: Dict[str, Any]) -> Dict[str, Any]:
        self.creators.setdefault(row["campaign_id"], []).append(copy.deepcopy(row))
        return row

    def add_edit(self, row: Dict[str, Any]) -> Dict[str, Any]:
        self.edits[row["edit_id"]] = copy.deepcopy(row)
        return row

    def fail_reads_with(self, error: Optional[BaseException]) -> None:
        self.read_error = error

    def fail_writes_with(self, error: Optional[BaseException]) -> None:
        self.write_error = error

    async def _before_read(self, operation: str) -> None:
        self.read_calls.append(operation)
        if self.read_gate is not None:
            await self.read_gate.wait()
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if self.read_error is not None:
            raise self.read_error

    async def _before_write(self, operation: str) -> None:
        self.write_calls.append(operation)
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.write_error is not None:
            raise self.write_error

    # Lifecycle
    async def initialize(self):
        pass

    async def close(self):
        pass

    async def health_check(self) -> bool:
        return self.read_error is None

    # Campaign reads
    async def list_campaigns(
        self,
        statuses: Sequence[str],
        search: Optional[str] = None,
        limit: int = 25,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        await self._before_read("list_campaigns")
        rows = [r for r in self.campaigns.values() if r.get("status") in statuses]
        if search:
            rows = [r for r in rows if search.lower() in (r.get("title") or "").lower()]
        rows.sort(key=lambda r: r.get("created_at") or FIXED_NOW, reverse=True)
        page = [copy.deepcopy(r) for r in rows[offset:offset + limit]]
        if self.list_hold is not None and self.list_hold[0] in statuses:
            self.held_reads += 1
            await self.list_hold[1].wait()
        return page, len(rows)

    async def get_campaign(self, campaign_id: str) -> Optional[Dict[str, Any]]:
        await self._before_read("get_campaign")
        row = self.campaigns.get(campaign_id)
        return copy.deepcopy(row) if row else None

    async def list_campaign_creators(self, campaign_id: str) -> List[Dict[str, Any]]:
        await self._before_read("list_campaign_creators")
        return copy.deepcopy(self.creators.get(campaign_id, []))

    async def count_active_creators(self, campaign_ids: Sequence[str]) -> Dict[str, int]:
        await self._before_read("count_active_creators")
        counts = {}
        for campaign_id in campaign_ids:
            active = [
                c for c in self.creators.get(campaign_id, [])
                if str(c.get("status") or "").lower() in ACTIVE_JOIN_STATUSES
            ]
            if active:
                counts[campaign_id] = len(active)
        return counts

    # Campaign writes
    async def update_campaign(self, campaign_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        await self._before_write("update_campaign")
        row = self.campaigns.get(campaign_id)
        if row is None:
            return None
        row.update(copy.deepcopy(fields))
        row["updated_at"] = datetime.now(timezone.utc)
        return copy.deepcopy(row)

    # Edit requests
    async def create_edit_request(self, row: Dict[str, Any]) -> Dict[str, Any]:
        await self._before_write("create_edit_request")
        self.edits[row["edit_id"]] = copy.deepcopy(row)
        return copy.deepcopy(row)

    async def get_edit_request(self, edit_id: str) -> Optional[Dict[str, Any]]:
        await self._before_read("get_edit_request")
        row = self.edits.get(edit_id)
        return copy.deepcopy(row) if row else None

    async def get_pending_edit_for_campaign(self, campaign_id: str) -> Optional[Dict[str, Any]]:
        await self._before_read("get_pending_edit_for_campaign")
        for row in self.edits.values():
            if row["campaign_id"] == campaign_id and row["status"] == "pending":
                return copy.deepcopy(row)
        return None

    async def list_edit_requests(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        await self._before_read("list_edit_requests")
        rows = [r for r in self.edits.values() if status is None or r["status"] == status]
        rows.sort(key=lambda r: r["requested_at"])
        return copy.deepcopy(rows)

    async def update_edit_request(self, edit_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        await self._before_write("update_edit_request")
        row = self.edits.get(edit_id)
        if row is None or row["status"] != "pending":
            return None
        row.update(copy.deepcopy(fields))
        return copy.deepcopy(row)

    async def apply_edit_request(
        self,
        edit_id: str,
        campaign_id: str,
        campaign_fields: Dict[str, Any],
        edit_fields: Dict[str, Any],
    ) -> Optional[Tuple[Dict[str, Any], Dict[str, Any]]]:
        await self._before_write("apply_edit_request")
        edit = self.edits.get(edit_id)
        if edit is None or edit["status"] != "pending":
            return None
        campaign = self.campaigns.get(campaign_id)
        if campaign is None:
            raise LookupError(f"Campaign not found: {campaign_id}")
        campaign.update(copy.deepcopy(campaign_fields))
        campaign["updated_at"] = datetime.now(timezone.utc)
        edit.update(copy.deepcopy(edit_fields))
        return copy.deepcopy(campaign), copy.deepcopy(edit)


# ====================
# Mock Event Bus
# ====================


class MockEventBus:
    """Mock event bus for component testing"""

    def __init__(self):
        self.published_events: List[Dict[str, Any]] = []
        self.is_connected = True
        self.fail = False

    async def publish_event(self, event) -> bool:
        if self.fail:
            raise ConnectionError("NATS unavailable")
        self.published_events.append(
            {
                "event_type": event.type,
                "source": event.source,
                "subject": event.subject,
                "data": event.data,
            }
        )
        return True

    async def close(self) -> None:
        self.is_connected = False

    def get_events_by_type(self, event_type: str) -> List[Dict]:
        return [e for e in self.published_events if e["event_type"] == event_type]

    def clear_events(self):
        self.published_events = []


# ====================
# Fixtures
# ====================


@pytest.fixture
def factory():
    """Provide CampaignReviewTestDataFactory"""
    return CampaignReviewTestDataFactory


@pytest.fixture
def mock_repository():
    """Fresh mock repository for each test"""
    return MockCampaignRepository()


@pytest.fixture
def mock_event_bus():
    """Fresh mock event bus for each test"""
    return MockEventBus()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def gateway(mock_repository):
    return CampaignStoreGateway(mock_repository, read_timeout=1.0, write_timeout=1.0)


@pytest.fixture
def publisher(mock_event_bus):
    return CampaignReviewEventPublisher(mock_event_bus)


@pytest.fixture
def reader(gateway):
    return ResilientCampaignReader(gateway)


@pytest.fixture
def lifecycle(gateway, publisher, clock):
    return CampaignLifecycleService(gateway, publisher, clock=clock)


@pytest.fixture
def edit_review(gateway, publisher, clock):
    return EditReviewService(gateway, publisher, clock=clock)


@pytest.fixture
def controller(reader, lifecycle, edit_review):
    return CampaignConsoleController(reader, lifecycle, edit_review, page_size=25, poll_interval=0.01)


@pytest.fixture
def admin(factory):
    return factory.make_admin()
