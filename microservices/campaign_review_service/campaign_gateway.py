"""
Campaign Store Gateway

The only component that talks to the campaign store. It bounds every call with
a timeout, classifies failures, converts rows into canonical models (status
normalization and legacy field shapes are handled here and nowhere else) and
recomputes ``metrics.creators_joined`` from the join records on every read.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Dict, List, Optional, Tuple, TypeVar

import asyncpg
from pydantic import BaseModel, ValidationError

from .calculations import count_active_creators
from .campaign_repository import JSON_COLUMNS
from .legacy_fields import (
    extract_campaign_fields,
    normalize_creator_status,
    normalize_status,
    stored_spellings,
)
from .models import (
    Campaign,
    CampaignCreator,
    CampaignListType,
    CampaignMetrics,
    CampaignPage,
    CampaignStatus,
    ContentType,
    EditRequest,
    EditRequestStatus,
    RejectionFeedback,
)
from .protocols import (
    CampaignNotFoundError,
    CampaignRepositoryProtocol,
    CampaignReviewError,
    EditAlreadyResolvedError,
    SchemaUnavailableError,
    StoreFatalError,
    StoreTimeoutError,
    StoreWriteFailureError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ====================
# Failure classification
# ====================


class StoreFailureKind(str, Enum):
    SCHEMA_UNAVAILABLE = "schema_unavailable"
    TRANSIENT = "transient"
    FATAL = "fatal"


# undefined table / function / column, invalid schema, RPC function not found
SCHEMA_ERROR_CODES = frozenset({"42P01", "42883", "42703", "3F000", "PGRST202", "PGRST205"})

# connection exception, insufficient resources, operator intervention
TRANSIENT_SQLSTATE_CLASSES = ("08", "53", "57")

RATE_LIMITED_STATUS = 429


def classify_store_error(error: BaseException) -> StoreFailureKind:
    """Decide whether a store failure is schema, transient or fatal"""
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return StoreFailureKind.TRANSIENT
    if isinstance(error, (asyncpg.exceptions.InterfaceError, asyncpg.exceptions.PostgresConnectionError)):
        return StoreFailureKind.TRANSIENT

    code = getattr(error, "sqlstate", None) or getattr(error, "code", None)
    if isinstance(code, str):
        if code in SCHEMA_ERROR_CODES:
            return StoreFailureKind.SCHEMA_UNAVAILABLE
        if code[:2] in TRANSIENT_SQLSTATE_CLASSES:
            return StoreFailureKind.TRANSIENT

    status = getattr(error, "status", None) or getattr(error, "status_code", None)
    if status == RATE_LIMITED_STATUS:
        return StoreFailureKind.TRANSIENT

    message = str(error).lower()
    if "does not exist" in message and ("relation" in message or "function" in message):
        return StoreFailureKind.SCHEMA_UNAVAILABLE

    return StoreFailureKind.FATAL


# ====================
# Row decoding
# ====================


def _decode_json(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def _decode_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: _decode_json(value) if key in JSON_COLUMNS else value
        for key, value in row.items()
    }


def _joined_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "\n".join(str(item) for item in value)
    return str(value)


def _to_column(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_to_column(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    return value


def to_columns(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Convert model-valued fields into column values"""
    return {key: _to_column(value) for key, value in fields.items()}


class CampaignStoreGateway:
    """Typed, classified access to the campaign store"""

    LIST_STATUSES: Dict[CampaignListType, Tuple[CampaignStatus, ...]] = {
        CampaignListType.PENDING: (CampaignStatus.PENDING_APPROVAL,),
        CampaignListType.ACTIVE: (CampaignStatus.ACTIVE, CampaignStatus.PAUSED),
        CampaignListType.COMPLETED: (CampaignStatus.COMPLETED,),
    }

    METRIC_FIELDS = ("views", "engagement", "creators_joined", "posts_submitted", "posts_approved")

    def __init__(
        self,
        repository: CampaignRepositoryProtocol,
        read_timeout: float = 15.0,
        write_timeout: float = 15.0,
    ):
        self.repository = repository
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout

    # ====================
    # Call wrappers
    # ====================

    async def _read(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.read_timeout)
        except CampaignReviewError:
            raise
        except Exception as e:
            raise self._read_failure(operation, e) from e

    def _read_failure(self, operation: str, error: Exception) -> CampaignReviewError:
        kind = classify_store_error(error)
        if kind == StoreFailureKind.SCHEMA_UNAVAILABLE:
            logger.warning(f"{operation}: store schema unavailable: {error}")
            return SchemaUnavailableError(f"{operation}: store schema unavailable", cause=error)
        if kind == StoreFailureKind.TRANSIENT:
            logger.warning(f"{operation}: store unavailable ({type(error).__name__}): {error}")
            return StoreTimeoutError(f"{operation}: store timed out or unavailable", cause=error)
        logger.error(f"{operation}: store failure: {error}", exc_info=error)
        return StoreFatalError(f"{operation}: {error}", cause=error)

    async def _write(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.write_timeout)
        except CampaignReviewError:
            raise
        except Exception as e:
            logger.error(f"{operation}: write failed: {e}", exc_info=e)
            raise StoreWriteFailureError(f"{operation} failed: {e}", cause=e) from e

    # ====================
    # Row mapping
    # ====================

    def _to_campaign(self, row: Dict[str, Any], creators_joined: int) -> Campaign:
        """Map a stored row onto Campaign; raises ValueError for unusable rows"""
        data = _decode_row(row)
        campaign_id = data.get("campaign_id") or data.get("id")

        status = normalize_status(data.get("status"))
        if status is None:
            raise ValueError(f"unknown status {data.get('status')!r} on campaign {campaign_id}")

        fields = extract_campaign_fields(data)
        content_type = fields.get("content_type")
        if content_type not in {item.value for item in ContentType}:
            if content_type is not None:
                logger.warning(f"Campaign {campaign_id}: unknown content type {content_type!r}, using original")
            fields["content_type"] = ContentType.ORIGINAL

        stored_metrics = data.get("metrics") if isinstance(data.get("metrics"), dict) else {}
        metrics = {key: stored_metrics[key] for key in self.METRIC_FIELDS if stored_metrics.get(key) is not None}
        metrics["creators_joined"] = creators_joined

        feedback = data.get("rejection_feedback")
        rejection_feedback = None
        if isinstance(feedback, dict):
            rejection_feedback = RejectionFeedback(
                reasons=_joined_text(feedback.get("reasons")),
                recommendations=_joined_text(feedback.get("recommendations")),
            )
        elif feedback:
            rejection_feedback = RejectionFeedback(reasons=str(feedback), recommendations="")

        now = datetime.now(timezone.utc)
        try:
            return Campaign(
                campaign_id=campaign_id,
                brand_id=data.get("brand_id") or "",
                brand_name=data.get("brand_name"),
                status=status,
                rejection_feedback=rejection_feedback,
                pause_reason=data.get("pause_reason"),
                approval_notes=data.get("approval_notes"),
                completion_reason=data.get("completion_reason"),
                reviewed_by=data.get("reviewed_by"),
                reviewed_at=data.get("reviewed_at"),
                metrics=CampaignMetrics(**metrics),
                created_at=data.get("created_at") or now,
                updated_at=data.get("updated_at") or now,
                **fields,
            )
        except ValidationError as e:
            raise ValueError(f"malformed campaign {campaign_id}: {e}") from e

    def _to_creator(self, row: Dict[str, Any]) -> Optional[CampaignCreator]:
        data = _decode_row(row)
        status = normalize_creator_status(data.get("status"))
        if status is None:
            logger.warning(
                f"Skipping creator {data.get('creator_id')} on campaign {data.get('campaign_id')}: "
                f"unknown status {data.get('status')!r}"
            )
            return None
        platforms = data.get("platforms")
        return CampaignCreator(
            creator_id=data.get("creator_id"),
            campaign_id=data.get("campaign_id"),
            creator_name=data.get("creator_name"),
            status=status,
            platforms=platforms if isinstance(platforms, list) else ([platforms] if platforms else []),
            joined_at=data.get("joined_at"),
        )

    def _to_edit_request(self, row: Dict[str, Any]) -> EditRequest:
        data = _decode_row(row)
        try:
            status = EditRequestStatus(str(data.get("status") or "pending").lower())
        except ValueError:
            raise StoreFatalError(f"Edit request {data.get('edit_id')} has unknown status {data.get('status')!r}")
        return EditRequest(
            edit_id=data.get("edit_id"),
            campaign_id=data.get("campaign_id"),
            old_data=data.get("old_data") or {},
            new_data=data.get("new_data") or {},
            change_reason=data.get("change_reason") or "",
            requested_by=data.get("requested_by") or "",
            requested_at=data.get("requested_at") or datetime.now(timezone.utc),
            key_changes=data.get("key_changes") or [],
            status=status,
            review_notes=data.get("review_notes"),
            rejection_reason=data.get("rejection_reason"),
            reviewed_by=data.get("reviewed_by"),
            reviewed_at=data.get("reviewed_at"),
        )

    # ====================
    # Campaign reads
    # ====================

    async def list_campaigns(
        self,
        list_type: CampaignListType,
        page: int = 1,
        page_size: int = 25,
        search: Optional[str] = None,
    ) -> CampaignPage:
        """Fetch one page of a console list"""
        operation = f"list_{list_type.value}"
        statuses = stored_spellings(*self.LIST_STATUSES[list_type])
        offset = (max(page, 1) - 1) * page_size

        rows, total = await self._read(
            operation,
            self.repository.list_campaigns(statuses, search=search, limit=page_size, offset=offset),
        )
        ids = [row.get("campaign_id") or row.get("id") for row in rows]
        counts = await self._read(f"{operation}_creators", self.repository.count_active_creators(ids))

        campaigns = []
        for row, campaign_id in zip(rows, ids):
            try:
                campaigns.append(self._to_campaign(row, counts.get(campaign_id, 0)))
            except ValueError as e:
                logger.warning(f"Skipping campaign in {operation}: {e}")

        return CampaignPage(campaigns=campaigns, total=total)

    async def _get_row(self, campaign_id: str) -> Dict[str, Any]:
        row = await self._read("get_campaign", self.repository.get_campaign(campaign_id))
        if not row:
            raise CampaignNotFoundError(f"Campaign not found: {campaign_id}")
        return row

    def _map_point_read(self, row: Dict[str, Any], creators_joined: int) -> Campaign:
        try:
            return self._to_campaign(row, creators_joined)
        except ValueError as e:
            logger.error(f"Unusable campaign record: {e}")
            raise StoreFatalError(str(e), cause=e) from e

    async def get_campaign(self, campaign_id: str) -> Campaign:
        """Get the live campaign record"""
        row = await self._get_row(campaign_id)
        counts = await self._read("get_campaign_creators", self.repository.count_active_creators([campaign_id]))
        return self._map_point_read(row, counts.get(campaign_id, 0))

    async def get_with_creators(self, campaign_id: str) -> Tuple[Campaign, List[CampaignCreator]]:
        """Get a campaign with its creator join records"""
        row = await self._get_row(campaign_id)
        creator_rows = await self._read(
            "get_campaign_creators", self.repository.list_campaign_creators(campaign_id)
        )
        creators = [c for c in (self._to_creator(r) for r in creator_rows) if c is not None]
        return self._map_point_read(row, count_active_creators(creators)), creators

    # ====================
    # Edit request reads
    # ====================

    async def has_pending_edit(self, campaign_id: str) -> bool:
        row = await self._read(
            "get_pending_edit", self.repository.get_pending_edit_for_campaign(campaign_id)
        )
        return row is not None

    async def get_edit_request(self, edit_id: str) -> Optional[EditRequest]:
        row = await self._read("get_edit_request", self.repository.get_edit_request(edit_id))
        return self._to_edit_request(row) if row else None

    async def list_edit_requests(self, status: Optional[EditRequestStatus] = None) -> List[EditRequest]:
        rows = await self._read(
            "list_edit_requests",
            self.repository.list_edit_requests(status.value if status else None),
        )
        return [self._to_edit_request(row) for row in rows]

    # ====================
    # Writes
    # ====================

    async def write_campaign(self, campaign: Campaign, fields: Dict[str, Any]) -> Campaign:
        """
        Persist ``fields`` on ``campaign`` with one write.

        The returned record carries the creators_joined value already
        reconciled on ``campaign``; metrics are never written from here.
        """
        row = await self._write(
            "update_campaign",
            self.repository.update_campaign(campaign.campaign_id, to_columns(fields)),
        )
        if not row:
            raise CampaignNotFoundError(f"Campaign not found: {campaign.campaign_id}")
        return self._map_point_read(row, campaign.metrics.creators_joined)

    async def create_edit_request(self, edit: EditRequest) -> EditRequest:
        row = await self._write(
            "create_edit_request",
            self.repository.create_edit_request(to_columns(edit.model_dump())),
        )
        return self._to_edit_request(row)

    async def update_edit_request(self, edit_id: str, fields: Dict[str, Any]) -> EditRequest:
        row = await self._write(
            "update_edit_request",
            self.repository.update_edit_request(edit_id, to_columns(fields)),
        )
        if not row:
            raise EditAlreadyResolvedError(f"Edit request {edit_id} could not be updated")
        return self._to_edit_request(row)

    async def apply_edit_request(
        self,
        edit: EditRequest,
        campaign: Campaign,
        campaign_fields: Dict[str, Any],
        edit_fields: Dict[str, Any],
    ) -> Tuple[Campaign, EditRequest]:
        """Apply an approved edit and resolve it atomically"""
        result = await self._write(
            "apply_edit_request",
            self.repository.apply_edit_request(
                edit.edit_id,
                campaign.campaign_id,
                to_columns(campaign_fields),
                to_columns(edit_fields),
            ),
        )
        if result is None:
            raise EditAlreadyResolvedError(f"Edit request {edit.edit_id} is no longer pending")
        campaign_row, edit_row = result
        return (
            self._map_point_read(campaign_row, campaign.metrics.creators_joined),
            self._to_edit_request(edit_row),
        )

    async def health_check(self) -> bool:
        return await self.repository.health_check()


__all__ = [
    "CampaignStoreGateway",
    "StoreFailureKind",
    "classify_store_error",
    "to_columns",
]
