"""
Campaign Review Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from core.nats_client import Event

from .models import CampaignStatus


# ====================
# Repository Protocol
# ====================


class CampaignRepositoryProtocol(Protocol):
    """
    Protocol for the raw campaign store.

    Works on plain row dicts; the gateway owns all conversion into models and
    all error classification.
    """

    async def initialize(self) -> None:
        """Initialize repository connection"""
        ...

    async def close(self) -> None:
        """Close repository connection"""
        ...

    async def health_check(self) -> bool:
        """Check repository health"""
        ...

    # Campaign reads
    async def list_campaigns(
        self,
        statuses: Sequence[str],
        search: Optional[str] = None,
        limit: int = 25,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """List campaign rows whose stored status is one of ``statuses``"""
        ...

    async def get_campaign(self, campaign_id: str) -> Optional[Dict[str, Any]]:
        """Get campaign row by ID"""
        ...

    async def list_campaign_creators(self, campaign_id: str) -> List[Dict[str, Any]]:
        """Get creator join rows for a campaign"""
        ...

    async def count_active_creators(self, campaign_ids: Sequence[str]) -> Dict[str, int]:
        """Count active join rows per campaign"""
        ...

    # Campaign writes
    async def update_campaign(
        self, campaign_id: str, fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Apply ``fields`` to a campaign in one statement and return the row"""
        ...

    # Edit requests
    async def create_edit_request(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert an edit request row"""
        ...

    async def get_edit_request(self, edit_id: str) -> Optional[Dict[str, Any]]:
        """Get edit request row by ID"""
        ...

    async def get_pending_edit_for_campaign(self, campaign_id: str) -> Optional[Dict[str, Any]]:
        """Get the pending edit request row for a campaign, if any"""
        ...

    async def list_edit_requests(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        """List edit request rows, optionally by status"""
        ...

    async def update_edit_request(
        self, edit_id: str, fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Update an edit request row"""
        ...

    async def apply_edit_request(
        self,
        edit_id: str,
        campaign_id: str,
        campaign_fields: Dict[str, Any],
        edit_fields: Dict[str, Any],
    ) -> Optional[Tuple[Dict[str, Any], Dict[str, Any]]]:
        """Update the campaign and resolve the edit request atomically"""
        ...


# ====================
# Event Bus Protocol
# ====================


class EventBusProtocol(Protocol):
    """Protocol for the notification runtime"""

    async def publish_event(self, event: Event) -> bool:
        """Publish an event"""
        ...


# ====================
# Custom Exceptions
# ====================


class CampaignReviewError(Exception):
    """Base exception for campaign review errors"""

    error_code = "CampaignReviewError"


class CampaignValidationError(CampaignReviewError):
    """Raised when input fails validation; lists every failing field"""

    error_code = "ValidationError"

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class InvalidTransitionError(CampaignReviewError):
    """Raised when an event is not allowed from the campaign's current status"""

    error_code = "InvalidTransition"

    def __init__(
        self,
        message: str,
        current_status: Optional[CampaignStatus] = None,
        requested: Optional[str] = None,
    ):
        super().__init__(message)
        self.current_status = current_status
        self.requested = requested


class EditNotFoundError(CampaignReviewError):
    """Raised when an edit request does not exist"""

    error_code = "EditNotFound"


class EditAlreadyResolvedError(CampaignReviewError):
    """Raised when an edit request is no longer pending"""

    error_code = "EditAlreadyResolved"


class MutationDisabledOnFallbackDataError(CampaignReviewError):
    """Raised when a mutation targets a record shown from stale or mock data"""

    error_code = "MutationDisabledOnFallbackData"

    def __init__(self, message: str, campaign_id: Optional[str] = None):
        super().__init__(message)
        self.campaign_id = campaign_id


class UnauthorizedError(CampaignReviewError):
    """Raised when the caller's role does not permit the operation"""

    error_code = "Unauthorized"


class CampaignNotFoundError(CampaignReviewError):
    """Raised when campaign is not found"""

    error_code = "CampaignNotFound"


class StoreUnavailableError(CampaignReviewError):
    """Raised on read paths when the store cannot serve the request"""

    error_code = "StoreUnavailable"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class SchemaUnavailableError(StoreUnavailableError):
    """The backing table, view or function is missing"""


class StoreTimeoutError(StoreUnavailableError):
    """The store did not answer in time, dropped the connection or throttled us"""


class StoreFatalError(CampaignReviewError):
    """Unclassified store failure on a read path"""

    error_code = "StoreFatal"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class StoreWriteFailureError(CampaignReviewError):
    """Raised when a store write fails; never retried"""

    error_code = "StoreWriteFailure"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


__all__ = [
    "CampaignRepositoryProtocol",
    "EventBusProtocol",
    "CampaignReviewError",
    "CampaignValidationError",
    "InvalidTransitionError",
    "EditNotFoundError",
    "EditAlreadyResolvedError",
    "MutationDisabledOnFallbackDataError",
    "UnauthorizedError",
    "CampaignNotFoundError",
    "StoreUnavailableError",
    "SchemaUnavailableError",
    "StoreTimeoutError",
    "StoreFatalError",
    "StoreWriteFailureError",
]
