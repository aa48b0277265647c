"""
Console Controller

Holds the review console's view state: one page cursor per list with a shared
page size, the provenance of everything on screen, in-flight mutations and the
background refresh loop.

Reads go through the resilience layer and may be cancelled at any time with no
side effects. Mutations go straight to the engines, are shielded from
cancellation and always have their result applied to local state. A mutation
aimed at a record currently shown from stale or placeholder data is refused.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, TypeVar

from .campaign_gateway import CampaignStoreGateway
from .edit_review_service import EditReviewService
from .fallback_data import is_mock_id
from .lifecycle_service import CampaignLifecycleService
from .models import (
    CallerIdentity,
    Campaign,
    CampaignCollection,
    CampaignDetail,
    CampaignListType,
    DataProvenance,
    EditRequest,
)
from .protocols import (
    CampaignValidationError,
    MutationDisabledOnFallbackDataError,
)
from .resilience import ResilientCampaignReader

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ListState:
    """Cursor and last result for one console list"""
    page: int = 1
    collection: Optional[CampaignCollection] = None


class CampaignConsoleController:
    """View-state owner for the campaign review console"""

    DEFAULT_PAGE_SIZE = 25
    DEFAULT_POLL_INTERVAL = 60.0

    def __init__(
        self,
        reader: ResilientCampaignReader,
        lifecycle: CampaignLifecycleService,
        edits: EditReviewService,
        page_size: int = DEFAULT_PAGE_SIZE,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.reader = reader
        self.lifecycle = lifecycle
        self.edits = edits
        self.page_size = page_size
        self.poll_interval = poll_interval
        self.search: Optional[str] = None

        self.lists: Dict[CampaignListType, ListState] = {
            list_type: ListState() for list_type in CampaignListType
        }
        self.detail: Optional[CampaignDetail] = None
        self.pending_edits: List[EditRequest] = []

        self._in_flight: Set[str] = set()
        # campaign id -> epoch at which its mutation finished, kept while a refresh runs
        self._mutation_epoch = 0
        self._mutated_during_refresh: Dict[str, int] = {}
        self._refreshing = False
        self._read_tasks: Set[asyncio.Future] = set()
        self._detail_task: Optional[asyncio.Future] = None
        self._foreground_loads = 0
        self._poll_task: Optional[asyncio.Task] = None

    # ====================
    # Reads
    # ====================

    async def _run_read(self, call: Awaitable[T]) -> T:
        task = asyncio.ensure_future(call)
        self._read_tasks.add(task)
        try:
            return await task
        finally:
            self._read_tasks.discard(task)

    async def load_list(self, list_type: CampaignListType) -> CampaignCollection:
        """Foreground load of the current page of one list"""
        state = self.lists[list_type]
        self._foreground_loads += 1
        try:
            collection = await self._run_read(
                self.reader.list_campaigns(list_type, state.page, self.page_size, self.search)
            )
        finally:
            self._foreground_loads -= 1
        state.collection = collection
        return collection

    async def refresh(self) -> Dict[CampaignListType, CampaignCollection]:
        """Manual refresh of every list"""
        results = await asyncio.gather(
            *(self.load_list(list_type) for list_type in CampaignListType),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return dict(zip(CampaignListType, results))

    async def load_pending_edits(self, caller: CallerIdentity) -> List[EditRequest]:
        self.pending_edits = await self._run_read(self.edits.list_pending_edits(caller))
        return self.pending_edits

    async def open_detail(self, campaign_id: str) -> CampaignDetail:
        """Load one campaign with its creators; replaces any open detail"""
        self.close_detail()
        task = asyncio.ensure_future(self.reader.get_with_creators(campaign_id))
        self._detail_task = task
        try:
            detail = await task
        finally:
            if self._detail_task is task:
                self._detail_task = None
        self.detail = detail
        return detail

    def close_detail(self) -> None:
        if self._detail_task is not None and not self._detail_task.done():
            self._detail_task.cancel()
        self._detail_task = None
        self.detail = None

    def cancel_reads(self) -> None:
        """Abandon every read in progress; view state is left as it was"""
        for task in list(self._read_tasks):
            task.cancel()
        if self._detail_task is not None and not self._detail_task.done():
            self._detail_task.cancel()

    # ====================
    # Pagination
    # ====================

    async def set_page(self, list_type: CampaignListType, page: int) -> CampaignCollection:
        if page < 1:
            raise CampaignValidationError("page must be at least 1", fields=["page"])
        self.lists[list_type].page = page
        return await self.load_list(list_type)

    async def next_page(self, list_type: CampaignListType) -> CampaignCollection:
        return await self.set_page(list_type, self.lists[list_type].page + 1)

    async def previous_page(self, list_type: CampaignListType) -> CampaignCollection:
        return await self.set_page(list_type, max(1, self.lists[list_type].page - 1))

    def _reset_cursors(self) -> None:
        for state in self.lists.values():
            state.page = 1

    async def set_page_size(self, page_size: int) -> Dict[CampaignListType, CampaignCollection]:
        if page_size < 1:
            raise CampaignValidationError("page size must be at least 1", fields=["page_size"])
        self.page_size = page_size
        self._reset_cursors()
        return await self.refresh()

    async def set_search(self, search: Optional[str]) -> Dict[CampaignListType, CampaignCollection]:
        self.search = (search or "").strip() or None
        self._reset_cursors()
        return await self.refresh()

    # ====================
    # Background refresh
    # ====================

    def start_polling(self) -> None:
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._poll_loop())

    async def stop_polling(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            if self._foreground_loads:
                logger.debug("Foreground load running, skipping background refresh")
                continue
            try:
                await self.background_refresh()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Background refresh failed: {e}")

    async def background_refresh(self) -> None:
        """Refetch every list and merge by id

        Records with a mutation in flight, or one that finished after the
        list's read started, keep their local copy for this cycle.
        """
        self._refreshing = True
        try:
            for list_type in CampaignListType:
                state = self.lists[list_type]
                started = self._mutation_epoch
                fetched = await self._run_read(
                    self.reader.list_campaigns(list_type, state.page, self.page_size, self.search)
                )
                state.collection = self._merge(state.collection, fetched, started)
        finally:
            self._refreshing = False
            self._mutated_during_refresh.clear()

    def _skipped_ids(self, started: int) -> Set[str]:
        mutated = {
            campaign_id
            for campaign_id, epoch in self._mutated_during_refresh.items()
            if epoch > started
        }
        return mutated | self._in_flight

    def _merge(
        self, current: Optional[CampaignCollection], fetched: CampaignCollection, started: int
    ) -> CampaignCollection:
        skipped = self._skipped_ids(started)
        if current is None or not skipped:
            return fetched

        local = {campaign.campaign_id: campaign for campaign in current.campaigns}
        merged = []
        seen = set()
        total = fetched.total
        for campaign in fetched.campaigns:
            campaign_id = campaign.campaign_id
            seen.add(campaign_id)
            if campaign_id not in skipped:
                merged.append(campaign)
            elif campaign_id in local:
                merged.append(local[campaign_id])
            else:
                # moved off this list locally
                total -= 1
        for campaign_id in skipped:
            if campaign_id in local and campaign_id not in seen:
                merged.append(local[campaign_id])
                total += 1

        return fetched.model_copy(update={"campaigns": merged, "total": max(0, total)})

    # ====================
    # Provenance
    # ====================

    def provenance_of(self, campaign_id: str) -> DataProvenance:
        """Worst provenance among every place the record is currently shown"""
        seen = []
        for state in self.lists.values():
            collection = state.collection
            if collection is None:
                continue
            if any(c.campaign_id == campaign_id for c in collection.campaigns):
                seen.append(collection.provenance)
        if self.detail is not None and self.detail.campaign.campaign_id == campaign_id:
            seen.append(self.detail.provenance)

        if DataProvenance.MOCK in seen or (not seen and is_mock_id(campaign_id)):
            return DataProvenance.MOCK
        if DataProvenance.STALE in seen:
            return DataProvenance.STALE
        return DataProvenance.LIVE

    def banner(self, list_type: CampaignListType) -> Optional[DataProvenance]:
        """Notice to show above a list, or None when the data is live"""
        collection = self.lists[list_type].collection
        if collection is None or collection.provenance == DataProvenance.LIVE:
            return None
        return collection.provenance

    def is_in_flight(self, campaign_id: str) -> bool:
        return campaign_id in self._in_flight

    def _guard(self, campaign_id: str) -> None:
        provenance = self.provenance_of(campaign_id)
        if provenance != DataProvenance.LIVE:
            raise MutationDisabledOnFallbackDataError(
                f"Campaign {campaign_id} is shown from {provenance.value} data; "
                f"refresh before making changes",
                campaign_id=campaign_id,
            )

    # ====================
    # Mutations
    # ====================

    async def _mutate(
        self,
        campaign_id: str,
        operation: Callable[[], Awaitable[T]],
        apply: Callable[[T], None],
    ) -> T:
        self._guard(campaign_id)
        self._in_flight.add(campaign_id)

        async def run() -> T:
            try:
                result = await operation()
                apply(result)
                return result
            finally:
                self._in_flight.discard(campaign_id)
                self._mutation_epoch += 1
                if self._refreshing:
                    self._mutated_during_refresh[campaign_id] = self._mutation_epoch

        task = asyncio.ensure_future(run())
        task.add_done_callback(self._report_detached_failure)
        return await asyncio.shield(task)

    @staticmethod
    def _report_detached_failure(task: asyncio.Future) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug(f"Mutation finished with error: {error}")

    def _apply_campaign(self, campaign: Campaign) -> None:
        for list_type, state in self.lists.items():
            collection = state.collection
            if collection is None:
                continue
            belongs = campaign.status in CampaignStoreGateway.LIST_STATUSES[list_type]
            campaigns = list(collection.campaigns)
            index = next(
                (i for i, c in enumerate(campaigns) if c.campaign_id == campaign.campaign_id),
                None,
            )
            total = collection.total
            if index is not None and belongs:
                campaigns[index] = campaign
            elif index is not None:
                campaigns.pop(index)
                total = max(0, total - 1)
            elif belongs and state.page == 1:
                campaigns.insert(0, campaign)
                total += 1
            else:
                continue
            state.collection = collection.model_copy(update={"campaigns": campaigns, "total": total})

        if self.detail is not None and self.detail.campaign.campaign_id == campaign.campaign_id:
            self.detail = self.detail.model_copy(update={"campaign": campaign})

    async def submit_campaign(self, caller: CallerIdentity, campaign_id: str) -> Campaign:
        return await self._mutate(
            campaign_id, lambda: self.lifecycle.submit(caller, campaign_id), self._apply_campaign
        )

    async def approve_campaign(
        self, caller: CallerIdentity, campaign_id: str, notes: Optional[str] = None
    ) -> Campaign:
        return await self._mutate(
            campaign_id, lambda: self.lifecycle.approve(caller, campaign_id, notes), self._apply_campaign
        )

    async def reject_campaign(
        self,
        caller: CallerIdentity,
        campaign_id: str,
        reasons: Optional[str],
        recommendations: Optional[str],
    ) -> Campaign:
        return await self._mutate(
            campaign_id,
            lambda: self.lifecycle.reject(caller, campaign_id, reasons, recommendations),
            self._apply_campaign,
        )

    async def pause_campaign(
        self, caller: CallerIdentity, campaign_id: str, reason: Optional[str]
    ) -> Campaign:
        return await self._mutate(
            campaign_id, lambda: self.lifecycle.pause(caller, campaign_id, reason), self._apply_campaign
        )

    async def resume_campaign(self, caller: CallerIdentity, campaign_id: str) -> Campaign:
        return await self._mutate(
            campaign_id, lambda: self.lifecycle.resume(caller, campaign_id), self._apply_campaign
        )

    async def complete_campaign(
        self, caller: CallerIdentity, campaign_id: str, reason: Optional[str] = None
    ) -> Campaign:
        return await self._mutate(
            campaign_id, lambda: self.lifecycle.complete(caller, campaign_id, reason), self._apply_campaign
        )

    # ====================
    # Edit review
    # ====================

    def _edit_target(self, edit_id: str) -> Optional[str]:
        for edit in self.pending_edits:
            if edit.edit_id == edit_id:
                return edit.campaign_id
        return None

    def _drop_pending_edit(self, edit_id: str) -> None:
        self.pending_edits = [edit for edit in self.pending_edits if edit.edit_id != edit_id]

    async def submit_edit(
        self,
        caller: CallerIdentity,
        campaign_id: str,
        new_data: Dict[str, Any],
        change_reason: Optional[str],
    ) -> EditRequest:
        def apply(edit: EditRequest) -> None:
            self.pending_edits = self.pending_edits + [edit]

        return await self._mutate(
            campaign_id,
            lambda: self.edits.submit_edit(caller, campaign_id, new_data, change_reason),
            apply,
        )

    async def approve_edit(
        self, caller: CallerIdentity, edit_id: str, notes: Optional[str] = None
    ) -> EditRequest:
        """Approve an edit, then refresh the pending and active lists"""
        target = self._edit_target(edit_id) or edit_id

        def apply(result) -> None:
            campaign, _ = result
            self._apply_campaign(campaign)
            self._drop_pending_edit(edit_id)

        _, resolved = await self._mutate(
            target, lambda: self.edits.approve_edit(caller, edit_id, notes), apply
        )
        await self._refresh_after_edit()
        return resolved

    async def reject_edit(
        self, caller: CallerIdentity, edit_id: str, reason: Optional[str]
    ) -> EditRequest:
        target = self._edit_target(edit_id) or edit_id
        return await self._mutate(
            target,
            lambda: self.edits.reject_edit(caller, edit_id, reason),
            lambda _: self._drop_pending_edit(edit_id),
        )

    async def _refresh_after_edit(self) -> None:
        results = await asyncio.gather(
            self.load_list(CampaignListType.PENDING),
            self.load_list(CampaignListType.ACTIVE),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.warning(f"Refresh after edit approval failed: {result}")

    async def close(self) -> None:
        await self.stop_polling()
        self.cancel_reads()
