"""
Layout editor: the shared seating layout plus per-connection view state.

``LayoutEditor`` owns the in-memory layout and keeps it in step with the
store. Every edit is applied locally first. Structural edits are written
straight away through the retry wrapper; table moves are debounced per
table so a drag produces a single write. A write that still fails after
the retries leaves the local edit in place, marks the table as unsynced
and flips the status to ``error``; the next save or ``flush`` of that
table retries it.

``EditorSession`` is what one admin connection sees: zoom, the selected
table and a drag controller over the shared layout.
"""

import logging
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from seatplan.editor.cache import LayoutCache
from seatplan.editor.debounce import Debouncer
from seatplan.editor.document import dump_layout, parse_layout
from seatplan.editor.drag import DragController, GestureAction, GestureOutcome
from seatplan.editor.errors import TableNotFoundError
from seatplan.editor.layout import DEFAULT_SEAT_COUNT, AssignmentResult, Layout, Table, default_layout
from seatplan.editor.retry import RetryResult, execute_with_retry, linear_backoff
from seatplan.schemas.layout import table_to_view
from seatplan.services.errors import StoreError
from seatplan.services.layout_store import LayoutStore

logger = logging.getLogger(__name__)

ZOOM_MIN = 0.5
ZOOM_MAX = 2.0
ZOOM_STEP = 0.1

ChangeListener = Callable[[str, Dict[str, Any]], Awaitable[None]]


class SyncStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class LayoutEditor:
    def __init__(
        self,
        store: LayoutStore,
        cache: Optional[LayoutCache] = None,
        debounce_delay: float = 0.8,
        retry_attempts: int = 3,
        retry_backoff: float = 0.5,
    ):
        self.layout = Layout()
        self.store = store
        self.cache = cache or LayoutCache(None)
        self.debouncer = Debouncer(debounce_delay)
        self.retry_attempts = retry_attempts
        self.backoff = linear_backoff(retry_backoff)
        self.status = SyncStatus.IDLE
        self.unsynced: Set[int] = set()
        self.unsynced_deletes: Set[int] = set()
        self.last_error: Optional[str] = None
        self.loaded_from: Optional[str] = None
        self._listeners: List[ChangeListener] = []
        self._sessions: "weakref.WeakSet[EditorSession]" = weakref.WeakSet()

    # -------- notifications --------

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def attach(self, session: "EditorSession") -> None:
        self._sessions.add(session)

    async def _notify(self, event: str, payload: Dict[str, Any]) -> None:
        for listener in self._listeners:
            await listener(event, payload)

    async def _notify_table(self, event: str, table: Table) -> None:
        await self._notify(event, {"table": table_to_view(table).dict(), "sync": self.sync_state()})

    # -------- persistence --------

    async def _retry(self, operation, description: str) -> RetryResult:
        return await execute_with_retry(
            operation,
            attempts=self.retry_attempts,
            backoff=self.backoff,
            retry_on=(StoreError,),
            description=description,
            run_in_thread=True,
        )

    def _record(self, result: RetryResult, numbers) -> None:
        if result.success:
            self.unsynced.difference_update(numbers)
        else:
            self.unsynced.update(numbers)
            self.last_error = str(result.error)
        if self.unsynced or self.unsynced_deletes:
            self.status = SyncStatus.ERROR
        else:
            self.status = SyncStatus.SAVED
            self.last_error = None
        self.cache.write(self.layout.tables)

    async def load(self) -> Layout:
        """Read the stored layout, seeding the default arrangement when empty.

        When the store is unreachable the cached copy (or the default) is
        used and every table is marked unsynced.
        """
        result = await self._retry(self.store.load_tables, "Loading layout")
        if result.success and result.value:
            self.layout.replace(result.value)
            self.loaded_from = "store"
            self.status = SyncStatus.SAVED
            self.cache.write(self.layout.tables)
        elif result.success:
            logger.info("No stored layout, seeding the default arrangement")
            self.layout.replace(default_layout())
            self.loaded_from = "default"
            await self._save_all()
        else:
            cached = self.cache.read()
            if cached is not None:
                logger.warning("Store unreachable, using cached layout")
                self.layout.replace(cached)
                self.loaded_from = "cache"
            else:
                logger.warning("Store unreachable and no cache, using default layout")
                self.layout.replace(default_layout())
                self.loaded_from = "default"
            self.unsynced = {table.number for table in self.layout}
            self.status = SyncStatus.ERROR
            self.last_error = str(result.error)
        logger.info(f"Layout loaded from {self.loaded_from}: {len(self.layout)} tables")
        return self.layout

    async def save_table(self, number: int) -> RetryResult:
        self.debouncer.cancel(number)
        try:
            table = self.layout.get(number)
        except TableNotFoundError:
            # deleted before the write ran
            self.unsynced.discard(number)
            return RetryResult(success=True)
        self.status = SyncStatus.SAVING
        result = await self._retry(lambda: self.store.save_table(table), f"Saving table {number}")
        self._record(result, [number])
        return result

    def schedule_save(self, number: int) -> None:
        self.debouncer.schedule(number, lambda: self.save_table(number))
        self.cache.write(self.layout.tables)

    async def _save_all(self) -> RetryResult:
        self.debouncer.cancel_all()
        tables = list(self.layout.tables)
        self.status = SyncStatus.SAVING
        result = await self._retry(lambda: self.store.replace_all(tables), "Saving layout")
        if result.success:
            self.unsynced_deletes.clear()
        self._record(result, [table.number for table in tables])
        return result

    async def _delete_stored(self, number: int) -> RetryResult:
        result = await self._retry(lambda: self.store.delete_table(number), f"Deleting table {number}")
        if result.success:
            self.unsynced_deletes.discard(number)
        else:
            self.unsynced_deletes.add(number)
        self._record(result, [])
        return result

    async def flush(self) -> None:
        """Write pending debounced saves and retry anything unsynced"""
        await self.debouncer.flush()
        for number in sorted(self.unsynced_deletes):
            await self._delete_stored(number)
        for number in sorted(self.unsynced):
            await self.save_table(number)

    async def close(self) -> None:
        await self.flush()
        self.debouncer.cancel_all()

    def sync_state(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "unsynced_tables": sorted(self.unsynced | self.unsynced_deletes),
            "pending_saves": sorted(self.debouncer.pending_keys()),
            "last_error": self.last_error,
        }

    # -------- commands --------

    async def add_table(self, x: Optional[float] = None, y: Optional[float] = None,
                        seat_count: int = DEFAULT_SEAT_COUNT) -> Table:
        table = self.layout.add_table(x, y, seat_count=seat_count)
        await self.save_table(table.number)
        await self._notify_table("table_added", table)
        return table

    async def delete_table(self, number: int) -> Table:
        table = self.layout.delete_table(number)
        for session in list(self._sessions):
            session.forget_table(table)
        self.debouncer.cancel(number)
        self.unsynced.discard(number)
        await self._delete_stored(number)
        await self._notify("table_deleted", {"table_number": number, "sync": self.sync_state()})
        return table

    async def add_seat(self, number: int) -> Table:
        table = self.layout.get(number)
        if table.add_seat():
            await self.save_table(number)
            await self._notify_table("table_updated", table)
        return table

    async def remove_seat(self, number: int) -> Table:
        table = self.layout.get(number)
        if table.remove_seat():
            await self.save_table(number)
            await self._notify_table("table_updated", table)
        return table

    async def rename_table(self, number: int, label: str) -> Table:
        table = self.layout.rename_table(number, label)
        await self.save_table(number)
        await self._notify_table("table_updated", table)
        return table

    async def assign_seat(self, number: int, seat_index: int, guest_name: Optional[str],
                          tag: Optional[str] = None, note: Optional[str] = None,
                          allow_duplicate: bool = False) -> AssignmentResult:
        result = self.layout.assign_seat(number, seat_index, guest_name, tag, note, allow_duplicate)
        await self.save_table(number)
        await self._notify_table("table_updated", result.table)
        return result

    async def move_table(self, number: int, x: float, y: float) -> Table:
        """Move immediately; the write waits until the table stops moving"""
        table = self.layout.move_table(number, x, y)
        self.schedule_save(number)
        await self._notify_table("table_moved", table)
        return table

    async def import_layout(self, raw: Union[str, bytes]) -> Layout:
        tables = parse_layout(raw)
        self.layout.replace(tables)
        self._clear_sessions()
        await self._save_all()
        await self._notify("layout_replaced", {"table_count": len(tables), "sync": self.sync_state()})
        return self.layout

    def export_layout(self) -> str:
        return dump_layout(self.layout.tables)

    async def reset_to_default(self) -> Layout:
        self.layout.replace(default_layout())
        self._clear_sessions()
        await self._save_all()
        await self._notify("layout_replaced", {"table_count": len(self.layout), "sync": self.sync_state()})
        return self.layout

    def search(self, query: str) -> Optional[Table]:
        return self.layout.find_guest(query)

    def _clear_sessions(self) -> None:
        for session in list(self._sessions):
            session.clear()


@dataclass
class SearchResult:
    table: Table
    scroll_x: float
    scroll_y: float


class EditorSession:
    def __init__(self, editor: LayoutEditor):
        self.editor = editor
        self.zoom = 1.0
        self._selected: Optional[int] = None
        self.drag = DragController(editor.layout)
        editor.attach(self)

    # -------- zoom --------

    def set_zoom(self, value: float) -> float:
        self.zoom = round(max(ZOOM_MIN, min(ZOOM_MAX, value)), 2)
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom + ZOOM_STEP)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom - ZOOM_STEP)

    def reset_zoom(self) -> float:
        return self.set_zoom(1.0)

    # -------- selection --------

    def forget_table(self, table: Table) -> None:
        """Drop selection and gesture state that point at a deleted table"""
        if self._selected == table.number:
            self._selected = None
        if self.drag.table_id == table.id:
            self.drag.reset()

    def clear(self) -> None:
        self._selected = None
        self.drag.reset()

    @property
    def selected_table(self) -> Optional[Table]:
        if self._selected is None:
            return None
        try:
            return self.editor.layout.get(self._selected)
        except TableNotFoundError:
            self._selected = None
            return None

    def select(self, number: Optional[int]) -> Optional[Table]:
        if number is None:
            self._selected = None
            return None
        table = self.editor.layout.get(number)
        self._selected = number
        return table

    def search(self, query: str, viewport_width: float = 0, viewport_height: float = 0) -> Optional[SearchResult]:
        """Select and centre on the first table seating a matching guest.

        Without a match the selection is left as it was.
        """
        table = self.editor.search(query)
        if table is None:
            return None
        self._selected = table.number
        return SearchResult(
            table=table,
            scroll_x=table.x * self.zoom - viewport_width / 2,
            scroll_y=table.y * self.zoom - viewport_height / 2,
        )

    # -------- pointer gestures --------

    def pointer_down(self, table_id: str, x: float, y: float) -> bool:
        return self.drag.pointer_down(table_id, x, y, self.zoom)

    def pointer_move(self, x: float, y: float) -> Optional[Table]:
        return self.drag.pointer_move(x, y, self.zoom)

    async def pointer_up(self) -> GestureOutcome:
        return await self._finish(self.drag.pointer_up())

    async def pointer_leave(self) -> GestureOutcome:
        return await self._finish(self.drag.pointer_leave())

    async def _finish(self, outcome: GestureOutcome) -> GestureOutcome:
        if outcome.action == GestureAction.DROP:
            self._selected = outcome.table.number
            await self.editor.move_table(outcome.table.number, outcome.table.x, outcome.table.y)
        elif outcome.action == GestureAction.SELECT:
            self._selected = outcome.table.number
        return outcome
