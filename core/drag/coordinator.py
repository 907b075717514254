# core/drag/coordinator.py

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Sequence

from core.drag.placement import SlotGeometry, find_insertion_slot
from core.models.book import COLUMN_IDS, is_column, column_key
from core.models.results import StoreResult
from core.store.library_store import LibraryStore

logger = logging.getLogger(__name__)

PLACEHOLDER = "__placeholder__"

class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"

@dataclass(frozen=True)
class Placeholder:
    column: str
    before: Optional[str] = None  # None means the end of the column

@dataclass(frozen=True)
class DragState:
    book_id: str
    source_column: str
    placeholder: Placeholder
    hover_column: Optional[str] = None

@dataclass(frozen=True)
class DropOutcome:
    committed: bool
    result: Optional[StoreResult] = None
    reloaded: bool = False

class DragTransferCoordinator:
    """Turns one pointer drag gesture into at most one LibraryStore.move_book call.

    The view and placeholder are presentation state only. After every drop
    or cancel the view is rebuilt from the store, and a failed move reloads
    the store from its repository first.
    """

    def __init__(self, store: LibraryStore):
        self.store = store
        self._phase = DragPhase.IDLE
        self._state: Optional[DragState] = None
        self._view: Dict[str, List[str]] = {}
        self.reconcile()

    @property
    def phase(self) -> DragPhase:
        return self._phase

    @property
    def state(self) -> Optional[DragState]:
        return self._state

    @property
    def placeholder(self) -> Optional[Placeholder]:
        return self._state.placeholder if self._state else None

    @property
    def view(self) -> Dict[str, List[str]]:
        """Book ids per column in display order, as last reconciled with the store."""
        return {column_id: list(ids) for column_id, ids in self._view.items()}

    def preview(self) -> Dict[str, List[str]]:
        """The view with the PLACEHOLDER marker inserted at the current insertion slot."""
        columns = self.view
        placeholder = self.placeholder
        if placeholder is None:
            return columns
        ids = columns[placeholder.column]
        if placeholder.before in ids:
            ids.insert(ids.index(placeholder.before), PLACEHOLDER)
        else:
            ids.append(PLACEHOLDER)
        return columns

    def reconcile(self) -> Dict[str, List[str]]:
        snapshot = self.store.get_snapshot()
        self._view = {
            column_id: [book.id for book in snapshot.columns[column_id]]
            for column_id in COLUMN_IDS
        }
        return self.view

    # ------------------------------------------------------------------ #
    # Gesture events

    def start(self, book_id: str, source_column) -> bool:
        """Pick up book_id; the placeholder starts right after it."""
        if self._phase != DragPhase.IDLE:
            logger.debug(f"Ignoring drag start for {book_id}: already {self._phase.value}")
            return False
        if not is_column(source_column):
            return False
        source_column = column_key(source_column)
        ids = self._view.get(source_column, [])
        if book_id not in ids:
            logger.debug(f"Ignoring drag start: {book_id} is not shown in {source_column}")
            return False

        index = ids.index(book_id)
        following = ids[index + 1] if index + 1 < len(ids) else None
        self._state = DragState(
            book_id=book_id,
            source_column=source_column,
            placeholder=Placeholder(column=source_column, before=following),
        )
        self._phase = DragPhase.DRAGGING
        return True

    def enter(self, column) -> None:
        if self._phase == DragPhase.DRAGGING and is_column(column):
            self._state = replace(self._state, hover_column=column_key(column))

    def leave(self, column) -> None:
        if self._phase == DragPhase.DRAGGING and self._state.hover_column == column_key(column):
            self._state = replace(self._state, hover_column=None)

    def hover(self, column, pointer_y: float, elements: Sequence[SlotGeometry]) -> Optional[Placeholder]:
        """Reposition the placeholder within column for the given pointer position."""
        if self._phase != DragPhase.DRAGGING or not is_column(column):
            return None
        column = column_key(column)
        before = find_insertion_slot(elements, pointer_y, dragging_id=self._state.book_id)
        placeholder = Placeholder(column=column, before=before)
        self._state = replace(self._state, placeholder=placeholder, hover_column=column)
        return placeholder

    def drop(self, column) -> DropOutcome:
        """Finish the gesture over column; commits only when the column changed."""
        if self._phase != DragPhase.DRAGGING:
            return DropOutcome(committed=False)

        book_id = self._state.book_id
        source = self._state.source_column
        self._phase = DragPhase.COMMITTING
        result = None
        reloaded = False
        try:
            if is_column(column) and column_key(column) != source:
                result = self.store.move_book(book_id, source, column_key(column))
                if not result:
                    logger.warning(f"Move of {book_id} failed ({result.message}); reloading library")
                    self.store.reload()
                    reloaded = True
        finally:
            self._finish()
        return DropOutcome(committed=bool(result), result=result, reloaded=reloaded)

    def cancel(self) -> bool:
        """Abort the gesture without touching the store."""
        if self._phase == DragPhase.IDLE:
            return False
        self._finish()
        return True

    def _finish(self) -> None:
        self._state = None
        self._phase = DragPhase.IDLE
        self.reconcile()
