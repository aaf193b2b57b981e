"""In-memory store for the items of the current extraction batch."""
from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Callable, Protocol, Sequence

from pdf_extractor.core.validation import ItemNotFoundError, ItemStateError
from pdf_extractor.domain import BatchState, BatchStatus, ExtractionItem, FieldValue, ItemStatus

logger = logging.getLogger(__name__)

ItemListener = Callable[[ExtractionItem], None]


class ItemRepository(Protocol):
    """Persistence contract for extraction items."""

    def start_batch(self, filenames: Sequence[str]) -> tuple[int, list[ExtractionItem]]: ...

    def mark_processing(self, generation: int, item_id: str) -> ExtractionItem | None: ...

    def commit_success(self, generation: int, item_id: str, data: dict[str, FieldValue]) -> ExtractionItem | None: ...

    def commit_error(self, generation: int, item_id: str, message: str) -> ExtractionItem | None: ...

    def complete_batch(self, generation: int) -> bool: ...

    def is_current(self, generation: int) -> bool: ...

    def update_value(self, item_id: str, field: str, value: FieldValue) -> ExtractionItem: ...

    def get_item(self, item_id: str) -> ExtractionItem: ...

    def snapshot(self) -> list[ExtractionItem]: ...

    def get_batch_overview(self) -> dict[str, object]: ...

    def subscribe(self, listener: ItemListener) -> Callable[[], None]: ...

    def reset(self) -> None: ...


class InMemoryItemRepository:
    """Thread safe in-memory repository.

    Every write swaps a whole :class:`ExtractionItem` under the lock, and writes
    tagged with an old batch generation are dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = BatchState()
        self._item_counter = 0
        self._listeners: list[ItemListener] = []

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _next_item_id(self) -> str:
        self._item_counter += 1
        return f"item-{self._item_counter:05d}"

    def _index_of(self, item_id: str) -> int:
        for index, item in enumerate(self._state.items):
            if item.id == item_id:
                return index
        raise ItemNotFoundError(item_id)

    def _notify(self, item: ExtractionItem) -> None:
        for listener in list(self._listeners):
            try:
                listener(item)
            except Exception:
                logger.exception("Item listener failed for %s", item.id)

    def _transition(
        self,
        generation: int,
        item_id: str,
        expected: ItemStatus,
        **changes: object,
    ) -> ExtractionItem | None:
        with self._lock:
            if generation != self._state.generation:
                logger.debug("Dropping stale write for %s (generation %s)", item_id, generation)
                return None
            index = self._index_of(item_id)
            current = self._state.items[index]
            if current.status is not expected:
                logger.debug("Ignoring transition of %s from %s", item_id, current.status.value)
                return None
            updated = replace(current, **changes)
            self._state.items[index] = updated
        self._notify(updated)
        return updated

    # ------------------------------------------------------------------
    # batch lifecycle
    # ------------------------------------------------------------------
    def start_batch(self, filenames: Sequence[str]) -> tuple[int, list[ExtractionItem]]:
        with self._lock:
            self._state.generation += 1
            self._state.status = BatchStatus.EXTRACTING
            self._state.items = [
                ExtractionItem(id=self._next_item_id(), file_name=name) for name in filenames
            ]
            return self._state.generation, list(self._state.items)

    def mark_processing(self, generation: int, item_id: str) -> ExtractionItem | None:
        return self._transition(generation, item_id, ItemStatus.PENDING, status=ItemStatus.PROCESSING)

    def commit_success(self, generation: int, item_id: str, data: dict[str, FieldValue]) -> ExtractionItem | None:
        return self._transition(
            generation,
            item_id,
            ItemStatus.PROCESSING,
            status=ItemStatus.SUCCESS,
            data=dict(data),
            error=None,
        )

    def commit_error(self, generation: int, item_id: str, message: str) -> ExtractionItem | None:
        return self._transition(
            generation,
            item_id,
            ItemStatus.PROCESSING,
            status=ItemStatus.ERROR,
            data=None,
            error=message,
        )

    def complete_batch(self, generation: int) -> bool:
        with self._lock:
            if generation != self._state.generation:
                return False
            self._state.status = BatchStatus.COMPLETED
            return True

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._state.generation

    # ------------------------------------------------------------------
    # item access
    # ------------------------------------------------------------------
    def update_value(self, item_id: str, field: str, value: FieldValue) -> ExtractionItem:
        with self._lock:
            index = self._index_of(item_id)
            current = self._state.items[index]
            if current.status is not ItemStatus.SUCCESS or current.data is None:
                raise ItemStateError(f"item {item_id} has no extracted data to edit")
            data = dict(current.data)
            data[field] = value
            updated = replace(current, data=data)
            self._state.items[index] = updated
        self._notify(updated)
        return updated

    def get_item(self, item_id: str) -> ExtractionItem:
        with self._lock:
            return self._state.items[self._index_of(item_id)]

    def snapshot(self) -> list[ExtractionItem]:
        with self._lock:
            return list(self._state.items)

    def get_batch_overview(self) -> dict[str, object]:
        with self._lock:
            return {
                "generation": self._state.generation,
                "status": self._state.status.value,
                "items": [item.as_dict() for item in self._state.items],
            }

    def subscribe(self, listener: ItemListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        with self._lock:
            self._state = BatchState(generation=self._state.generation + 1)
