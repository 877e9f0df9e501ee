from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from habitbloom.entry_store import EntryStore, day_key

logger = logging.getLogger(__name__)

PRESS = "press"
ENTER = "enter"
RELEASE = "release"


class PointerEvents:
    """Pointer events raised by the grid surface.

    Cells emit ``press`` and ``enter`` with ``(habit_id, day)``; the surface
    emits ``release`` with no arguments wherever the pointer goes up.
    """

    def __init__(self):
        self._handlers: dict[str, list[Callable]] = {}

    def subscribe(self, kind: str, handler: Callable) -> Callable[[], None]:
        self._handlers.setdefault(kind, []).append(handler)

        def unsubscribe():
            handlers = self._handlers.get(kind, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(self, kind: str, *args) -> None:
        for handler in list(self._handlers.get(kind, [])):
            handler(*args)

    def listener_count(self, kind: str) -> int:
        return len(self._handlers.get(kind, []))


@dataclass(frozen=True)
class DragState:
    active: bool = False
    target: bool | None = None
    habit_id: str | None = None


IDLE = DragState()


class BatchEditController:
    """Paints one value across every cell a drag gesture crosses.

    The target value is the negation of the first cell's value, so a gesture
    always paints the opposite of where it started. Each painted cell is
    written to the store first and then handed to ``writer`` together with the
    store version of that write.
    """

    def __init__(
        self,
        store: EntryStore,
        writer: Callable[[str, str, bool, int], object] | None = None,
        selected_date: str | None = None,
    ):
        self.store = store
        self.writer = writer
        self.selected_date = selected_date
        self._state = IDLE
        self._painted: list[tuple[str, str]] = []
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def dragging(self) -> bool:
        return self._state.active

    @property
    def painted(self) -> list[tuple[str, str]]:
        return list(self._painted)

    def attach(self, events: PointerEvents) -> "BatchEditController":
        self.close()
        self._unsubscribers = [
            events.subscribe(PRESS, self.press),
            events.subscribe(ENTER, self.enter),
            events.subscribe(RELEASE, self.release),
        ]
        return self

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def press(self, habit_id, day) -> bool:
        habit_id = str(habit_id)
        day_iso = day_key(day)
        if self._state.active:
            self.release()
        target = not self.store.get(habit_id, day_iso)
        self.selected_date = day_iso
        self._state = DragState(active=True, target=target, habit_id=habit_id)
        self._painted = []
        logger.debug("Gesture started on %s/%s painting %s", habit_id, day_iso, target)
        self._paint(habit_id, day_iso)
        return target

    def enter(self, habit_id, day) -> None:
        state = self._state
        if not state.active or state.target is None:
            return
        habit_id = str(habit_id)
        if habit_id != state.habit_id:
            return
        day_iso = day_key(day)
        if (habit_id, day_iso) in self._painted:
            return
        self._paint(habit_id, day_iso)

    def release(self) -> None:
        if not self._state.active:
            return
        logger.debug("Gesture ended after %d cell(s)", len(self._painted))
        self._state = IDLE

    def click(self, habit_id, day) -> bool:
        value = self.press(habit_id, day)
        self.release()
        return value

    def paint_range(self, habit_id, days) -> bool | None:
        """Replays a drag across ``days`` in order; the first day starts the gesture."""
        days = list(days)
        if not days:
            return None
        value = self.press(habit_id, days[0])
        for day in days[1:]:
            self.enter(habit_id, day)
        self.release()
        return value

    def _paint(self, habit_id: str, day_iso: str) -> None:
        value = bool(self._state.target)
        version = self.store.upsert(habit_id, day_iso, value)
        self._painted.append((habit_id, day_iso))
        if self.writer is not None:
            self.writer(habit_id, day_iso, value, version)
