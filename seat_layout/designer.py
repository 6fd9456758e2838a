from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from loguru import logger

from . import editor
from .editor import EditResult
from .grid import SeatStats, create_empty_layout, get_seat_stats
from .serialization import FlatSeat, flatten, layout_from_dict, layout_to_dict, reconstruct
from .types import DragMode, SeatCell, SeatLayout, SeatLayoutError, SeatType


LONG_PRESS_MS = 300
DEFAULT_ROWS = 10
DEFAULT_COLS = 15
UNDO_LIMIT = 100


class GestureState(str, Enum):
    IDLE = "idle"
    PRESS_PENDING = "press_pending"
    DRAGGING = "dragging"


@dataclass
class DragGesture:
    """
    Tells a click from a press-and-hold drag.

    A press waits ``threshold_ms``; when that elapses (``poll``) while the
    pointer is still down the gesture becomes a drag. Times are monotonic
    milliseconds supplied by the caller.
    """

    threshold_ms: int = LONG_PRESS_MS
    state: GestureState = GestureState.IDLE
    pressed: Optional[SeatCell] = None
    pressed_at: float = 0.0
    mode: Optional[DragMode] = None

    def press(self, cell: SeatCell, now: float) -> None:
        self.state = GestureState.PRESS_PENDING
        self.pressed = cell
        self.pressed_at = now
        self.mode = None

    def poll(self, now: float, selected_type: SeatType) -> Optional[SeatCell]:
        """Fire the long-press timer if due. Returns the pressed cell when the drag engages."""
        if self.state != GestureState.PRESS_PENDING or now - self.pressed_at < self.threshold_ms:
            return None
        self.state = GestureState.DRAGGING
        self.mode = self.mode_for(self.pressed, selected_type)
        return self.pressed

    def enter(self, cell: SeatCell) -> Optional[SeatCell]:
        """The cell to paint when the pointer enters it, or None outside a drag."""
        return cell if self.dragging else None

    @staticmethod
    def mode_for(cell: SeatCell, selected_type: SeatType) -> DragMode:
        if not cell.is_empty and selected_type == SeatType.EMPTY:
            return DragMode.ERASE
        return DragMode.PAINT

    @property
    def dragging(self) -> bool:
        return self.state == GestureState.DRAGGING

    def release(self) -> bool:
        """End the gesture; True when it was a drag."""
        was_drag = self.dragging
        self.state = GestureState.IDLE
        self.pressed = None
        self.mode = None
        return was_drag

    def cancel(self) -> None:
        self.release()


class LayoutDesigner:
    """
    Editing session for one room layout.

    Consumes the events a rendering surface emits and keeps undo/redo
    history. Every handler returns an EditResult; rejected edits leave the
    session untouched.
    """

    def __init__(self, layout: Optional[SeatLayout] = None, *, selected_type: SeatType = SeatType.NORMAL):
        self.layout = layout or create_empty_layout(DEFAULT_ROWS, DEFAULT_COLS)
        self.selected_type = SeatType(selected_type)
        self.gesture = DragGesture()
        self._undo: list[SeatLayout] = []
        self._redo: list[SeatLayout] = []
        self._swallow_click = False

    @classmethod
    def from_flat(cls, records: Iterable[Any], **kwargs: Any) -> "LayoutDesigner":
        return cls(reconstruct(records), **kwargs)

    def _commit(self, result: EditResult) -> EditResult:
        if result.ok and result.layout is not self.layout:
            self._undo.append(self.layout)
            del self._undo[:-UNDO_LIMIT]
            self._redo.clear()
            self.layout = result.layout
        return result

    def select(self, seat_type: SeatType) -> None:
        self.selected_type = SeatType(seat_type)

    def on_seat_click(self, cell: SeatCell) -> EditResult:
        if self._swallow_click:
            # The click that follows releasing a drag.
            self._swallow_click = False
            return EditResult(self.layout)
        return self._commit(editor.toggle_seat_at_click(self.layout, cell, self.selected_type))

    def on_seat_mouse_down(self, cell: SeatCell, now: float) -> None:
        self._swallow_click = False
        self.gesture.press(cell, now)

    def on_long_press(self, now: float) -> EditResult:
        pressed = self.gesture.poll(now, self.selected_type)
        if pressed is None:
            return EditResult(self.layout)
        logger.debug("drag engaged in {} mode at R{}C{}", self.gesture.mode.value, pressed.row, pressed.col)
        return self._commit(editor.toggle_seat_at_click(self.layout, pressed, self.selected_type))

    def on_seat_mouse_enter(self, cell: SeatCell, now: float) -> EditResult:
        engaged = self.on_long_press(now)
        target = self.gesture.enter(cell)
        if not engaged.ok or target is None:
            return engaged
        return self._commit(editor.drag_paint(self.layout, target, self.gesture.mode, self.selected_type))

    def on_mouse_up(self) -> None:
        self._swallow_click = self.gesture.release()

    def on_mouse_leave(self) -> None:
        self.gesture.cancel()
        self._swallow_click = False

    def on_seat_right_click(self, cell: SeatCell) -> EditResult:
        return self._commit(editor.erase_seat(self.layout, cell.row, cell.col))

    def paint(self, row: int, col: int, seat_type: SeatType) -> EditResult:
        return self._commit(editor.paint_seat(self.layout, row, col, seat_type))

    def create_couple(self, row: int, col_a: int, col_b: int) -> EditResult:
        return self._commit(editor.create_couple(self.layout, row, col_a, col_b))

    def resize(self, rows: int, cols: int) -> EditResult:
        return self._commit(editor.resize_grid(self.layout, rows, cols))

    def clear(self) -> EditResult:
        return self._commit(editor.clear_layout(self.layout))

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self.layout)
        self.layout = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self.layout)
        self.layout = self._redo.pop()
        return True

    def import_json(self, text: str) -> EditResult:
        try:
            layout = layout_from_dict(json.loads(text))
        except json.JSONDecodeError as e:
            return EditResult.rejected(self.layout, f"Error reading layout file: {e}")
        except SeatLayoutError as e:
            return EditResult.rejected(self.layout, f"Invalid layout file format: {e}")
        return self._commit(EditResult(layout))

    def export_json(self) -> str:
        return json.dumps(layout_to_dict(self.layout), indent=2)

    def load_flat(self, records: Iterable[Any]) -> EditResult:
        try:
            layout = reconstruct(records)
        except SeatLayoutError as e:
            return EditResult.rejected(self.layout, str(e))
        return self._commit(EditResult(layout))

    def flat_seats(self) -> list[FlatSeat]:
        return flatten(self.layout)

    def stats(self) -> SeatStats:
        return get_seat_stats(self.layout)
