from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .grid import couple_seat_number, create_empty_layout, single_seat_number, valid_dimensions
from .types import COUPLE_REJECTION, RESIZE_REJECTION, DragMode, SeatCell, SeatLayout, SeatType


@dataclass(frozen=True)
class EditResult:
    """
    Outcome of one editor operation.

    A rejected edit carries the layout it was given, untouched, plus the
    user-facing reason.
    """

    layout: SeatLayout
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def rejected(cls, layout: SeatLayout, reason: str) -> "EditResult":
        logger.debug("edit rejected: {}", reason)
        return cls(layout=layout, error=reason)


def _cleared(row: int, col: int) -> SeatCell:
    return SeatCell(row=row, col=col, type=SeatType.EMPTY)


def _break_updates(layout: SeatLayout, row: int, col: int) -> dict[tuple[int, int], SeatCell]:
    cell = layout.cell(row, col)
    updates = {(row, col): _cleared(row, col)}
    if cell.is_paired and layout.in_bounds(row, cell.couple_with):
        updates[(row, cell.couple_with)] = _cleared(row, cell.couple_with)
    return updates


def break_couple(layout: SeatLayout, row: int, col: int) -> EditResult:
    return EditResult(layout.with_cells(_break_updates(layout, row, col)))


def paint_seat(layout: SeatLayout, row: int, col: int, new_type: SeatType) -> EditResult:
    new_type = SeatType(new_type)
    if new_type == SeatType.COUPLE:
        return EditResult.rejected(layout, COUPLE_REJECTION)

    cell = layout.cell(row, col)
    updates = _break_updates(layout, row, col) if cell.is_paired else {}
    if new_type == SeatType.EMPTY:
        updates[(row, col)] = _cleared(row, col)
    else:
        updates[(row, col)] = SeatCell(row=row, col=col, type=new_type, seat_number=single_seat_number(row, col))
    return EditResult(layout.with_cells(updates))


def erase_seat(layout: SeatLayout, row: int, col: int) -> EditResult:
    if layout.cell(row, col).is_paired:
        return break_couple(layout, row, col)
    return paint_seat(layout, row, col, SeatType.EMPTY)


def create_couple(layout: SeatLayout, row: int, col_a: int, col_b: int) -> EditResult:
    if abs(col_a - col_b) != 1 or not (layout.in_bounds(row, col_a) and layout.in_bounds(row, col_b)):
        return EditResult.rejected(layout, COUPLE_REJECTION)
    if not (layout.cell(row, col_a).is_empty and layout.cell(row, col_b).is_empty):
        return EditResult.rejected(layout, COUPLE_REJECTION)

    number = couple_seat_number(row, col_a, col_b)
    updates = {
        (row, col_a): SeatCell(row, col_a, SeatType.COUPLE, seat_number=number, is_couple_seat=True, couple_with=col_b),
        (row, col_b): SeatCell(row, col_b, SeatType.COUPLE, seat_number=number, is_couple_seat=True, couple_with=col_a),
    }
    return EditResult(layout.with_cells(updates))


def _pair_with_neighbour(layout: SeatLayout, cell: SeatCell) -> EditResult:
    left, right = cell.col - 1, cell.col + 1
    if left >= 0 and layout.cell(cell.row, left).is_empty:
        return create_couple(layout, cell.row, left, cell.col)
    if right < layout.cols and layout.cell(cell.row, right).is_empty:
        return create_couple(layout, cell.row, cell.col, right)
    return EditResult.rejected(layout, COUPLE_REJECTION)


def toggle_seat_at_click(layout: SeatLayout, clicked: SeatCell, selected_type: SeatType) -> EditResult:
    selected_type = SeatType(selected_type)
    # Events may carry a stale snapshot of the cell; decide on the current one.
    cell = layout.cell(clicked.row, clicked.col)

    if cell.is_paired:
        return break_couple(layout, cell.row, cell.col)
    if cell.is_empty:
        if selected_type == SeatType.COUPLE:
            return _pair_with_neighbour(layout, cell)
        if selected_type == SeatType.EMPTY:
            return EditResult(layout)
        return paint_seat(layout, cell.row, cell.col, selected_type)
    if selected_type == SeatType.COUPLE:
        return EditResult.rejected(layout, COUPLE_REJECTION)
    return paint_seat(layout, cell.row, cell.col, selected_type)


def drag_paint(layout: SeatLayout, entered: SeatCell, mode: DragMode, selected_type: SeatType) -> EditResult:
    mode = DragMode(mode)
    selected_type = SeatType(selected_type)
    if mode == DragMode.ERASE:
        return erase_seat(layout, entered.row, entered.col)
    # Couples are click-only.
    if selected_type in (SeatType.EMPTY, SeatType.COUPLE):
        return EditResult(layout)
    return paint_seat(layout, entered.row, entered.col, selected_type)


def resize_grid(layout: SeatLayout, new_rows: int, new_cols: int) -> EditResult:
    if not valid_dimensions(new_rows, new_cols):
        return EditResult.rejected(layout, RESIZE_REJECTION)

    source = layout
    keep_rows, keep_cols = min(layout.rows, new_rows), min(layout.cols, new_cols)
    for r in range(keep_rows):
        c = keep_cols - 1
        cell = source.cell(r, c)
        if cell.is_paired and cell.couple_with >= new_cols:
            logger.info("resize to {}x{} splits couple {}; clearing it", new_rows, new_cols, cell.seat_number)
            source = source.with_cells(_break_updates(source, r, c))

    resized = create_empty_layout(new_rows, new_cols)
    updates = {(r, c): source.cell(r, c).moved(r, c) for r in range(keep_rows) for c in range(keep_cols)}
    return EditResult(resized.with_cells(updates))


def clear_layout(layout: SeatLayout) -> EditResult:
    return EditResult(create_empty_layout(layout.rows, layout.cols))
