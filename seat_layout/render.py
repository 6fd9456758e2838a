from __future__ import annotations

from typing import AbstractSet, Optional

from .booking import SeatStatus, seat_status
from .grid import row_letter
from .types import SeatCell, SeatLayout, SeatType


SEAT_GLYPHS = {
    SeatType.EMPTY: ".",
    SeatType.NORMAL: "N",
    SeatType.VIP: "V",
    SeatType.COUPLE: "C",
    SeatType.DISABLED: "D",
    SeatType.BLOCKED: "#",
}

STATUS_GLYPHS = {
    SeatStatus.booked: "x",
    SeatStatus.held: "h",
    SeatStatus.selected: "*",
}


def _glyph(cell: SeatCell) -> str:
    if cell.is_paired:
        return "<" if cell.col < cell.couple_with else ">"
    return SEAT_GLYPHS[cell.type]


def _header(cols: int, cell_width: int) -> str:
    return " " * 4 + "".join(str(c + 1).center(cell_width) for c in range(cols))


def render_ascii(layout: SeatLayout, *, cell_width: int = 3) -> str:
    cell_width = max(2, int(cell_width))

    lines = ["SCREEN".center(4 + cell_width * layout.cols), _header(layout.cols, cell_width)]
    for r, row in enumerate(layout.seats):
        row_cells = "".join(_glyph(cell).center(cell_width) for cell in row)
        lines.append(f"{row_letter(r)}".ljust(4) + row_cells)
    return "\n".join(lines)


def render_booking_ascii(
    layout: SeatLayout,
    booked: AbstractSet[str],
    held: AbstractSet[str],
    selected: Optional[AbstractSet[str]] = None,
    *,
    cell_width: int = 3,
) -> str:
    cell_width = max(2, int(cell_width))

    lines = ["SCREEN".center(4 + cell_width * layout.cols), _header(layout.cols, cell_width)]
    for r, row in enumerate(layout.seats):
        out = []
        for cell in row:
            status = seat_status(cell, booked, held, selected)
            out.append(STATUS_GLYPHS.get(status, _glyph(cell)).center(cell_width))
        lines.append(f"{row_letter(r)}".ljust(4) + "".join(out))
    return "\n".join(lines)
