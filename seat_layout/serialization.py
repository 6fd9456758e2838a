from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from loguru import logger

from .grid import (
    check_invariants,
    couple_seat_number,
    create_empty_layout,
    row_index,
    row_letter,
    single_seat_number,
    valid_dimensions,
)
from .types import MAX_GRID_SIZE, SeatCell, SeatLayout, SeatLayoutError, SeatType


@dataclass(frozen=True)
class FlatSeat:
    """One persisted seat: letter row, 1-based column, type."""

    row: str
    col: int
    type: SeatType

    def to_dict(self) -> dict:
        return {"row": self.row, "col": self.col, "type": self.type.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FlatSeat":
        if not isinstance(data, Mapping):
            raise SeatLayoutError(f"invalid flat seat {data!r}: expected an object with row, col and type")
        try:
            row = str(data["row"])
            col = int(data["col"])
            seat_type = SeatType(data["type"])
        except Exception as e:  # noqa: BLE001 - surface as a layout error
            raise SeatLayoutError(f"invalid flat seat {data!r}: {e}") from e
        if len(row) != 1 or not (0 <= row_index(row) < MAX_GRID_SIZE):
            raise SeatLayoutError(f"row out of range: {row!r}")
        if not (1 <= col <= MAX_GRID_SIZE):
            raise SeatLayoutError(f"col out of range: {col}")
        return cls(row=row, col=col, type=seat_type)


FlatSeatLike = Union[FlatSeat, Mapping[str, Any]]


def flatten(layout: SeatLayout) -> list[FlatSeat]:
    return [
        FlatSeat(row=row_letter(cell.row), col=cell.col + 1, type=cell.type)
        for cell in layout.iter_cells()
        if cell.type != SeatType.EMPTY
    ]


def flatten_dicts(layout: SeatLayout) -> list[dict]:
    return [seat.to_dict() for seat in flatten(layout)]


def _coerce(seats: Iterable[FlatSeatLike]) -> list[FlatSeat]:
    return [s if isinstance(s, FlatSeat) else FlatSeat.from_dict(s) for s in seats]


def reconstruct(flat_seats: Iterable[FlatSeatLike]) -> SeatLayout:
    """
    Rebuild a layout from the flat format.

    The flat format has no pairing field, so couples are inferred: scanning
    each row left to right, two adjacent unpaired COUPLE cells become one pair.
    A COUPLE cell left without a partner is demoted to NORMAL.
    """
    seats = _coerce(flat_seats)

    max_row = 0
    max_col = 0
    for seat in seats:
        max_row = max(max_row, row_index(seat.row))
        max_col = max(max_col, seat.col - 1)
    rows, cols = max_row + 1, max_col + 1

    cells: dict[tuple[int, int], SeatCell] = {}
    for seat in seats:
        r, c = row_index(seat.row), seat.col - 1
        if seat.type == SeatType.EMPTY or not (0 <= r < rows and 0 <= c < cols):
            continue
        cells[(r, c)] = SeatCell(row=r, col=c, type=seat.type, seat_number=single_seat_number(r, c))

    for r in range(rows):
        for c in range(cols - 1):
            cur, nxt = cells.get((r, c)), cells.get((r, c + 1))
            if not (cur and nxt):
                continue
            if cur.type == SeatType.COUPLE and nxt.type == SeatType.COUPLE and not cur.is_couple_seat and not nxt.is_couple_seat:
                number = couple_seat_number(r, c, c + 1)
                cells[(r, c)] = SeatCell(r, c, SeatType.COUPLE, seat_number=number, is_couple_seat=True, couple_with=c + 1)
                cells[(r, c + 1)] = SeatCell(r, c + 1, SeatType.COUPLE, seat_number=number, is_couple_seat=True, couple_with=c)

    for (r, c), cell in list(cells.items()):
        if cell.type == SeatType.COUPLE and not cell.is_couple_seat:
            logger.warning("couple seat {} has no partner; demoting to NORMAL", cell.seat_number)
            cells[(r, c)] = SeatCell(r, c, SeatType.NORMAL, seat_number=cell.seat_number)

    return create_empty_layout(rows, cols).with_cells(cells)


def cell_to_dict(cell: SeatCell) -> dict:
    d: dict[str, Any] = {"row": cell.row, "col": cell.col, "type": cell.type.value}
    if cell.seat_number is not None:
        d["seatNumber"] = cell.seat_number
    if cell.is_couple_seat:
        d["isCoupleSeat"] = True
        d["coupleWith"] = cell.couple_with
    return d


def layout_to_dict(layout: SeatLayout) -> dict:
    return {
        "rows": layout.rows,
        "cols": layout.cols,
        "seats": [[cell_to_dict(cell) for cell in row] for row in layout.seats],
    }


def _cell_from_dict(data: Mapping[str, Any], row: int, col: int) -> SeatCell:
    seat_type = SeatType(data.get("type", SeatType.EMPTY.value))
    if seat_type == SeatType.EMPTY:
        return SeatCell(row=row, col=col)
    couple_with = data.get("coupleWith")
    if data.get("isCoupleSeat") and couple_with is not None:
        couple_with = int(couple_with)
        return SeatCell(
            row,
            col,
            seat_type,
            seat_number=couple_seat_number(row, col, couple_with),
            is_couple_seat=True,
            couple_with=couple_with,
        )
    return SeatCell(row, col, seat_type, seat_number=single_seat_number(row, col))


def layout_from_dict(data: Any) -> SeatLayout:
    """
    Parse the full-layout JSON shape (rows, cols, seats matrix).

    Seat numbers are recomputed from position and pairing; the stored ones are ignored.
    """
    if not isinstance(data, Mapping) or not all(k in data for k in ("rows", "cols", "seats")):
        raise SeatLayoutError("layout must have rows, cols and seats")
    try:
        rows = int(data["rows"])
        cols = int(data["cols"])
        matrix = data["seats"]
        if not valid_dimensions(rows, cols):
            raise SeatLayoutError(f"grid size out of range: {rows}x{cols}")
        if len(matrix) != rows or any(len(r) != cols for r in matrix):
            raise SeatLayoutError("seats dimensions do not match rows/cols")
        cells = tuple(_cell_from_dict(matrix[r][c], r, c) for r in range(rows) for c in range(cols))
    except SeatLayoutError:
        raise
    except Exception as e:  # noqa: BLE001 - arbitrary imported JSON
        raise SeatLayoutError(f"invalid layout data: {e}") from e

    layout = SeatLayout(rows=rows, cols=cols, cells=cells)
    problems = check_invariants(layout)
    if problems:
        raise SeatLayoutError(f"invalid couple pairing: {problems[0]}")
    return layout
