from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Optional


MIN_GRID_SIZE = 1
MAX_GRID_SIZE = 15

COUPLE_REJECTION = "Couple seats require two adjacent empty seats in the same row."
RESIZE_REJECTION = f"Grid size must be between {MIN_GRID_SIZE}x{MIN_GRID_SIZE} and {MAX_GRID_SIZE}x{MAX_GRID_SIZE}"


class SeatLayoutError(Exception):
    pass


class SeatType(str, Enum):
    EMPTY = "EMPTY"
    NORMAL = "NORMAL"
    VIP = "VIP"
    COUPLE = "COUPLE"
    DISABLED = "DISABLED"
    BLOCKED = "BLOCKED"  # pillar, walkway

    @property
    def purchasable(self) -> bool:
        return self not in (SeatType.EMPTY, SeatType.BLOCKED)


SEAT_LABELS = {
    SeatType.EMPTY: "Empty",
    SeatType.NORMAL: "Normal Seat",
    SeatType.VIP: "VIP Seat",
    SeatType.COUPLE: "Couple Seat",
    SeatType.DISABLED: "Disabled Access",
    SeatType.BLOCKED: "Blocked/Pillar",
}


class DragMode(str, Enum):
    PAINT = "paint"
    ERASE = "erase"


@dataclass(frozen=True)
class SeatCell:
    row: int
    col: int
    type: SeatType = SeatType.EMPTY
    seat_number: Optional[str] = None
    is_couple_seat: bool = False
    couple_with: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.type == SeatType.EMPTY

    @property
    def is_paired(self) -> bool:
        return self.is_couple_seat and self.couple_with is not None

    def moved(self, row: int, col: int) -> "SeatCell":
        return replace(self, row=row, col=col)


@dataclass(frozen=True)
class SeatLayout:
    """
    A rows x cols seating chart.

    Cells live in one flat tuple indexed by ``row * cols + col``. Edits build a
    new tuple; untouched cells are shared between the old and the new layout.
    """

    rows: int
    cols: int
    cells: tuple[SeatCell, ...] = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.cells) != self.rows * self.cols:
            raise SeatLayoutError("cell count does not match rows/cols")

    def _index(self, row: int, col: int) -> int:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise SeatLayoutError(f"seat out of bounds: row={row}, col={col}")
        return row * self.cols + col

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell(self, row: int, col: int) -> SeatCell:
        return self.cells[self._index(row, col)]

    def iter_cells(self) -> Iterator[SeatCell]:
        return iter(self.cells)

    @property
    def seats(self) -> list[list[SeatCell]]:
        return [list(self.cells[r * self.cols : (r + 1) * self.cols]) for r in range(self.rows)]

    def with_cells(self, updates: dict[tuple[int, int], SeatCell]) -> "SeatLayout":
        if not updates:
            return self
        cells = list(self.cells)
        for (row, col), cell in updates.items():
            cells[self._index(row, col)] = cell
        return SeatLayout(rows=self.rows, cols=self.cols, cells=tuple(cells))


@dataclass(frozen=True)
class RoomConfig:
    name: str
    cinema_id: str
    seat_layout: SeatLayout
    vip_price: float = 0.0
    couple_price: float = 0.0
    disabled_price: Optional[float] = None

    def __post_init__(self) -> None:
        if not (self.name or "").strip():
            raise SeatLayoutError("room name must be a non-empty string")
        for label, price in (("vip_price", self.vip_price), ("couple_price", self.couple_price), ("disabled_price", self.disabled_price)):
            if price is not None and price < 0:
                raise SeatLayoutError(f"{label} must be >= 0")
