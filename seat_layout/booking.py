from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Iterator, Optional

from .types import SeatCell, SeatLayout


class SeatStatus(str, Enum):
    available = "available"
    booked = "booked"
    held = "held"
    selected = "selected"


def expand_seat_numbers(seat_number: str) -> list[str]:
    """
    Individual seat numbers behind a label: "A1-2" -> ["A1", "A2"], "B7" -> ["B7"].
    """
    if "-" not in seat_number:
        return [seat_number]
    start, end = seat_number.split("-", 1)
    letter = start[0]
    return [f"{letter}{n}" for n in range(int(start[1:]), int(end) + 1)]


def seat_status(
    cell: SeatCell,
    booked: AbstractSet[str],
    held: AbstractSet[str],
    selected: Optional[AbstractSet[str]] = None,
) -> SeatStatus:
    if not cell.seat_number:
        return SeatStatus.available
    numbers = expand_seat_numbers(cell.seat_number) if cell.is_couple_seat else [cell.seat_number]
    for number in numbers:
        if number in booked:
            return SeatStatus.booked
        if number in held:
            return SeatStatus.held
        if selected and number in selected:
            return SeatStatus.selected
    return SeatStatus.available


def is_selectable(cell: SeatCell, status: SeatStatus) -> bool:
    return cell.type.purchasable and status != SeatStatus.booked


@dataclass(frozen=True)
class BookingUnit:
    cell: SeatCell
    status: SeatStatus
    width: int  # columns covered: 2 for a couple, else 1

    @property
    def selectable(self) -> bool:
        return is_selectable(self.cell, self.status)

    def to_dict(self) -> dict:
        return {
            "seatNumber": self.cell.seat_number,
            "row": self.cell.row,
            "col": self.cell.col,
            "type": self.cell.type.value,
            "status": self.status.value,
            "width": self.width,
            "selectable": self.selectable,
        }


def booking_units(
    layout: SeatLayout,
    booked: AbstractSet[str] = frozenset(),
    held: AbstractSet[str] = frozenset(),
    selected: Optional[AbstractSet[str]] = None,
) -> Iterator[BookingUnit]:
    """Yield one unit per rendered position, skipping the right half of each couple."""
    for cell in layout.iter_cells():
        if cell.is_paired and cell.col > cell.couple_with:
            continue
        width = 2 if cell.is_paired else 1
        yield BookingUnit(cell=cell, status=seat_status(cell, booked, held, selected), width=width)


def purchasable_units(layout: SeatLayout, **kwargs) -> list[BookingUnit]:
    return [u for u in booking_units(layout, **kwargs) if u.cell.type.purchasable]
