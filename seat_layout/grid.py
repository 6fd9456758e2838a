from __future__ import annotations

from dataclasses import asdict, dataclass

from .types import MAX_GRID_SIZE, MIN_GRID_SIZE, SeatCell, SeatLayout, SeatLayoutError, SeatType


def valid_dimensions(rows: int, cols: int) -> bool:
    return MIN_GRID_SIZE <= rows <= MAX_GRID_SIZE and MIN_GRID_SIZE <= cols <= MAX_GRID_SIZE


def row_letter(row: int) -> str:
    return chr(65 + row)


def row_index(letter: str) -> int:
    if not isinstance(letter, str) or len(letter) != 1:
        raise SeatLayoutError(f"row must be a single letter: {letter!r}")
    return ord(letter) - 65


def single_seat_number(row: int, col: int) -> str:
    return f"{row_letter(row)}{col + 1}"


def couple_seat_number(row: int, col_a: int, col_b: int) -> str:
    lo, hi = min(col_a, col_b), max(col_a, col_b)
    return f"{row_letter(row)}{lo + 1}-{hi + 1}"


def expected_seat_number(cell: SeatCell) -> str | None:
    if cell.type == SeatType.EMPTY:
        return None
    if cell.is_paired:
        return couple_seat_number(cell.row, cell.col, cell.couple_with)
    return single_seat_number(cell.row, cell.col)


def create_empty_layout(rows: int, cols: int) -> SeatLayout:
    if not valid_dimensions(rows, cols):
        raise SeatLayoutError(f"grid size out of range: {rows}x{cols}")
    cells = tuple(SeatCell(row=r, col=c) for r in range(rows) for c in range(cols))
    return SeatLayout(rows=rows, cols=cols, cells=cells)


@dataclass(frozen=True)
class SeatStats:
    normal: int = 0
    vip: int = 0
    couple: int = 0
    disabled: int = 0
    blocked: int = 0
    empty: int = 0

    @property
    def total(self) -> int:
        # Purchasable units; a couple pair is one unit.
        return self.normal + self.vip + self.couple + self.disabled

    def to_dict(self) -> dict:
        return {**asdict(self), "total": self.total}


def get_seat_stats(layout: SeatLayout) -> SeatStats:
    counts = {t: 0 for t in SeatType}
    couples: set[tuple[int, int]] = set()
    for cell in layout.iter_cells():
        if cell.type == SeatType.COUPLE:
            partner = cell.couple_with if cell.couple_with is not None else cell.col
            couples.add((cell.row, min(cell.col, partner)))
        else:
            counts[cell.type] += 1
    return SeatStats(
        normal=counts[SeatType.NORMAL],
        vip=counts[SeatType.VIP],
        couple=len(couples),
        disabled=counts[SeatType.DISABLED],
        blocked=counts[SeatType.BLOCKED],
        empty=counts[SeatType.EMPTY],
    )


def check_invariants(layout: SeatLayout) -> list[str]:
    """
    Return a message per violated cell invariant; an empty list means the layout is valid.
    """
    problems: list[str] = []
    for cell in layout.iter_cells():
        where = f"R{cell.row}C{cell.col}"
        if cell.type == SeatType.EMPTY:
            if cell.is_couple_seat or cell.couple_with is not None or cell.seat_number is not None:
                problems.append(f"{where}: empty cell carries seat data")
            continue
        if cell.seat_number != expected_seat_number(cell):
            problems.append(f"{where}: seat number {cell.seat_number!r} != {expected_seat_number(cell)!r}")
        if cell.is_couple_seat != (cell.couple_with is not None):
            problems.append(f"{where}: couple flag and partner disagree")
        if cell.type == SeatType.COUPLE and not cell.is_paired:
            problems.append(f"{where}: couple seat without a partner")
        if not cell.is_paired:
            continue
        if cell.type != SeatType.COUPLE:
            problems.append(f"{where}: paired cell is not a couple seat")
        if abs(cell.col - cell.couple_with) != 1 or not layout.in_bounds(cell.row, cell.couple_with):
            problems.append(f"{where}: partner column {cell.couple_with} is not adjacent")
            continue
        sibling = layout.cell(cell.row, cell.couple_with)
        if not (sibling.type == SeatType.COUPLE and sibling.is_couple_seat and sibling.couple_with == cell.col):
            problems.append(f"{where}: partner does not point back")
        elif sibling.seat_number != cell.seat_number:
            problems.append(f"{where}: partner seat number differs")
    return problems
