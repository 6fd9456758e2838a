from __future__ import annotations

import argparse
import json
from pathlib import Path

from . import editor
from .editor import EditResult
from .grid import get_seat_stats
from .render import render_ascii, render_booking_ascii
from .serialization import flatten_dicts
from .storage import load_flat, load_layout, maybe_init_layout, save_flat, save_layout
from .types import SEAT_LABELS, SeatLayoutError, SeatType


DEFAULT_FILE = "seat_layout.json"


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--file",
        default=DEFAULT_FILE,
        help=f"Path to layout JSON file (default: {DEFAULT_FILE})",
    )


def _add_cell_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--row", type=int, required=True, help="Zero-based row")
    p.add_argument("--col", type=int, required=True, help="Zero-based column")


def _seat_type(value: str) -> SeatType:
    try:
        return SeatType(value.upper())
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"unknown seat type {value!r}") from e


def _apply(args: argparse.Namespace, result: EditResult, done: str) -> int:
    if not result.ok:
        print(f"Rejected: {result.error}")
        return 1
    save_layout(result.layout, args.file)
    print(done)
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    maybe_init_layout(args.file, rows=args.rows, cols=args.cols, overwrite=args.overwrite)
    print(f"Initialized layout at {args.file} ({args.rows} rows x {args.cols} cols)")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    layout = load_layout(args.file)
    print(render_ascii(layout, cell_width=args.width))
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    stats = get_seat_stats(load_layout(args.file))
    for key, value in stats.to_dict().items():
        print(f"{key:>8}: {value}")
    return 0


def cmd_paint(args: argparse.Namespace) -> int:
    layout = load_layout(args.file)
    result = editor.paint_seat(layout, args.row, args.col, args.type)
    return _apply(args, result, f"Painted R{args.row}C{args.col} as {SEAT_LABELS[args.type]}")


def cmd_click(args: argparse.Namespace) -> int:
    layout = load_layout(args.file)
    result = editor.toggle_seat_at_click(layout, layout.cell(args.row, args.col), args.type)
    return _apply(args, result, f"Clicked R{args.row}C{args.col} with {SEAT_LABELS[args.type]}")


def cmd_erase(args: argparse.Namespace) -> int:
    layout = load_layout(args.file)
    result = editor.erase_seat(layout, args.row, args.col)
    return _apply(args, result, f"Cleared R{args.row}C{args.col}")


def cmd_couple(args: argparse.Namespace) -> int:
    layout = load_layout(args.file)
    result = editor.create_couple(layout, args.row, args.col, args.col + 1)
    return _apply(args, result, f"Created couple seat at R{args.row}C{args.col}-{args.col + 1}")


def cmd_resize(args: argparse.Namespace) -> int:
    layout = load_layout(args.file)
    result = editor.resize_grid(layout, args.rows, args.cols)
    return _apply(args, result, f"Resized to {args.rows} rows x {args.cols} cols")


def cmd_clear(args: argparse.Namespace) -> int:
    layout = load_layout(args.file)
    return _apply(args, editor.clear_layout(layout), "Cleared layout")


def cmd_export_flat(args: argparse.Namespace) -> int:
    layout = load_layout(args.file)
    out = Path(args.output)
    save_flat(layout, out)
    print(f"Exported seats to {out}")
    return 0


def cmd_import_flat(args: argparse.Namespace) -> int:
    layout = load_flat(args.input)
    save_layout(layout, args.file)
    print(f"Imported seats from {args.input} into {args.file} ({layout.rows} rows x {layout.cols} cols)")
    return 0


def cmd_booking(args: argparse.Namespace) -> int:
    layout = load_layout(args.file)
    booked = set(args.booked or [])
    held = set(args.held or [])
    print(render_booking_ascii(layout, booked, held))
    return 0


def cmd_dump(args: argparse.Namespace) -> int:
    print(json.dumps(flatten_dicts(load_layout(args.file)), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="seat_layout", description="Cinema room seat layout designer (CLI).")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="Create a new empty layout JSON file")
    _add_common_args(p_init)
    p_init.add_argument("--rows", type=int, required=True)
    p_init.add_argument("--cols", type=int, required=True)
    p_init.add_argument("--overwrite", action="store_true", help="Overwrite existing layout file")
    p_init.set_defaults(func=cmd_init)

    p_show = sub.add_parser("show", help="Print the current layout")
    _add_common_args(p_show)
    p_show.add_argument("--width", type=int, default=3, help="Cell width for display")
    p_show.set_defaults(func=cmd_show)

    p_stats = sub.add_parser("stats", help="Count seats by type")
    _add_common_args(p_stats)
    p_stats.set_defaults(func=cmd_stats)

    p_paint = sub.add_parser("paint", help="Set one cell to a seat type")
    _add_common_args(p_paint)
    _add_cell_args(p_paint)
    p_paint.add_argument("--type", type=_seat_type, required=True)
    p_paint.set_defaults(func=cmd_paint)

    p_click = sub.add_parser("click", help="Click a cell with a seat type selected")
    _add_common_args(p_click)
    _add_cell_args(p_click)
    p_click.add_argument("--type", type=_seat_type, default=SeatType.NORMAL)
    p_click.set_defaults(func=cmd_click)

    p_erase = sub.add_parser("erase", help="Remove a seat (both halves of a couple)")
    _add_common_args(p_erase)
    _add_cell_args(p_erase)
    p_erase.set_defaults(func=cmd_erase)

    p_couple = sub.add_parser("couple", help="Merge a cell and its right neighbour into a couple seat")
    _add_common_args(p_couple)
    _add_cell_args(p_couple)
    p_couple.set_defaults(func=cmd_couple)

    p_resize = sub.add_parser("resize", help="Resize the grid, keeping the top-left overlap")
    _add_common_args(p_resize)
    p_resize.add_argument("--rows", type=int, required=True)
    p_resize.add_argument("--cols", type=int, required=True)
    p_resize.set_defaults(func=cmd_resize)

    p_clear = sub.add_parser("clear", help="Empty every cell")
    _add_common_args(p_clear)
    p_clear.set_defaults(func=cmd_clear)

    p_export = sub.add_parser("export-flat", help="Write the flat seat list (row letter, col, type)")
    _add_common_args(p_export)
    p_export.add_argument("--output", required=True)
    p_export.set_defaults(func=cmd_export_flat)

    p_import = sub.add_parser("import-flat", help="Rebuild the layout from a flat seat list")
    _add_common_args(p_import)
    p_import.add_argument("--input", required=True)
    p_import.set_defaults(func=cmd_import_flat)

    p_dump = sub.add_parser("dump", help="Print the flat seat list")
    _add_common_args(p_dump)
    p_dump.set_defaults(func=cmd_dump)

    p_booking = sub.add_parser("booking", help="Show the layout as customers see it")
    _add_common_args(p_booking)
    p_booking.add_argument("--booked", nargs="*", help="Booked seat numbers, e.g. A1 A2")
    p_booking.add_argument("--held", nargs="*", help="Held seat numbers")
    p_booking.set_defaults(func=cmd_booking)

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    try:
        return int(args.func(args))
    except SeatLayoutError as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
