from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from .grid import create_empty_layout
from .serialization import flatten_dicts, layout_from_dict, layout_to_dict, reconstruct
from .types import SeatLayout, SeatLayoutError


def _read_json(p: Path):
    if not p.exists():
        raise SeatLayoutError(f"layout file not found: {p}")
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except Exception as e:  # noqa: BLE001
        raise SeatLayoutError(f"failed to read layout JSON: {e}") from e


def _write_json(data, p: Path) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def load_layout(path: str | Path) -> SeatLayout:
    return layout_from_dict(_read_json(Path(path)))


def save_layout(layout: SeatLayout, path: str | Path) -> None:
    _write_json(layout_to_dict(layout), Path(path))


def load_flat(path: str | Path) -> SeatLayout:
    data = _read_json(Path(path))
    if not isinstance(data, list):
        raise SeatLayoutError("flat seat file must hold a JSON list")
    return reconstruct(data)


def save_flat(layout: SeatLayout, path: str | Path) -> None:
    _write_json(flatten_dicts(layout), Path(path))


def maybe_init_layout(
    path: str | Path,
    *,
    rows: Optional[int] = None,
    cols: Optional[int] = None,
    overwrite: bool = False,
) -> SeatLayout:
    p = Path(path)
    if p.exists() and not overwrite:
        return load_layout(p)

    if rows is None or cols is None:
        raise SeatLayoutError("rows and cols are required to initialize a new layout")

    layout = create_empty_layout(rows, cols)
    save_layout(layout, p)
    return layout
