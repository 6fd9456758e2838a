from __future__ import annotations

import json
import os
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlmodel import Session, select

from seat_layout import editor
from seat_layout.booking import booking_units
from seat_layout.editor import EditResult
from seat_layout.grid import get_seat_stats
from seat_layout.serialization import flatten_dicts, layout_from_dict, layout_to_dict, reconstruct
from seat_layout.types import RoomConfig, SeatLayout, SeatLayoutError

from .db import get_session, init_db
from .logging_config import setup_logging
from .models import Room, _utc_now
from .schemas import (
    ClearEdit,
    ClickEdit,
    CoupleEdit,
    EraseEdit,
    FlatSeatIn,
    LayoutEditRequest,
    PaintEdit,
    ResizeEdit,
    RoomCreate,
    RoomUpdate,
)


setup_logging()

app = FastAPI(title="Cinema Room Layout API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup() -> None:
    init_db()


def _session() -> Session:
    return get_session()


def _get_room(session: Session, room_id: int) -> Room:
    room = session.get(Room, room_id)
    if not room:
        raise HTTPException(status_code=404, detail="room not found")
    return room


def _pad(layout: SeatLayout, rows: Optional[int], cols: Optional[int]) -> SeatLayout:
    """Grow ``layout`` to at least rows x cols; never shrinks."""
    want_rows = max(layout.rows, rows or 0)
    want_cols = max(layout.cols, cols or 0)
    if (want_rows, want_cols) == (layout.rows, layout.cols):
        return layout
    result = editor.resize_grid(layout, want_rows, want_cols)
    if not result.ok:
        raise SeatLayoutError(result.error)
    return result.layout


def _set_layout(room: Room, seats: list[FlatSeatIn], rows: Optional[int], cols: Optional[int]) -> None:
    """
    Run the flat list through reconstruct/flatten so stored data is ordered
    row-major and every couple seat has a partner. The grid keeps at least
    the requested size.
    """
    layout = _pad(reconstruct([s.model_dump(mode="json") for s in seats]), rows, cols)
    room.seat_layout_json = json.dumps(flatten_dicts(layout))
    room.rows, room.cols = layout.rows, layout.cols


def _room_layout(room: Room) -> SeatLayout:
    return _pad(reconstruct(room.seat_layout()), room.rows, room.cols)


def _room_config(room: Room) -> RoomConfig:
    return RoomConfig(
        name=room.name,
        cinema_id=room.cinema_id,
        seat_layout=_room_layout(room),
        vip_price=room.vip_price,
        couple_price=room.couple_price,
        disabled_price=room.disabled_price,
    )


def _room_out(room: Room) -> dict:
    return {
        "id": room.id,
        "name": room.name,
        "cinemaId": room.cinema_id,
        "seatLayout": room.seat_layout(),
        "rows": room.rows,
        "cols": room.cols,
        "vipPrice": room.vip_price,
        "couplePrice": room.couple_price,
        "disabledPrice": room.disabled_price,
        "isArchived": room.is_archived,
    }


def _layout_out(room_id: int, layout: SeatLayout) -> dict:
    return {
        "roomId": room_id,
        "layout": layout_to_dict(layout),
        "stats": get_seat_stats(layout).to_dict(),
    }


def _store_layout(session: Session, room: Room, layout: SeatLayout) -> None:
    room.seat_layout_json = json.dumps(flatten_dicts(layout))
    room.rows, room.cols = layout.rows, layout.cols
    room.updated_at = _utc_now()
    session.add(room)
    session.commit()
    session.refresh(room)
    logger.info("room {} layout saved ({}x{}, {} seats)", room.id, layout.rows, layout.cols, len(room.seat_layout()))


def _apply_edit(layout: SeatLayout, edit) -> EditResult:
    if isinstance(edit, ClickEdit):
        return editor.toggle_seat_at_click(layout, layout.cell(edit.row, edit.col), edit.seat_type)
    if isinstance(edit, PaintEdit):
        return editor.paint_seat(layout, edit.row, edit.col, edit.seat_type)
    if isinstance(edit, EraseEdit):
        return editor.erase_seat(layout, edit.row, edit.col)
    if isinstance(edit, CoupleEdit):
        return editor.create_couple(layout, edit.row, edit.col_a, edit.col_b)
    if isinstance(edit, ResizeEdit):
        return editor.resize_grid(layout, edit.rows, edit.cols)
    if isinstance(edit, ClearEdit):
        return editor.clear_layout(layout)
    raise SeatLayoutError(f"unsupported edit: {edit!r}")


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.post("/rooms")
def create_room(payload: RoomCreate, session: Session = Depends(_session)) -> dict:
    room = Room(
        name=payload.name,
        cinema_id=payload.cinema_id,
        vip_price=payload.vip_price,
        couple_price=payload.couple_price,
        disabled_price=payload.disabled_price,
    )
    try:
        _set_layout(room, payload.seat_layout, payload.rows, payload.cols)
    except SeatLayoutError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    session.add(room)
    session.commit()
    session.refresh(room)
    logger.info("room {} created for cinema {}", room.id, room.cinema_id)
    return _room_out(room)


@app.get("/rooms")
def list_rooms(
    cinema_id: Optional[str] = None,
    include_archived: bool = False,
    session: Session = Depends(_session),
) -> list[dict]:
    stmt = select(Room)
    if cinema_id is not None:
        stmt = stmt.where(Room.cinema_id == cinema_id)
    if not include_archived:
        stmt = stmt.where(Room.is_archived == False)  # noqa: E712 - SQL expression
    rooms = session.exec(stmt.order_by(Room.created_at.desc())).all()
    return [_room_out(r) for r in rooms]


@app.get("/rooms/{room_id}")
def get_room(room_id: int, session: Session = Depends(_session)) -> dict:
    return _room_out(_get_room(session, room_id))


@app.put("/rooms/{room_id}")
def update_room(room_id: int, payload: RoomUpdate, session: Session = Depends(_session)) -> dict:
    room = _get_room(session, room_id)
    if payload.seat_layout is not None or payload.rows is not None or payload.cols is not None:
        seats = payload.seat_layout
        if seats is None:
            seats = [FlatSeatIn.model_validate(s) for s in room.seat_layout()]
        try:
            _set_layout(room, seats, payload.rows or room.rows, payload.cols or room.cols)
        except SeatLayoutError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
    if payload.name is not None:
        room.name = payload.name
    if payload.cinema_id is not None:
        room.cinema_id = payload.cinema_id
    if payload.vip_price is not None:
        room.vip_price = float(payload.vip_price)
    if payload.couple_price is not None:
        room.couple_price = float(payload.couple_price)
    if payload.disabled_price is not None:
        room.disabled_price = float(payload.disabled_price)
    room.updated_at = _utc_now()
    session.add(room)
    session.commit()
    session.refresh(room)
    logger.info("room {} updated", room.id)
    return _room_out(room)


@app.post("/rooms/{room_id}/archive")
def archive_room(room_id: int, session: Session = Depends(_session)) -> dict:
    room = _get_room(session, room_id)
    room.is_archived = True
    session.add(room)
    session.commit()
    return {"message": "room archived"}


@app.post("/rooms/{room_id}/restore")
def restore_room(room_id: int, session: Session = Depends(_session)) -> dict:
    room = _get_room(session, room_id)
    room.is_archived = False
    session.add(room)
    session.commit()
    return {"message": "room restored"}


@app.delete("/rooms/{room_id}")
def delete_room(room_id: int, session: Session = Depends(_session)) -> dict:
    room = _get_room(session, room_id)
    session.delete(room)
    session.commit()
    return {"deleted": True}


@app.get("/rooms/{room_id}/layout")
def get_room_layout(room_id: int, session: Session = Depends(_session)) -> dict:
    room = _get_room(session, room_id)
    config = _room_config(room)
    return {
        **_layout_out(room_id, config.seat_layout),
        "name": config.name,
        "vipPrice": config.vip_price,
        "couplePrice": config.couple_price,
    }


@app.put("/rooms/{room_id}/layout")
def import_room_layout(room_id: int, payload: dict, session: Session = Depends(_session)) -> dict:
    """
    Replace the room layout with a full layout document (rows, cols, seats matrix),
    as produced by GET /rooms/{id}/layout or a designer export.
    """
    room = _get_room(session, room_id)
    try:
        layout = layout_from_dict(payload)
    except SeatLayoutError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    _store_layout(session, room, layout)
    return _layout_out(room_id, layout)


@app.post("/rooms/{room_id}/layout/edits")
def edit_room_layout(room_id: int, payload: LayoutEditRequest, session: Session = Depends(_session)) -> dict:
    """
    Apply editor intents in order. The first rejection aborts the batch and nothing is stored.
    """
    room = _get_room(session, room_id)
    layout = _room_layout(room)
    for i, edit in enumerate(payload.edits):
        try:
            result = _apply_edit(layout, edit)
        except SeatLayoutError as e:
            raise HTTPException(status_code=400, detail={"message": str(e), "edit_index": i}) from e
        if not result.ok:
            raise HTTPException(status_code=400, detail={"message": result.error, "edit_index": i})
        layout = result.layout
    _store_layout(session, room, layout)
    return _layout_out(room_id, layout)


def _seat_numbers(csv: Optional[str]) -> frozenset[str]:
    if not csv:
        return frozenset()
    return frozenset(s.strip().upper() for s in csv.split(",") if s.strip())


@app.get("/rooms/{room_id}/booking-map")
def booking_map(
    room_id: int,
    booked: Optional[str] = None,
    held: Optional[str] = None,
    selected: Optional[str] = None,
    session: Session = Depends(_session),
) -> dict:
    room = _get_room(session, room_id)
    layout = _room_layout(room)
    units = booking_units(layout, _seat_numbers(booked), _seat_numbers(held), _seat_numbers(selected))
    return {
        "roomId": room_id,
        "rows": layout.rows,
        "cols": layout.cols,
        "units": [u.to_dict() for u in units if u.cell.seat_number],
    }


def serve() -> None:
    import uvicorn

    uvicorn.run(
        app,
        host=os.environ.get("CINEMA_LAYOUT_HOST", "127.0.0.1"),
        port=int(os.environ.get("CINEMA_LAYOUT_PORT", "8000")),
        log_config=None,
    )


if __name__ == "__main__":
    serve()
