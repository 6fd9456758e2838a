from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from seat_layout.types import MAX_GRID_SIZE, MIN_GRID_SIZE, SeatType


class _CamelModel(BaseModel):
    # The admin frontend speaks camelCase; snake_case is accepted too.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FlatSeatIn(BaseModel):
    row: str = Field(pattern=r"^[A-O]$")
    col: int = Field(ge=1, le=MAX_GRID_SIZE)
    type: SeatType


class RoomCreate(_CamelModel):
    name: str = Field(min_length=1)
    cinema_id: str = Field(min_length=1)
    seat_layout: list[FlatSeatIn] = Field(default_factory=list)
    rows: Optional[int] = Field(default=None, ge=MIN_GRID_SIZE, le=MAX_GRID_SIZE)
    cols: Optional[int] = Field(default=None, ge=MIN_GRID_SIZE, le=MAX_GRID_SIZE)
    vip_price: float = Field(ge=0, default=0.0)
    couple_price: float = Field(ge=0, default=0.0)
    disabled_price: Optional[float] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("room name must not be blank")
        return v.strip()


class RoomUpdate(_CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    cinema_id: Optional[str] = Field(default=None, min_length=1)
    seat_layout: Optional[list[FlatSeatIn]] = None
    rows: Optional[int] = Field(default=None, ge=MIN_GRID_SIZE, le=MAX_GRID_SIZE)
    cols: Optional[int] = Field(default=None, ge=MIN_GRID_SIZE, le=MAX_GRID_SIZE)
    vip_price: Optional[float] = Field(default=None, ge=0)
    couple_price: Optional[float] = Field(default=None, ge=0)
    disabled_price: Optional[float] = Field(default=None, ge=0)


class ClickEdit(BaseModel):
    action: Literal["click"]
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    seat_type: SeatType


class PaintEdit(BaseModel):
    action: Literal["paint"]
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    seat_type: SeatType


class EraseEdit(BaseModel):
    action: Literal["erase"]
    row: int = Field(ge=0)
    col: int = Field(ge=0)


class CoupleEdit(BaseModel):
    action: Literal["couple"]
    row: int = Field(ge=0)
    col_a: int = Field(ge=0)
    col_b: int = Field(ge=0)


class ResizeEdit(BaseModel):
    action: Literal["resize"]
    # Bounds are checked by the editor so the user-facing message comes back.
    rows: int
    cols: int


class ClearEdit(BaseModel):
    action: Literal["clear"]


LayoutEdit = Annotated[
    Union[ClickEdit, PaintEdit, EraseEdit, CoupleEdit, ResizeEdit, ClearEdit],
    Field(discriminator="action"),
]


class LayoutEditRequest(BaseModel):
    edits: list[LayoutEdit] = Field(min_length=1)
