from __future__ import annotations

import json
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    return datetime.utcnow()


class Room(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    cinema_id: str = Field(index=True)

    # JSON flat seat list: [{"row": "A", "col": 1, "type": "NORMAL"}, ...]; EMPTY cells omitted.
    seat_layout_json: str = "[]"
    # Designer grid size; the flat list alone only implies the occupied extent.
    rows: int = 1
    cols: int = 1

    vip_price: float = 0.0
    couple_price: float = 0.0
    disabled_price: Optional[float] = None

    is_archived: bool = False

    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    def seat_layout(self) -> list[dict]:
        return json.loads(self.seat_layout_json)
