from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class Consumer(BaseModel):
    id: int | None = None
    name: str
    address: str = ""
    phone: str = ""
    meter_number: str = ""
    created_at: date | None = None
