from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MeterReading(BaseModel):
    """A cumulative meter value captured at a point in time."""

    model_config = ConfigDict(frozen=True)

    consumer_id: int
    taken_at: datetime
    units: int = Field(ge=0)
