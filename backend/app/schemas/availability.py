"""Tutor availability schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from backend.app.schemas.common import TimestampedRead
from backend.app.schemas.request import DayCode, PodCode


class AvailabilityCreate(BaseModel):
    day: DayCode
    pod: PodCode


class AvailabilityRead(TimestampedRead):
    id: int
    tutor_id: int
    day: str
    pod: str
    slot_code: Optional[str] = None
    created_at: datetime
