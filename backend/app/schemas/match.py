"""Match schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from backend.app.schemas.common import TimestampedRead


class MatchRead(TimestampedRead):
    id: int
    request_id: int
    tutor_id: int
    status: str
    mode: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MatchDeclineResponse(BaseModel):
    success: bool = True
    match: MatchRead
    warning: Optional[str] = None
