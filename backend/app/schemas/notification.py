"""In-app notification schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from backend.app.schemas.common import TimestampedRead


class NotificationRead(TimestampedRead):
    id: int
    user_id: int
    kind: str
    payload: dict
    meta: dict
    delivered: bool
    created_at: datetime
    seen_at: Optional[datetime] = None
    read_at: Optional[datetime] = None


class NotificationSeen(BaseModel):
    ids: List[int] = Field(min_length=1)
