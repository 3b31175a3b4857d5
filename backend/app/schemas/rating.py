"""Session rating schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from backend.app.schemas.common import TimestampedRead


class RatingCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=1000)


class RatingRead(TimestampedRead):
    id: int
    session_id: int
    tutor_id: int
    student_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime
