"""Session and booking schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator

from backend.app.schemas.common import TimestampedRead


class SessionRead(TimestampedRead):
    id: int
    request_id: int
    match_id: int
    student_id: int
    tutor_id: int
    starts_at: datetime
    ends_at: datetime
    mode: str
    slot_code: Optional[str] = None
    meeting_link: Optional[str] = None
    reminder_sent: bool


class AcceptMatchBody(BaseModel):
    starts_at: Optional[datetime] = Field(default=None, alias="startsAt")
    duration_minutes: Optional[int] = Field(default=None, alias="durationMin", gt=0, le=480)

    model_config = ConfigDict(populate_by_name=True)


class ReservationCreate(BaseModel):
    request_id: int = Field(alias="requestId")
    tutor_id: int = Field(alias="tutorId")
    starts_at: datetime = Field(alias="startsAt")

    model_config = ConfigDict(populate_by_name=True)


class BookingResponse(BaseModel):
    success: bool = True
    match_id: int
    session: SessionRead
    created: bool
    warning: Optional[str] = None


class SessionUpdate(BaseModel):
    starts_at: Optional[datetime] = Field(default=None, alias="startsAt")
    meeting_link: Optional[HttpUrl] = Field(default=None, alias="meetingLink")
    mode: Optional[Literal["online"]] = None

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def require_a_field(self):
        if self.starts_at is None and self.meeting_link is None and self.mode is None:
            raise ValueError("No fields")
        return self
