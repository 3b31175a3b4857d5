"""Tutoring request schemas."""

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backend.app.schemas.common import TimestampedRead

DayCode = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
PodCode = Literal["morning", "afternoon", "evening"]


class SlotIn(BaseModel):
    day: DayCode
    pod: PodCode


class RequestCreate(BaseModel):
    subject: str = Field(min_length=2)
    mode: Optional[Literal["online"]] = None
    slots: Optional[List[SlotIn]] = None
    # Legacy "day:pod" strings, read only when slots is empty
    time_slots: Optional[List[str]] = Field(default=None, alias="timeSlots")
    request_meta: Optional[Any] = None

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def require_slots(self):
        if not self.slots and not self.time_slots:
            raise ValueError("Provide either slots or timeSlots with at least one entry")
        return self


class RequestRead(TimestampedRead):
    id: int
    student_id: int
    subject: str
    subject_slug: str
    mode: str
    slots: List[dict]
    status: str
    request_meta: Optional[Any] = None
    created_at: datetime


class CandidateTutor(BaseModel):
    tutor_id: int
    full_name: Optional[str] = None
    subjects: List[str] = []
    rating: Optional[float] = None
    reviews_count: int = 0
    next_availabilities: List[str] = []


class RequestCreateResponse(BaseModel):
    request: RequestRead
    tutors: List[CandidateTutor]
    warn: Optional[str] = None
