"""Shared schema helpers."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator


class TimestampedRead(BaseModel):
    """Read schema whose datetimes always serialize as aware UTC."""

    @field_validator("*", mode="before")
    @classmethod
    def ensure_timezone(cls, v):
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    model_config = ConfigDict(from_attributes=True)
