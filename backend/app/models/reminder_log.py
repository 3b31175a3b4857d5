"""Append-only marker of sessions that already got their reminder."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class SessionReminderLog(Base):
    __tablename__ = "session_reminder_log"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
