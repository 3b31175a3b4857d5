"""Tutoring request model: a student's ask for help in a subject."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now

REQUEST_OPEN = "open"
REQUEST_MATCHED = "matched"

MODE_ONLINE = "online"


class TutoringRequest(Base):
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    subject = Column(String, nullable=False)
    subject_slug = Column(String, nullable=False, index=True)
    # [{"day": "wed", "pod": "evening"}, ...]
    slots = Column(JSON, nullable=False, default=list)
    mode = Column(String(20), nullable=False, default=MODE_ONLINE)
    request_meta = Column(JSON, nullable=True)
    status = Column(String(20), nullable=False, default=REQUEST_OPEN)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    student = relationship("User", back_populates="requests")
    matches = relationship("Match", back_populates="request", cascade="all, delete-orphan")
