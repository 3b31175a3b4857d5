"""Tutor availability: an open recurring weekly slot."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class TutorAvailability(Base):
    __tablename__ = "tutor_availabilities"

    id = Column(Integer, primary_key=True, index=True)
    tutor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    day = Column(String(3), nullable=False)
    pod = Column(String(20), nullable=False)
    # Legacy rows predate the denormalized code and carry NULL here
    slot_code = Column(String(20), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    tutor = relationship("User", back_populates="availabilities")
