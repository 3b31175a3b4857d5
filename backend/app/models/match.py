"""Match model: one candidate pairing of a request with a tutor."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now

MATCH_PROPOSED = "proposed"
MATCH_ACCEPTED = "accepted"
MATCH_DECLINED = "declined"
MATCH_EXPIRED = "expired"


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("request_id", "tutor_id", name="uq_matches_request_tutor"),
        # At most one accepted match per request, whatever path accepted it
        Index(
            "uq_matches_one_accepted_per_request",
            "request_id",
            unique=True,
            sqlite_where=text("status = 'accepted'"),
            postgresql_where=text("status = 'accepted'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("requests.id"), nullable=False, index=True)
    tutor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=MATCH_PROPOSED)
    mode = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    request = relationship("TutoringRequest", back_populates="matches")
    tutor = relationship("User", foreign_keys=[tutor_id])
    session = relationship("Session", back_populates="match", uselist=False)
