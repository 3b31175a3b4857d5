"""In-app notification rows shown in the user's inbox."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    kind = Column(String(100), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    meta = Column(JSON, nullable=False, default=dict)
    delivered = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    seen_at = Column(DateTime(timezone=True), nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
