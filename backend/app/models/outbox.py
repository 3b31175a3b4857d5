"""Durable notification intents drained by the outbox sweep."""

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now

OUTBOX_PENDING = "pending"
OUTBOX_SENT = "sent"

TOPIC_MATCH_PROPOSED = "match.proposed"
TOPIC_SESSION_CREATED = "session.created"
TOPIC_SESSION_UPDATED = "session.updated"


class OutboxEvent(Base):
    __tablename__ = "outbox_events"

    id = Column(Integer, primary_key=True, index=True)
    topic = Column(String(100), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), nullable=False, default=OUTBOX_PENDING, index=True)
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    processed_at = Column(DateTime(timezone=True), nullable=True)
