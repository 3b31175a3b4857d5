"""Participant-facing session reads and adjustments."""

from datetime import datetime, tzinfo
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.app.core import errors
from backend.app.core.time import as_utc
from backend.app.models.outbox import TOPIC_SESSION_UPDATED
from backend.app.models.session import Session as SessionModel
from backend.app.services import outbox
from backend.app.services.slots import slot_code


def get_participant_session(db: Session, session_id: int, user_id: int) -> SessionModel:
    session_obj = db.query(SessionModel).filter(SessionModel.id == session_id).first()
    if not session_obj:
        raise errors.not_found(errors.SESSION_NOT_FOUND)
    if user_id not in (session_obj.student_id, session_obj.tutor_id):
        raise errors.forbidden(errors.FORBIDDEN)
    return session_obj


def list_sessions(db: Session, user_id: int) -> list[SessionModel]:
    query = db.query(SessionModel).filter(or_(SessionModel.student_id == user_id, SessionModel.tutor_id == user_id))
    return query.order_by(SessionModel.starts_at.asc(), SessionModel.id.asc()).all()


def update_session(
    db: Session,
    session_id: int,
    user_id: int,
    starts_at: Optional[datetime] = None,
    meeting_link: Optional[str] = None,
    mode: Optional[str] = None,
    tz: tzinfo | None = None,
) -> SessionModel:
    """Move, relink or change mode; the duration and slot code follow the new start."""
    session_obj = get_participant_session(db, session_id, user_id)
    if starts_at is not None:
        duration = as_utc(session_obj.ends_at) - as_utc(session_obj.starts_at)
        new_start = as_utc(starts_at)
        session_obj.starts_at = new_start
        session_obj.ends_at = new_start + duration
        session_obj.slot_code = slot_code(new_start, tz)
    if meeting_link is not None:
        session_obj.meeting_link = meeting_link
    if mode is not None:
        session_obj.mode = mode
    outbox.enqueue(db, TOPIC_SESSION_UPDATED, {"session_id": session_obj.id}, commit=False)
    db.commit()
    db.refresh(session_obj)
    return session_obj
