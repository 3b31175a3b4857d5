"""Session rating: one overwritable score per finished session."""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.core import errors
from backend.app.core.time import as_utc, utc_now
from backend.app.models.rating import SessionRating
from backend.app.models.session import Session as SessionModel


def rate_session(
    db: Session,
    session_id: int,
    actor_id: int,
    rating: int,
    comment: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SessionRating:
    session_obj = db.query(SessionModel).filter(SessionModel.id == session_id).first()
    if not session_obj:
        raise errors.not_found(errors.SESSION_NOT_FOUND)
    if session_obj.student_id != actor_id:
        raise errors.forbidden(errors.FORBIDDEN)
    if as_utc(now or utc_now()) < as_utc(session_obj.ends_at):
        raise errors.bad_request(errors.SESSION_NOT_FINISHED_YET)

    existing = db.query(SessionRating).filter(SessionRating.session_id == session_obj.id).first()
    if existing is None:
        existing = SessionRating(
            session_id=session_obj.id,
            tutor_id=session_obj.tutor_id,
            student_id=session_obj.student_id,
            rating=rating,
            comment=comment,
        )
        db.add(existing)
        try:
            db.commit()
            db.refresh(existing)
            return existing
        except IntegrityError:
            # A concurrent first rating won the insert; overwrite it instead
            db.rollback()
            existing = db.query(SessionRating).filter(SessionRating.session_id == session_obj.id).one()

    existing.rating = rating
    existing.comment = comment
    existing.updated_at = utc_now()
    db.commit()
    db.refresh(existing)
    return existing


def tutor_rating_summary(db: Session, tutor_id: int) -> tuple[Optional[float], int]:
    scores = [row.rating for row in db.query(SessionRating.rating).filter(SessionRating.tutor_id == tutor_id).all()]
    if not scores:
        return None, 0
    return round(sum(scores) / len(scores), 2), len(scores)
