"""
Booking orchestrator: turns an accepted match into exactly one session.

Two entry points share the scheduling core:

- ``accept_match``: the student accepts a proposed match.
- ``reserve_tutor``: the student books a tutor directly; the match is found or
  created on the way, and a confirmation is delivered synchronously.

Both are idempotent. Re-issuing the same call returns the session created the
first time. Duplicates are prevented by the guarded match transition, a
pre-insert lookup and the unique ``sessions.match_id`` constraint, in that
order. Availability consumption and notifications are side effects that never
fail the booking.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.core import errors
from backend.app.core.settings import get_settings
from backend.app.core.time import as_utc, utc_now
from backend.app.models.match import MATCH_ACCEPTED, MATCH_PROPOSED, Match
from backend.app.models.outbox import TOPIC_SESSION_CREATED
from backend.app.models.request import MODE_ONLINE, TutoringRequest
from backend.app.models.session import Session as SessionModel
from backend.app.models.user import ROLE_TUTOR, User
from backend.app.services import availability, matches, outbox
from backend.app.services.notifications import record_notifications
from backend.app.services.notifier import Notifier
from backend.app.services.slots import slot_code as compute_slot_code

logger = logging.getLogger(__name__)

SUPPORTED_MODES = (MODE_ONLINE,)


@dataclass
class BookingResult:
    match: Match
    session: SessionModel
    created: bool
    warning: Optional[str] = None


def _session_mode(*candidates: Optional[str]) -> str:
    for mode in candidates:
        if mode in SUPPORTED_MODES:
            return mode
    return MODE_ONLINE


def _meeting_link(match_id: int) -> str:
    base = get_settings().meeting_base_url.rstrip("/")
    return f"{base}/tutorlink-{match_id}-{secrets.token_hex(4)}"


def session_bounds(
    starts_at: Optional[datetime],
    duration_minutes: Optional[int],
    now: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """Explicit start/duration when given, else one hour from now for the default length."""
    start = as_utc(starts_at) if starts_at is not None else as_utc(now or utc_now()) + timedelta(hours=1)
    minutes = duration_minutes if duration_minutes is not None else get_settings().default_session_minutes
    return start, start + timedelta(minutes=minutes)


def find_session_for_match(db: Session, match_id: int) -> SessionModel | None:
    return db.query(SessionModel).filter(SessionModel.match_id == match_id).first()


def _insert_session(
    db: Session,
    match: Match,
    request: TutoringRequest,
    starts_at: datetime,
    ends_at: datetime,
    tz: tzinfo | None,
) -> tuple[SessionModel, bool]:
    """Insert the match's session, or return the one a concurrent call inserted."""
    session_obj = SessionModel(
        request_id=request.id,
        match_id=match.id,
        student_id=request.student_id,
        tutor_id=match.tutor_id,
        starts_at=starts_at,
        ends_at=ends_at,
        mode=_session_mode(match.mode, request.mode),
        slot_code=compute_slot_code(starts_at, tz),
        meeting_link=_meeting_link(match.id),
        reminder_sent=False,
    )
    db.add(session_obj)
    try:
        db.flush()
        # Same transaction as the session; a losing insert drops its event too
        outbox.enqueue(db, TOPIC_SESSION_CREATED, {"session_id": session_obj.id, "match_id": match.id}, commit=False)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        existing = find_session_for_match(db, match.id)
        if existing is None:
            logger.error(f"Session insert for match {match.id} failed with no existing row: {e}")
            raise errors.server_error(errors.SESSION_INSERT_FAILED)
        logger.info(f"Session for match {match.id} already inserted concurrently, returning it")
        return existing, False
    except Exception:
        db.rollback()
        raise
    db.refresh(session_obj)
    return session_obj, True


def _schedule(
    db: Session,
    match: Match,
    request: TutoringRequest,
    starts_at: Optional[datetime],
    duration_minutes: Optional[int],
    tz: tzinfo | None,
    now: Optional[datetime],
) -> tuple[SessionModel, bool]:
    existing = find_session_for_match(db, match.id)
    if existing is not None:
        return existing, False

    start, end = session_bounds(starts_at, duration_minutes, now)
    session_obj, created = _insert_session(db, match, request, start, end, tz)
    if not created:
        return session_obj, False

    availability.consume(db, match.tutor_id, start, tz)
    return session_obj, True


def accept_match(
    db: Session,
    match_id: int,
    actor_id: Optional[int],
    starts_at: Optional[datetime] = None,
    duration_minutes: Optional[int] = None,
    tz: tzinfo | None = None,
    now: Optional[datetime] = None,
) -> BookingResult:
    if actor_id is None:
        raise errors.unauthenticated()

    match = matches.get_match_with_request(db, match_id)
    request = match.request
    if request is None or request.student_id != actor_id:
        raise errors.forbidden(errors.FORBIDDEN_NOT_STUDENT)

    warning = None
    if match.status == MATCH_ACCEPTED:
        warning = errors.ALREADY_ACCEPTED
    elif match.status != MATCH_PROPOSED:
        raise errors.conflict(errors.INVALID_STATE)
    elif not matches.accept_proposed(db, match):
        match = matches.reload(db, match)
        existing = find_session_for_match(db, match.id) if match.status == MATCH_ACCEPTED else None
        if existing is None:
            raise errors.conflict(errors.CONFLICT_ALREADY_ACCEPTED)
        return BookingResult(match=match, session=existing, created=False, warning=errors.ALREADY_ACCEPTED)
    else:
        match = matches.reload(db, match)

    # An accepted match without a session is a partial earlier attempt; finish it
    session_obj, created = _schedule(db, match, request, starts_at, duration_minutes, tz, now)
    logger.info(f"Match {match.id} accepted by student {actor_id}: session {session_obj.id} created={created}")
    return BookingResult(match=match, session=session_obj, created=created, warning=warning)


def _find_or_accept_match(db: Session, request: TutoringRequest, tutor_id: int) -> Match:
    match = matches.find_match(db, request.id, tutor_id)
    if match is None:
        match = matches.create_accepted(db, request.id, tutor_id, _session_mode(request.mode))
        if match is not None:
            return match
        # Either a concurrent reservation inserted this pair, or another tutor was accepted
        match = matches.find_match(db, request.id, tutor_id)
        if match is None or match.status != MATCH_ACCEPTED:
            raise errors.conflict(errors.CONFLICT_ALREADY_ACCEPTED)
        return match

    if match.status == MATCH_ACCEPTED:
        return match
    if match.status != MATCH_PROPOSED:
        raise errors.conflict(errors.INVALID_MATCH_STATE)
    if not matches.accept_proposed(db, match):
        match = matches.reload(db, match)
        if match.status != MATCH_ACCEPTED:
            raise errors.conflict(errors.CONFLICT_ALREADY_ACCEPTED)
        return match
    return matches.reload(db, match)


def _confirmation_html(name: Optional[str], subject: str, session_obj: SessionModel, minutes: int) -> str:
    link = (
        f'<p><b>Join link:</b> <a href="{session_obj.meeting_link}">{session_obj.meeting_link}</a></p>'
        if session_obj.meeting_link
        else ""
    )
    return (
        f"<p>Hello {name or 'there'},</p>"
        f"<p>Your tutoring session in <b>{subject}</b> has been scheduled.</p>"
        f"<p><b>Date and time (UTC):</b> {as_utc(session_obj.starts_at).isoformat()}</p>"
        f"<p><b>Duration:</b> {minutes} minutes</p>"
        f"<p><b>Mode:</b> {session_obj.mode}</p>"
        f"{link}"
        "<p>Please join a few minutes early.</p>"
        "<p>The TutorLink team</p>"
    )


def _send_confirmations(
    db: Session,
    notifier: Notifier,
    request: TutoringRequest,
    session_obj: SessionModel,
    student: User,
    tutor: User,
    minutes: int,
) -> None:
    subject_label = request.subject or "your session"
    email_subject = f"Your TutorLink session in {subject_label} is scheduled"
    for user in (student, tutor):
        result = notifier.send_email(user, email_subject, _confirmation_html(user.first_name, subject_label, session_obj, minutes))
        if not result.ok:
            logger.warning(f"Confirmation email for session {session_obj.id} to user {user.id} failed: {result.error}")

    payload = {
        "session_id": session_obj.id,
        "subject": subject_label,
        "starts_at": as_utc(session_obj.starts_at).isoformat(),
        "meeting_link": session_obj.meeting_link,
    }
    try:
        record_notifications(
            db,
            [
                {
                    "user_id": student.id,
                    "kind": "session_created_student",
                    "delivered": True,
                    "payload": payload,
                    "meta": {"source": "reservations", "role": "student", "via": "email"},
                },
                {
                    "user_id": tutor.id,
                    "kind": "session_created_tutor",
                    "delivered": True,
                    "payload": payload,
                    "meta": {"source": "reservations", "role": "tutor", "via": "email"},
                },
            ],
        )
    except Exception as e:
        db.rollback()
        logger.warning(f"In-app notifications for session {session_obj.id} not recorded: {e}")


def reserve_tutor(
    db: Session,
    request_id: int,
    tutor_id: int,
    actor_id: Optional[int],
    starts_at: datetime,
    notifier: Notifier,
    tz: tzinfo | None = None,
) -> BookingResult:
    if actor_id is None:
        raise errors.unauthenticated()

    request = db.query(TutoringRequest).filter(TutoringRequest.id == request_id).first()
    if not request:
        raise errors.not_found(errors.REQUEST_NOT_FOUND)
    if request.student_id != actor_id:
        raise errors.forbidden(errors.FORBIDDEN)
    tutor = db.query(User).filter(User.id == tutor_id, User.role == ROLE_TUTOR).first()
    if not tutor:
        raise errors.not_found(errors.TUTOR_NOT_FOUND)

    match = _find_or_accept_match(db, request, tutor.id)
    minutes = get_settings().reservation_session_minutes
    session_obj, created = _schedule(db, match, request, starts_at, minutes, tz, None)

    if created:
        student = db.query(User).filter(User.id == request.student_id).first()
        _send_confirmations(db, notifier, request, session_obj, student, tutor, minutes)
    logger.info(f"Reservation request={request.id} tutor={tutor.id}: session {session_obj.id} created={created}")
    return BookingResult(match=match, session=session_obj, created=created)
