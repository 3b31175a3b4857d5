"""
Session reminder sweep.

Finds sessions starting inside a window that have not been reminded yet and
reminds both participants. A session counts as reminded when its
``reminder_sent`` flag is set or a ``session_reminder_log`` row exists; both
markers are written after the first sweep where at least one participant was
reached, so a participant with a broken contact does not make the session
retry forever.

Windows:
    soon      sessions starting within the next REMINDER_LEAD_MINUTES
    next_day  sessions starting during the next local calendar day
"""

import logging
from datetime import datetime, timedelta, tzinfo
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.core.settings import get_settings
from backend.app.core.time import as_utc, get_local_timezone, utc_now
from backend.app.models.reminder_log import SessionReminderLog
from backend.app.models.request import TutoringRequest
from backend.app.models.session import Session as SessionModel
from backend.app.models.user import User
from backend.app.services.notifications import record_notifications
from backend.app.services.notifier import Notifier

logger = logging.getLogger(__name__)

WINDOW_SOON = "soon"
WINDOW_NEXT_DAY = "next_day"


def reminder_window(window: str, now: datetime, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    now = as_utc(now)
    if window == WINDOW_SOON:
        return now, now + timedelta(minutes=get_settings().reminder_lead_minutes)
    if window == WINDOW_NEXT_DAY:
        zone = tz or get_local_timezone()
        tomorrow = now.astimezone(zone).date() + timedelta(days=1)
        start = datetime(tomorrow.year, tomorrow.month, tomorrow.day, tzinfo=zone)
        end = start + timedelta(days=1) - timedelta(microseconds=1)
        return as_utc(start), as_utc(end)
    raise ValueError(f"Unknown reminder window: {window!r}")


def due_sessions(db: Session, start: datetime, end: datetime, limit: int) -> list[SessionModel]:
    already_logged = select(SessionReminderLog.session_id)
    return (
        db.query(SessionModel)
        .filter(
            SessionModel.starts_at >= start,
            SessionModel.starts_at <= end,
            SessionModel.reminder_sent.is_(False),
            SessionModel.id.not_in(already_logged),
        )
        .order_by(SessionModel.starts_at.asc(), SessionModel.id.asc())
        .limit(limit)
        .all()
    )


def _render(role: str, name: Optional[str], subject: str, session_obj: SessionModel, window: str) -> tuple[str, str, str]:
    when = f"in about {get_settings().reminder_lead_minutes} minutes" if window == WINDOW_SOON else "tomorrow"
    starts = as_utc(session_obj.starts_at).isoformat()
    link = session_obj.meeting_link
    if role == "student":
        email_subject = f"Reminder: your {subject} session starts {when}"
        intro = f"Your tutoring session in <strong>{subject}</strong> starts {when}."
    else:
        email_subject = f"Reminder: your {subject} tutoring session starts {when}"
        intro = f"Your tutoring session in <strong>{subject}</strong> with a student starts {when}."
    html = (
        f"<p>Hello{' ' + name if name else ''},</p>"
        f"<p>{intro}</p>"
        f"<p><strong>Start time (UTC):</strong> {starts}</p>"
        + (f'<p><strong>Join link:</strong> <a href="{link}">{link}</a></p>' if link else "")
        + "<p>Please connect a few minutes early to check your audio and video.</p>"
        "<p>The TutorLink team</p>"
    )
    text = f"Reminder: session {when} at {starts}." + (f"\nLink: {link}" if link else "")
    return email_subject, html, text


def _remind(notifier: Notifier, user: Optional[User], role: str, subject: str, session_obj: SessionModel, window: str) -> bool:
    if user is None:
        logger.warning(f"Reminder for session {session_obj.id}: {role} not found")
        return False
    email_subject, html, text = _render(role, user.first_name, subject, session_obj, window)
    delivered = notifier.notify_user(user, email_subject, html, text)
    if not delivered:
        logger.warning(f"Reminder for session {session_obj.id} not delivered to {role} {user.id}")
    return delivered


def _mark_reminded(db: Session, session_id: int) -> None:
    db.query(SessionModel).filter(SessionModel.id == session_id).update(
        {SessionModel.reminder_sent: True}, synchronize_session=False
    )
    db.commit()
    db.add(SessionReminderLog(session_id=session_id))
    try:
        db.commit()
    except IntegrityError:
        # An overlapping sweep logged it first
        db.rollback()


def send_session_reminders(
    db: Session,
    notifier: Notifier,
    window: str = WINDOW_SOON,
    now: Optional[datetime] = None,
    tz: tzinfo | None = None,
) -> dict:
    start, end = reminder_window(window, now or utc_now(), tz)
    sessions = due_sessions(db, start, end, get_settings().reminder_batch_size)

    reminded = 0
    skipped = 0
    for session_obj in sessions:
        request = db.query(TutoringRequest).filter(TutoringRequest.id == session_obj.request_id).first()
        subject = request.subject if request and request.subject else "your session"
        student = db.query(User).filter(User.id == session_obj.student_id).first()
        tutor = db.query(User).filter(User.id == session_obj.tutor_id).first()

        ok_student = _remind(notifier, student, "student", subject, session_obj, window)
        ok_tutor = _remind(notifier, tutor, "tutor", subject, session_obj, window)
        if not (ok_student or ok_tutor):
            skipped += 1
            continue

        _mark_reminded(db, session_obj.id)
        reminded += 1

        payload = {
            "session_id": session_obj.id,
            "subject": subject,
            "starts_at": as_utc(session_obj.starts_at).isoformat(),
            "meeting_link": session_obj.meeting_link,
        }
        rows = []
        if student:
            rows.append({"user_id": student.id, "kind": "session_reminder_student", "delivered": True, "payload": payload, "meta": {"window": window}})
        if tutor:
            rows.append({"user_id": tutor.id, "kind": "session_reminder_tutor", "delivered": True, "payload": payload, "meta": {"window": window}})
        try:
            record_notifications(db, rows)
        except Exception as e:
            db.rollback()
            logger.warning(f"Reminder inbox rows for session {session_obj.id} not recorded: {e}")

    if sessions:
        logger.info(f"Reminder sweep ({window}): processed={len(sessions)} reminded={reminded} skipped={skipped}")
    return {"processed": len(sessions), "reminded": reminded, "skipped": skipped}
