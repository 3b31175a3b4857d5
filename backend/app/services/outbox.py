"""
Notification outbox.

Components that need to tell a user something asynchronously write an
OutboxEvent in their own transaction. The cron-triggered sweep drains pending
events oldest-first:

- a handler that returns marks the event ``sent``
- a handler that raises (including transport timeouts) leaves it ``pending``
  with ``attempts`` incremented; the next scheduled run is the retry
- events at the attempt cap are no longer selected and stay ``pending``
- unknown topics are treated as delivered so they cannot stall the queue

Overlapping sweeps may deliver an event twice; delivery is at-least-once.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from backend.app.core.settings import get_settings
from backend.app.core.time import as_utc, get_local_timezone, utc_now
from backend.app.models.match import Match
from backend.app.models.outbox import (
    OUTBOX_PENDING,
    OUTBOX_SENT,
    TOPIC_MATCH_PROPOSED,
    TOPIC_SESSION_CREATED,
    TOPIC_SESSION_UPDATED,
    OutboxEvent,
)
from backend.app.models.session import Session as SessionModel
from backend.app.models.user import User
from backend.app.services.notifier import DeliveryError, Notifier

logger = logging.getLogger(__name__)

Handler = Callable[[Session, dict, Notifier], None]


def enqueue(db: Session, topic: str, payload: dict, commit: bool = True) -> OutboxEvent:
    event = OutboxEvent(topic=topic, payload=payload, status=OUTBOX_PENDING, attempts=0)
    db.add(event)
    if commit:
        db.commit()
        db.refresh(event)
    return event


def _format_when(value: Optional[datetime]) -> str:
    if value is None:
        return "to be scheduled"
    local = as_utc(value).astimezone(get_local_timezone())
    return local.strftime("%a %d %b %Y %H:%M")


def _require(result, what: str) -> None:
    if not result.ok:
        raise DeliveryError(f"{what}: {result.error}")


def handle_match_proposed(db: Session, payload: dict, notifier: Notifier) -> None:
    match = db.query(Match).filter(Match.id == payload.get("match_id")).first()
    if not match:
        return
    request = match.request
    tutor = db.query(User).filter(User.id == match.tutor_id).first()
    if not tutor:
        return
    slots = ", ".join(f"{slot['day']}:{slot['pod']}" for slot in (request.slots or []))
    body = f"New request: {request.subject}. Slots: {slots}.\nAccept it from your dashboard."
    _require(notifier.send_chat(tutor, body), f"match {match.id} tutor chat")


def _session_participants(db: Session, session_obj: SessionModel) -> tuple[User | None, User | None]:
    student = db.query(User).filter(User.id == session_obj.student_id).first()
    tutor = db.query(User).filter(User.id == session_obj.tutor_id).first()
    return student, tutor


def handle_session_created(db: Session, payload: dict, notifier: Notifier) -> None:
    session_obj = db.query(SessionModel).filter(SessionModel.id == payload.get("session_id")).first()
    if not session_obj:
        return
    student, tutor = _session_participants(db, session_obj)
    when = _format_when(session_obj.starts_at)
    link = f"\nLink: {session_obj.meeting_link}" if session_obj.meeting_link else ""
    if student:
        _require(notifier.send_chat(student, f"Your tutor is confirmed.\nSession: {when}{link}"), "student chat")
    if tutor:
        _require(notifier.send_chat(tutor, f"New session scheduled.\nTime: {when}{link}"), "tutor chat")


def handle_session_updated(db: Session, payload: dict, notifier: Notifier) -> None:
    session_obj = db.query(SessionModel).filter(SessionModel.id == payload.get("session_id")).first()
    if not session_obj:
        return
    student, tutor = _session_participants(db, session_obj)
    when = _format_when(session_obj.starts_at)
    link = f"\nLink: {session_obj.meeting_link}" if session_obj.meeting_link else ""
    body = f"Your session was updated.\nTime: {when}{link}"
    for user in (student, tutor):
        if user:
            _require(notifier.send_chat(user, body), f"user {user.id} chat")


HANDLERS: dict[str, Handler] = {
    TOPIC_MATCH_PROPOSED: handle_match_proposed,
    TOPIC_SESSION_CREATED: handle_session_created,
    TOPIC_SESSION_UPDATED: handle_session_updated,
}


def dispatch(db: Session, event: OutboxEvent, notifier: Notifier, handlers: dict[str, Handler] | None = None) -> None:
    handler = (handlers if handlers is not None else HANDLERS).get(event.topic)
    if handler is None:
        logger.info(f"Outbox event {event.id}: no handler for topic {event.topic!r}, marking sent")
        return
    handler(db, event.payload or {}, notifier)


def select_pending(db: Session, batch_size: int, max_attempts: int) -> list[OutboxEvent]:
    return (
        db.query(OutboxEvent)
        .filter(OutboxEvent.status == OUTBOX_PENDING, OutboxEvent.attempts < max_attempts)
        .order_by(OutboxEvent.id.asc())
        .limit(batch_size)
        .all()
    )


def process_outbox(
    db: Session,
    notifier: Notifier,
    handlers: dict[str, Handler] | None = None,
    batch_size: int | None = None,
    max_attempts: int | None = None,
) -> dict:
    settings = get_settings()
    batch_size = batch_size or settings.outbox_batch_size
    max_attempts = max_attempts or settings.outbox_max_attempts

    events = select_pending(db, batch_size, max_attempts)
    processed = 0
    failed = 0
    for event in events:
        event_id = event.id
        try:
            dispatch(db, event, notifier, handlers)
        except Exception as e:
            db.rollback()
            failed += 1
            logger.error(f"Outbox event {event_id} ({event.topic}) failed on attempt {event.attempts + 1}: {e}")
            db.query(OutboxEvent).filter(OutboxEvent.id == event_id).update(
                {OutboxEvent.attempts: OutboxEvent.attempts + 1, OutboxEvent.last_error: str(e)[:1000]},
                synchronize_session=False,
            )
            db.commit()
            continue

        db.query(OutboxEvent).filter(OutboxEvent.id == event_id, OutboxEvent.status == OUTBOX_PENDING).update(
            {OutboxEvent.status: OUTBOX_SENT, OutboxEvent.processed_at: utc_now()},
            synchronize_session=False,
        )
        db.commit()
        processed += 1

    if events:
        logger.info(f"Outbox sweep: selected={len(events)} processed={processed} failed={failed}")
    return {"selected": len(events), "processed": processed, "failed": failed}
