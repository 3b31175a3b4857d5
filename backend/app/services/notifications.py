"""In-app notification inbox helpers."""

from datetime import timedelta

from sqlalchemy.orm import Session

from backend.app.core import errors
from backend.app.core.time import utc_now
from backend.app.models.notification import Notification

INBOX_WINDOW_DAYS = 7
INBOX_LIMIT = 50


def record_notifications(db: Session, rows: list[dict], commit: bool = True) -> list[Notification]:
    """Append inbox rows; each dict carries user_id, kind, payload, meta, delivered."""
    notifications = [
        Notification(
            user_id=row["user_id"],
            kind=row["kind"],
            payload=row.get("payload") or {},
            meta=row.get("meta") or {},
            delivered=row.get("delivered", False),
        )
        for row in rows
    ]
    db.add_all(notifications)
    if commit:
        db.commit()
    return notifications


def list_notifications(db: Session, user_id: int) -> list[Notification]:
    since = utc_now() - timedelta(days=INBOX_WINDOW_DAYS)
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.created_at >= since)
        .order_by(Notification.seen_at.is_not(None), Notification.created_at.desc(), Notification.id.desc())
        .limit(INBOX_LIMIT)
        .all()
    )


def mark_read(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise errors.not_found(errors.NOTIFICATION_NOT_FOUND)
    if notification.read_at is None:
        notification.read_at = utc_now()
        db.commit()
        db.refresh(notification)
    return notification


def mark_seen(db: Session, ids: list[int], user_id: int) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.id.in_(ids), Notification.user_id == user_id, Notification.seen_at.is_(None))
        .update({Notification.seen_at: utc_now()}, synchronize_session=False)
    )
    db.commit()
    return updated
