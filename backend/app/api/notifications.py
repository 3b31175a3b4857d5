"""Notification inbox endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.models.user import User
from backend.app.schemas.notification import NotificationRead, NotificationSeen
from backend.app.services import notifications

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=list[NotificationRead])
async def list_notifications(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return notifications.list_notifications(db, current_user.id)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
async def read_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return notifications.mark_read(db, notification_id, current_user.id)


@router.post("/seen")
async def mark_seen(body: NotificationSeen, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    updated = notifications.mark_seen(db, body.ids, current_user.id)
    return {"ok": True, "updated": updated}
