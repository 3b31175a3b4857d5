"""Cron-triggered sweeps. Every route requires the X-Cron-Secret header."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import verify_cron_secret
from backend.app.services.notifier import Notifier, get_notifier
from backend.app.services.outbox import process_outbox
from backend.app.services.reminders import WINDOW_NEXT_DAY, WINDOW_SOON, send_session_reminders

router = APIRouter(prefix="/jobs", tags=["jobs"], dependencies=[Depends(verify_cron_secret)])


@router.api_route("/outbox", methods=["GET", "POST"])
def run_outbox(db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)):
    return {"ok": True, **process_outbox(db, notifier)}


@router.api_route("/session-reminders", methods=["GET", "POST"])
def run_session_reminders(db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)):
    return {"ok": True, **send_session_reminders(db, notifier, window=WINDOW_SOON)}


@router.api_route("/session-reminders/next-day", methods=["GET", "POST"])
def run_next_day_reminders(db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)):
    return {"ok": True, **send_session_reminders(db, notifier, window=WINDOW_NEXT_DAY)}
