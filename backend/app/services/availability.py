"""Tutor availability store.

Consumption is best-effort: a booking never fails because the slot row was
already gone (a concurrent booking took it) or because a legacy row carries
no slot_code. Those cases are logged and the booking proceeds.
"""

import logging
from datetime import datetime, tzinfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core import errors
from backend.app.models.availability import TutorAvailability
from backend.app.services.slots import Slot, encode

logger = logging.getLogger(__name__)


def consume(db: Session, tutor_id: int, start_instant: datetime, tz: tzinfo | None = None) -> bool:
    """Delete the tutor's availability for the slot containing ``start_instant``."""
    slot = encode(start_instant, tz)
    try:
        deleted = (
            db.query(TutorAvailability)
            .filter(TutorAvailability.tutor_id == tutor_id, TutorAvailability.slot_code == slot.code)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            deleted = (
                db.query(TutorAvailability)
                .filter(
                    TutorAvailability.tutor_id == tutor_id,
                    TutorAvailability.day == slot.day,
                    TutorAvailability.pod == slot.pod,
                )
                .delete(synchronize_session=False)
            )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Availability consumption failed for tutor {tutor_id} slot {slot.code}: {e}")
        return False

    if deleted == 0:
        logger.warning(f"No availability row to consume for tutor {tutor_id} slot {slot.code}")
        return False
    logger.info(f"Consumed {deleted} availability row(s) for tutor {tutor_id} slot {slot.code}")
    return True


def add_availability(db: Session, tutor_id: int, slot: Slot) -> TutorAvailability:
    existing = (
        db.query(TutorAvailability)
        .filter(
            TutorAvailability.tutor_id == tutor_id,
            TutorAvailability.day == slot.day,
            TutorAvailability.pod == slot.pod,
        )
        .first()
    )
    if existing:
        if existing.slot_code is None:
            existing.slot_code = slot.code
            db.commit()
            db.refresh(existing)
        return existing
    availability = TutorAvailability(tutor_id=tutor_id, day=slot.day, pod=slot.pod, slot_code=slot.code)
    db.add(availability)
    db.commit()
    db.refresh(availability)
    return availability


def list_availability(db: Session, tutor_id: int) -> list[TutorAvailability]:
    return (
        db.query(TutorAvailability)
        .filter(TutorAvailability.tutor_id == tutor_id)
        .order_by(TutorAvailability.id.asc())
        .all()
    )


def remove_availability(db: Session, availability_id: int, tutor_id: int) -> None:
    availability = (
        db.query(TutorAvailability)
        .filter(TutorAvailability.id == availability_id, TutorAvailability.tutor_id == tutor_id)
        .first()
    )
    if not availability:
        raise errors.not_found(errors.AVAILABILITY_NOT_FOUND)
    db.delete(availability)
    db.commit()
