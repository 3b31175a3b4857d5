"""Match lifecycle: proposed -> accepted | declined | expired.

Every transition is a single guarded UPDATE on ``(id, status)``. A rowcount of
zero means another actor decided first; callers re-read the row and branch on
what they find instead of treating it as an error.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased, joinedload

from backend.app.core import errors
from backend.app.core.time import utc_now
from backend.app.models.match import MATCH_ACCEPTED, MATCH_DECLINED, MATCH_EXPIRED, MATCH_PROPOSED, Match
from backend.app.models.outbox import TOPIC_MATCH_PROPOSED
from backend.app.services import outbox

logger = logging.getLogger(__name__)


def get_match_with_request(db: Session, match_id: int) -> Match:
    match = db.query(Match).options(joinedload(Match.request)).filter(Match.id == match_id).first()
    if not match:
        raise errors.not_found(errors.MATCH_NOT_FOUND)
    return match


def reload(db: Session, match: Match) -> Match:
    db.refresh(match)
    return match


def _no_accepted_sibling(request_id: int):
    sibling = aliased(Match)
    return ~select(sibling.id).where(sibling.request_id == request_id, sibling.status == MATCH_ACCEPTED).exists()


def transition(db: Session, match_id: int, from_status: str, to_status: str, *criteria) -> bool:
    """Compare-and-set the match status; True only if this call moved it."""
    try:
        updated = (
            db.query(Match)
            .filter(Match.id == match_id, Match.status == from_status, *criteria)
            .update({Match.status: to_status, Match.updated_at: utc_now()}, synchronize_session=False)
        )
        db.commit()
    except IntegrityError:
        # The one-accepted-per-request index caught a concurrent acceptance
        db.rollback()
        logger.info(f"Match {match_id} {from_status}->{to_status} rejected by constraint")
        return False
    if updated == 0:
        logger.info(f"Match {match_id} {from_status}->{to_status} lost: status already changed")
    return updated == 1


def accept_proposed(db: Session, match: Match) -> bool:
    return transition(db, match.id, MATCH_PROPOSED, MATCH_ACCEPTED, _no_accepted_sibling(match.request_id))


def expire_match(db: Session, match_id: int) -> bool:
    return transition(db, match_id, MATCH_PROPOSED, MATCH_EXPIRED)


def decline_match(db: Session, match_id: int, actor_id: int) -> tuple[Match, str | None]:
    match = get_match_with_request(db, match_id)
    if match.tutor_id != actor_id:
        raise errors.forbidden(errors.FORBIDDEN_NOT_TUTOR)
    if match.status == MATCH_DECLINED:
        return match, errors.ALREADY_DECLINED
    if match.status != MATCH_PROPOSED:
        raise errors.conflict(errors.INVALID_STATE)

    if not transition(db, match.id, MATCH_PROPOSED, MATCH_DECLINED):
        match = reload(db, match)
        if match.status == MATCH_DECLINED:
            return match, errors.ALREADY_DECLINED
        raise errors.conflict(errors.INVALID_STATE)
    return reload(db, match), None


def find_match(db: Session, request_id: int, tutor_id: int) -> Match | None:
    return db.query(Match).filter(Match.request_id == request_id, Match.tutor_id == tutor_id).first()


def create_accepted(db: Session, request_id: int, tutor_id: int, mode: str) -> Match | None:
    """Insert a match directly in ``accepted``; None when a concurrent insert won."""
    match = Match(request_id=request_id, tutor_id=tutor_id, status=MATCH_ACCEPTED, mode=mode)
    db.add(match)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Accepted match insert for request {request_id} tutor {tutor_id} hit a constraint")
        return None
    db.refresh(match)
    return match


def create_proposed(db: Session, request_id: int, tutor_id: int, mode: str) -> Match | None:
    """Insert a proposal and its match.proposed event together; None when the pair exists."""
    match = Match(request_id=request_id, tutor_id=tutor_id, status=MATCH_PROPOSED, mode=mode)
    db.add(match)
    try:
        db.flush()
        outbox.enqueue(db, TOPIC_MATCH_PROPOSED, {"match_id": match.id, "request_id": request_id}, commit=False)
        db.commit()
    except IntegrityError:
        db.rollback()
        return None
    except Exception:
        db.rollback()
        raise
    db.refresh(match)
    return match


def list_for_request(db: Session, request_id: int) -> list[Match]:
    return db.query(Match).filter(Match.request_id == request_id).order_by(Match.id.asc()).all()


def list_for_tutor(db: Session, tutor_id: int, status: str | None = None) -> list[Match]:
    query = db.query(Match).options(joinedload(Match.request)).filter(Match.tutor_id == tutor_id)
    if status is not None:
        query = query.filter(Match.status == status)
    return query.order_by(Match.created_at.desc(), Match.id.desc()).all()
