"""Tutoring request endpoints: create a request and see its matches."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.core import errors
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.models.request import MODE_ONLINE, REQUEST_OPEN, TutoringRequest
from backend.app.models.user import User
from backend.app.schemas.match import MatchRead
from backend.app.schemas.request import RequestCreate, RequestCreateResponse, RequestRead
from backend.app.services import matches
from backend.app.services.matching import Matcher, get_matcher
from backend.app.services.slots import normalize_slots, subject_slug

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["requests"])


def _get_owned_request(db: Session, request_id: int, user_id: int) -> TutoringRequest:
    request = db.query(TutoringRequest).filter(TutoringRequest.id == request_id).first()
    if not request:
        raise errors.not_found(errors.REQUEST_NOT_FOUND)
    if request.student_id != user_id:
        raise errors.forbidden(errors.FORBIDDEN)
    return request


@router.post("/", response_model=RequestCreateResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    request_in: RequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    matcher: Matcher = Depends(get_matcher),
):
    slots = normalize_slots(
        [slot.model_dump() for slot in request_in.slots] if request_in.slots else None,
        request_in.time_slots,
    )
    if not slots:
        raise errors.bad_request(errors.INVALID_SLOT)

    subject = request_in.subject.strip()
    request = TutoringRequest(
        student_id=current_user.id,
        subject=subject,
        subject_slug=subject_slug(subject),
        mode=MODE_ONLINE,
        status=REQUEST_OPEN,
        slots=[slot.as_dict() for slot in slots],
        request_meta=request_in.request_meta,
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    # The booking flow continues with zero candidates if matching fails
    try:
        tutors = matcher(db, request.id)
    except Exception as e:
        db.rollback()
        logger.warning(f"Matching failed for request {request.id}: {e}")
        db.refresh(request)
        return {"request": request, "tutors": [], "warn": str(e) or "MATCHING_FAILED"}

    db.refresh(request)
    return {"request": request, "tutors": tutors or []}


@router.get("/", response_model=list[RequestRead])
async def list_requests(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return (
        db.query(TutoringRequest)
        .filter(TutoringRequest.student_id == current_user.id)
        .order_by(TutoringRequest.created_at.desc(), TutoringRequest.id.desc())
        .all()
    )


@router.get("/{request_id}/matches", response_model=list[MatchRead])
async def list_request_matches(request_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    request = _get_owned_request(db, request_id, current_user.id)
    return matches.list_for_request(db, request.id)
