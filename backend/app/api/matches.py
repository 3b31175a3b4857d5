"""Match endpoints: tutor inbox, student acceptance, tutor decline."""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_tutor, get_current_user
from backend.app.models.user import User
from backend.app.schemas.match import MatchDeclineResponse, MatchRead
from backend.app.schemas.session import AcceptMatchBody, BookingResponse
from backend.app.services import booking, matches

router = APIRouter(prefix="/matches", tags=["matches"])


@router.get("/", response_model=list[MatchRead])
async def list_my_matches(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_tutor),
):
    return matches.list_for_tutor(db, current_user.id, status)


@router.post("/{match_id}/accept", response_model=BookingResponse)
def accept_match(
    match_id: int,
    body: Optional[AcceptMatchBody] = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    body = body or AcceptMatchBody()
    result = booking.accept_match(
        db,
        match_id=match_id,
        actor_id=current_user.id,
        starts_at=body.starts_at,
        duration_minutes=body.duration_minutes,
    )
    return {
        "match_id": result.match.id,
        "session": result.session,
        "created": result.created,
        "warning": result.warning,
    }


@router.post("/{match_id}/decline", response_model=MatchDeclineResponse)
def decline_match(match_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    match, warning = matches.decline_match(db, match_id, current_user.id)
    return {"match": match, "warning": warning}
