"""Session endpoints for participants: list, read, adjust, rate."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.models.user import User
from backend.app.schemas.rating import RatingCreate, RatingRead
from backend.app.schemas.session import SessionRead, SessionUpdate
from backend.app.services import sessions
from backend.app.services.ratings import rate_session

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("/", response_model=list[SessionRead])
async def list_sessions(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return sessions.list_sessions(db, current_user.id)


@router.get("/{session_id}", response_model=SessionRead)
async def get_session(session_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return sessions.get_participant_session(db, session_id, current_user.id)


@router.patch("/{session_id}", response_model=SessionRead)
async def update_session(
    session_id: int,
    session_in: SessionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return sessions.update_session(
        db,
        session_id,
        current_user.id,
        starts_at=session_in.starts_at,
        meeting_link=str(session_in.meeting_link) if session_in.meeting_link is not None else None,
        mode=session_in.mode,
    )


@router.post("/{session_id}/rate", response_model=RatingRead)
async def rate(
    session_id: int,
    rating_in: RatingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return rate_session(db, session_id, current_user.id, rating_in.rating, rating_in.comment)
