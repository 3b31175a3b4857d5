"""Direct reservation: a student books a tutor without waiting for a proposal."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.models.user import User
from backend.app.schemas.session import BookingResponse, ReservationCreate
from backend.app.services import booking
from backend.app.services.notifier import Notifier, get_notifier

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("/", response_model=BookingResponse)
def create_reservation(
    reservation_in: ReservationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    result = booking.reserve_tutor(
        db,
        request_id=reservation_in.request_id,
        tutor_id=reservation_in.tutor_id,
        actor_id=current_user.id,
        starts_at=reservation_in.starts_at,
        notifier=notifier,
    )
    return {"match_id": result.match.id, "session": result.session, "created": result.created}
