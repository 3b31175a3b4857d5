"""Tutor availability endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_tutor
from backend.app.models.user import User
from backend.app.schemas.availability import AvailabilityCreate, AvailabilityRead
from backend.app.services import availability
from backend.app.services.slots import Slot

router = APIRouter(prefix="/availability", tags=["availability"])


@router.post("/", response_model=AvailabilityRead, status_code=status.HTTP_201_CREATED)
async def add_availability(
    availability_in: AvailabilityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_tutor),
):
    return availability.add_availability(db, current_user.id, Slot(availability_in.day, availability_in.pod))


@router.get("/", response_model=list[AvailabilityRead])
async def list_availability(db: Session = Depends(get_db), current_user: User = Depends(get_current_tutor)):
    return availability.list_availability(db, current_user.id)


@router.delete("/{availability_id}")
async def delete_availability(
    availability_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_tutor),
):
    availability.remove_availability(db, availability_id, current_user.id)
    return {"status": "deleted", "id": availability_id}
