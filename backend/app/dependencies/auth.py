"""Authentication dependencies for retrieving the current user and guarding cron jobs."""

import hmac

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core import errors
from backend.app.core.security import decode_access_token
from backend.app.core.settings import get_settings
from backend.app.db.session import get_db
from backend.app.models.user import ROLE_TUTOR, User


def get_current_user(db: Session = Depends(get_db), authorization: str | None = Header(default=None)) -> User:
    # Expect Authorization: Bearer <token>
    if not authorization or not authorization.startswith("Bearer "):
        raise errors.unauthenticated()
    token = authorization.split(" ", 1)[1]
    try:
        # Decode and validate JWT to retrieve subject
        payload = decode_access_token(token)
    except ValueError:
        raise errors.unauthenticated()

    user_id = payload.get("sub")
    try:
        user_id_int = int(user_id)
    except (TypeError, ValueError):
        raise errors.unauthenticated()

    user = db.query(User).filter(User.id == user_id_int, User.is_active.is_(True)).first()
    if not user:
        raise errors.unauthenticated()
    return user


def get_current_tutor(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != ROLE_TUTOR:
        raise errors.forbidden(errors.FORBIDDEN_NOT_TUTOR)
    return current_user


def verify_cron_secret(x_cron_secret: str | None = Header(default=None)) -> None:
    """Reject job triggers without the shared secret; no secret configured rejects everything."""
    expected = get_settings().cron_secret
    if not expected or not x_cron_secret or not hmac.compare_digest(x_cron_secret, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="UNAUTHORIZED")
