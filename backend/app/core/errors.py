"""Stable, machine-readable error codes for the booking flows.

Clients branch on ``detail`` to render state, so the codes below never change
meaning. ``retryable`` tells callers whether re-issuing the same idempotent
operation after re-reading state can succeed.
"""

from fastapi import HTTPException, status

UNAUTHENTICATED = "UNAUTHENTICATED"
FORBIDDEN = "FORBIDDEN"
FORBIDDEN_NOT_STUDENT = "FORBIDDEN_NOT_STUDENT"
FORBIDDEN_NOT_TUTOR = "FORBIDDEN_NOT_TUTOR"
MATCH_NOT_FOUND = "MATCH_NOT_FOUND"
REQUEST_NOT_FOUND = "REQUEST_NOT_FOUND"
SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
TUTOR_NOT_FOUND = "TUTOR_NOT_FOUND"
AVAILABILITY_NOT_FOUND = "AVAILABILITY_NOT_FOUND"
NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"
INVALID_STATE = "INVALID_STATE"
INVALID_MATCH_STATE = "INVALID_MATCH_STATE"
CONFLICT_ALREADY_ACCEPTED = "CONFLICT_ALREADY_ACCEPTED"
SESSION_NOT_FINISHED_YET = "SESSION_NOT_FINISHED_YET"
INVALID_SLOT = "INVALID_SLOT"
SESSION_INSERT_FAILED = "SESSION_INSERT_FAILED"
SERVER_ERROR = "SERVER_ERROR"

# Warnings returned alongside a successful, idempotent response
ALREADY_ACCEPTED = "ALREADY_ACCEPTED"
ALREADY_DECLINED = "ALREADY_DECLINED"


class BookingError(HTTPException):
    """HTTPException carrying a stable error code as its detail."""

    def __init__(self, status_code: int, code: str, retryable: bool = True):
        super().__init__(status_code=status_code, detail=code)
        self.code = code
        self.retryable = retryable


def unauthenticated() -> BookingError:
    return BookingError(status.HTTP_401_UNAUTHORIZED, UNAUTHENTICATED)


def forbidden(code: str = FORBIDDEN) -> BookingError:
    return BookingError(status.HTTP_403_FORBIDDEN, code, retryable=False)


def not_found(code: str) -> BookingError:
    return BookingError(status.HTTP_404_NOT_FOUND, code, retryable=False)


def conflict(code: str) -> BookingError:
    return BookingError(status.HTTP_409_CONFLICT, code)


def bad_request(code: str) -> BookingError:
    return BookingError(status.HTTP_400_BAD_REQUEST, code, retryable=False)


def server_error(code: str = SERVER_ERROR) -> BookingError:
    return BookingError(status.HTTP_500_INTERNAL_SERVER_ERROR, code)
