"""ORM models; importing the package registers every mapper."""

from backend.app.models.user import User
from backend.app.models.request import TutoringRequest
from backend.app.models.match import Match
from backend.app.models.session import Session
from backend.app.models.availability import TutorAvailability
from backend.app.models.outbox import OutboxEvent
from backend.app.models.reminder_log import SessionReminderLog
from backend.app.models.notification import Notification
from backend.app.models.rating import SessionRating

__all__ = [
    "User",
    "TutoringRequest",
    "Match",
    "Session",
    "TutorAvailability",
    "OutboxEvent",
    "SessionReminderLog",
    "Notification",
    "SessionRating",
]
