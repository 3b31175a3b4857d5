from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.user import User  # noqa: F401
from backend.app.models.request import TutoringRequest  # noqa: F401
from backend.app.models.match import Match  # noqa: F401
from backend.app.models.session import Session  # noqa: F401
from backend.app.models.availability import TutorAvailability  # noqa: F401
from backend.app.models.outbox import OutboxEvent  # noqa: F401
from backend.app.models.reminder_log import SessionReminderLog  # noqa: F401
from backend.app.models.notification import Notification  # noqa: F401
from backend.app.models.rating import SessionRating  # noqa: F401
