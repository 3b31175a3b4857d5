from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from backend.app.core.settings import get_settings
from backend.app.core.time import utc_now
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.outbox import OutboxEvent
from backend.app.models.request import TutoringRequest
from backend.app.models.session import Session as SessionModel
from backend.app.models.user import User
from backend.app.services.matches import create_accepted
from backend.app.services.notifier import DeliveryResult, get_notifier

CRON_SECRET = "test-cron-secret"


class RecordingNotifier:
    def __init__(self):
        self.chats = []
        self.reminders = []

    def send_chat(self, user, body):
        self.chats.append(user.id)
        return DeliveryResult(ok=True, mocked=True)

    def notify_user(self, user, subject, html, text):
        self.reminders.append(user.email)
        return True


@pytest.fixture(autouse=True)
def setup_db():
    settings = get_settings()
    previous = settings.cron_secret
    settings.cron_secret = CRON_SECRET
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    settings.cron_secret = previous
    app.dependency_overrides.clear()


@pytest.fixture
def notifier():
    recorder = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recorder
    return recorder


@pytest.mark.parametrize("path", ["/jobs/outbox", "/jobs/session-reminders", "/jobs/session-reminders/next-day"])
def test_jobs_require_cron_secret(path, notifier):
    client = TestClient(app)
    assert client.get(path).status_code == 401
    assert client.post(path, headers={"X-Cron-Secret": "wrong"}).status_code == 401
    assert client.get(path, headers={"X-Cron-Secret": CRON_SECRET}).status_code == 200
    assert client.post(path, headers={"X-Cron-Secret": CRON_SECRET}).status_code == 200


def test_jobs_rejected_when_no_secret_configured(notifier):
    get_settings().cron_secret = ""
    client = TestClient(app)
    assert client.get("/jobs/outbox", headers={"X-Cron-Secret": ""}).status_code == 401


def test_outbox_job_drains_events(notifier):
    with SessionLocal() as db:
        db.add(OutboxEvent(topic="unknown.topic", payload={}))
        db.commit()
    client = TestClient(app)
    response = client.post("/jobs/outbox", headers={"X-Cron-Secret": CRON_SECRET})
    assert response.json() == {"ok": True, "selected": 1, "processed": 1, "failed": 0}


def test_reminder_job_reminds_upcoming_session(notifier):
    with SessionLocal() as db:
        student = User(email="s@example.com", hashed_password="x")
        tutor = User(email="t@example.com", hashed_password="x", role="tutor")
        db.add_all([student, tutor])
        db.commit()
        request = TutoringRequest(student_id=student.id, subject="Maths", subject_slug="maths", slots=[], status="matched")
        db.add(request)
        db.commit()
        match = create_accepted(db, request.id, tutor.id, "online")
        starts_at = utc_now() + timedelta(minutes=15)
        db.add(
            SessionModel(
                request_id=request.id,
                match_id=match.id,
                student_id=student.id,
                tutor_id=tutor.id,
                starts_at=starts_at,
                ends_at=starts_at + timedelta(hours=1),
                mode="online",
            )
        )
        db.commit()

    client = TestClient(app)
    first = client.post("/jobs/session-reminders", headers={"X-Cron-Secret": CRON_SECRET})
    assert first.json() == {"ok": True, "processed": 1, "reminded": 1, "skipped": 0}
    assert sorted(notifier.reminders) == ["s@example.com", "t@example.com"]
    second = client.post("/jobs/session-reminders", headers={"X-Cron-Secret": CRON_SECRET})
    assert second.json()["processed"] == 0
