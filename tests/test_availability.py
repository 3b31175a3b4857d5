from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.availability import TutorAvailability
from backend.app.models.user import User
from backend.app.services.availability import consume

UTC = timezone.utc
WEDNESDAY_EVENING = datetime(2030, 1, 2, 19, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str, role: str = "student") -> str:
    client.post("/auth/register", json={"email": email, "password": password, "role": role})
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def make_tutor(db, email: str) -> User:
    tutor = User(email=email, hashed_password="x", role="tutor", subjects=["maths"])
    db.add(tutor)
    db.commit()
    db.refresh(tutor)
    return tutor


def add_row(db, tutor_id: int, day: str, pod: str, code: str | None):
    db.add(TutorAvailability(tutor_id=tutor_id, day=day, pod=pod, slot_code=code))
    db.commit()


def remaining(db, tutor_id: int) -> list[str]:
    rows = db.query(TutorAvailability).filter(TutorAvailability.tutor_id == tutor_id).all()
    return sorted(f"{row.day}:{row.pod}" for row in rows)


def test_consume_deletes_exact_slot_code():
    with SessionLocal() as db:
        tutor = make_tutor(db, "t1@example.com")
        add_row(db, tutor.id, "wed", "evening", "wed:evening")
        add_row(db, tutor.id, "wed", "morning", "wed:morning")
        assert consume(db, tutor.id, WEDNESDAY_EVENING, UTC) is True
        assert remaining(db, tutor.id) == ["wed:morning"]


def test_consume_falls_back_to_day_and_pod_for_legacy_rows():
    with SessionLocal() as db:
        tutor = make_tutor(db, "t2@example.com")
        add_row(db, tutor.id, "wed", "evening", None)
        assert consume(db, tutor.id, WEDNESDAY_EVENING, UTC) is True
        assert remaining(db, tutor.id) == []


def test_consume_without_matching_row_is_not_an_error():
    with SessionLocal() as db:
        tutor = make_tutor(db, "t3@example.com")
        add_row(db, tutor.id, "thu", "evening", "thu:evening")
        assert consume(db, tutor.id, WEDNESDAY_EVENING, UTC) is False
        assert remaining(db, tutor.id) == ["thu:evening"]


def test_consume_only_touches_the_given_tutor():
    with SessionLocal() as db:
        tutor = make_tutor(db, "t4@example.com")
        other = make_tutor(db, "t5@example.com")
        add_row(db, tutor.id, "wed", "evening", "wed:evening")
        add_row(db, other.id, "wed", "evening", "wed:evening")
        consume(db, tutor.id, WEDNESDAY_EVENING, UTC)
        assert remaining(db, other.id) == ["wed:evening"]


def test_tutor_adds_lists_and_deletes_availability():
    client = TestClient(app)
    token = register_and_login(client, "tutor@example.com", "secret", role="tutor")
    headers = {"Authorization": f"Bearer {token}"}

    first = client.post("/availability", json={"day": "wed", "pod": "evening"}, headers=headers)
    assert first.status_code == 201
    assert first.json()["slot_code"] == "wed:evening"
    again = client.post("/availability", json={"day": "wed", "pod": "evening"}, headers=headers)
    assert again.json()["id"] == first.json()["id"]

    listed = client.get("/availability", headers=headers)
    assert [row["slot_code"] for row in listed.json()] == ["wed:evening"]

    deleted = client.delete(f"/availability/{first.json()['id']}", headers=headers)
    assert deleted.status_code == 200
    assert client.get("/availability", headers=headers).json() == []
    missing = client.delete(f"/availability/{first.json()['id']}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "AVAILABILITY_NOT_FOUND"


def test_student_cannot_manage_availability():
    client = TestClient(app)
    token = register_and_login(client, "student@example.com", "secret")
    response = client.post(
        "/availability", json={"day": "wed", "pod": "evening"}, headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "FORBIDDEN_NOT_TUTOR"


def test_invalid_pod_rejected():
    client = TestClient(app)
    token = register_and_login(client, "tutor2@example.com", "secret", role="tutor")
    response = client.post(
        "/availability", json={"day": "wed", "pod": "night"}, headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 422
