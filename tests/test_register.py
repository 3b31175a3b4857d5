import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.user import User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def test_student_registration_defaults():
    client = TestClient(app)
    response = client.post("/auth/register", json={"email": "sam@example.com", "password": "secret", "full_name": "Sam Student"})
    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "student"
    assert data["subjects"] == []
    assert data["whatsapp_to"] is None
    assert "hashed_password" not in data


def test_tutor_registration_slugs_subjects_and_keeps_contact():
    client = TestClient(app)
    response = client.post(
        "/auth/register",
        json={
            "email": "tess@example.com",
            "password": "secret",
            "role": "tutor",
            "whatsapp_to": "+33612345678",
            "subjects": ["Mathématiques", " Physique ", ""],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "tutor"
    assert data["whatsapp_to"] == "+33612345678"
    assert data["subjects"] == ["mathematiques", "physique"]

    with SessionLocal() as db:
        user = db.query(User).filter(User.email == "tess@example.com").first()
        assert user.hashed_password and user.hashed_password != "secret"


def test_unknown_role_rejected():
    client = TestClient(app)
    response = client.post("/auth/register", json={"email": "admin@example.com", "password": "secret", "role": "admin"})
    assert response.status_code == 422


def test_duplicate_email_returns_400():
    client = TestClient(app)
    payload = {"email": "dup@example.com", "password": "secret", "role": "tutor"}
    assert client.post("/auth/register", json=payload).status_code == 200
    second = client.post("/auth/register", json={**payload, "role": "student"})
    assert second.status_code == 400
