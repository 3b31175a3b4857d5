import pytest
from fastapi.testclient import TestClient

from backend.app.core.security import decode_access_token
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


def register_user(client: TestClient, email: str, password: str, role: str = "student"):
    return client.post("/auth/register", json={"email": email, "password": password, "role": role})


def test_tutor_login_token_carries_user_id():
    client = TestClient(app)
    user_id = register_user(client, "tutor@example.com", "secret", role="tutor").json()["id"]
    response = client.post("/auth/login", json={"email": "tutor@example.com", "password": "secret"})
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert decode_access_token(data["access_token"])["sub"] == str(user_id)


def test_wrong_password_or_unknown_email_returns_400():
    client = TestClient(app)
    register_user(client, "student@example.com", "secret")
    assert client.post("/auth/login", json={"email": "student@example.com", "password": "bad"}).status_code == 400
    assert client.post("/auth/login", json={"email": "nosuch@example.com", "password": "secret"}).status_code == 400


def test_deactivated_user_cannot_log_in():
    client = TestClient(app)
    register_user(client, "gone@example.com", "secret", role="tutor")
    with SessionLocal() as db:
        user = db.query(User).filter(User.email == "gone@example.com").first()
        user.is_active = False
        db.commit()
    response = client.post("/auth/login", json={"email": "gone@example.com", "password": "secret"})
    assert response.status_code == 400
    assert response.json()["detail"] == "User is inactive"


def test_account_without_password_hash_returns_400():
    with SessionLocal() as db:
        db.add(User(email="seeded@example.com", role="tutor"))
        db.commit()
    client = TestClient(app)
    response = client.post("/auth/login", json={"email": "seeded@example.com", "password": "secret"})
    assert response.status_code == 400
