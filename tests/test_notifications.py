import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.user import User
from backend.app.services.notifications import record_notifications


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str) -> str:
    client.post("/auth/register", json={"email": email, "password": password})
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def seed_inbox(email: str, count: int) -> list[int]:
    with SessionLocal() as db:
        user = db.query(User).filter(User.email == email).one()
        rows = record_notifications(
            db,
            [{"user_id": user.id, "kind": "session_created_student", "payload": {"n": n}} for n in range(count)],
        )
        return [row.id for row in rows]


def test_inbox_lists_newest_first():
    client = TestClient(app)
    token = register_and_login(client, "inbox@example.com", "secret")
    seed_inbox("inbox@example.com", 3)
    response = client.get("/notifications", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert [row["payload"]["n"] for row in response.json()] == [2, 1, 0]


def test_mark_read_and_seen():
    client = TestClient(app)
    token = register_and_login(client, "reader@example.com", "secret")
    headers = {"Authorization": f"Bearer {token}"}
    ids = seed_inbox("reader@example.com", 2)

    read = client.patch(f"/notifications/{ids[0]}/read", headers=headers)
    assert read.status_code == 200
    assert read.json()["read_at"] is not None

    seen = client.post("/notifications/seen", json={"ids": ids}, headers=headers)
    assert seen.json() == {"ok": True, "updated": 2}
    again = client.post("/notifications/seen", json={"ids": ids}, headers=headers)
    assert again.json()["updated"] == 0


def test_cannot_touch_another_users_notification():
    client = TestClient(app)
    register_and_login(client, "owner@example.com", "secret")
    intruder = register_and_login(client, "intruder@example.com", "secret")
    ids = seed_inbox("owner@example.com", 1)
    headers = {"Authorization": f"Bearer {intruder}"}

    response = client.patch(f"/notifications/{ids[0]}/read", headers=headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "NOTIFICATION_NOT_FOUND"
    assert client.get("/notifications", headers=headers).json() == []
    assert client.post("/notifications/seen", json={"ids": []}, headers=headers).status_code == 422
