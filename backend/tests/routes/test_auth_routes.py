from app.core.enums import UserStatus
from tests.helpers import MEMBER_PASSWORD

BASE = "/api/v1/auth"


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_sign_up_creates_pending_account(client):
    response = client.post(
        f"{BASE}/sign-up",
        json={"name": "Dana", "email": "Dana@Example.com", "password": "Str0ngPass!"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "dana@example.com"
    assert body["user"]["status"] == "pending"
    assert body["user"]["role"] == "client"

    me = client.get("/api/v1/users/me", headers=_bearer(body["access_token"]))
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]

    booking = client.get("/api/v1/workout-sessions/my", headers=_bearer(body["access_token"]))
    assert booking.status_code == 403


def test_sign_up_duplicate_email_is_409(client, client_user):
    response = client.post(
        f"{BASE}/sign-up",
        json={"name": "Alice", "email": "alice@example.com", "password": "Str0ngPass!"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_ALREADY_REGISTERED"


def test_sign_up_rejects_short_password_and_role_field(client):
    short = client.post(
        f"{BASE}/sign-up", json={"name": "Dana", "email": "dana@example.com", "password": "short"}
    )
    escalated = client.post(
        f"{BASE}/sign-up",
        json={
            "name": "Dana",
            "email": "dana@example.com",
            "password": "Str0ngPass!",
            "role": "admin",
        },
    )

    assert short.status_code == 422
    assert escalated.status_code == 422


def test_sign_in_issues_working_token(client, client_user):
    response = client.post(
        f"{BASE}/sign-in", json={"email": "alice@example.com", "password": MEMBER_PASSWORD}
    )

    assert response.status_code == 200
    token = response.json()["access_token"]
    assert client.get("/api/v1/workout-sessions/my", headers=_bearer(token)).status_code == 200


def test_sign_in_wrong_password_is_401(client, client_user):
    response = client.post(
        f"{BASE}/sign-in", json={"email": "alice@example.com", "password": "nope"}
    )
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_sign_in_pending_client_is_403(client, make_user):
    pending = make_user(status=UserStatus.PENDING)

    response = client.post(
        f"{BASE}/sign-in", json={"email": pending.email, "password": MEMBER_PASSWORD}
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Your account is pending admin approval"
