import pytest

from conftest import PASSWORD
from yuthukama.api.deps import get_email_dispatcher
from yuthukama.main import app
from yuthukama.models.user import User
from yuthukama.services.mailer import EmailDeliveryError


class FakeMailer:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send(self, to, subject, html):
        if self.fail:
            raise EmailDeliveryError("Email could not be sent")
        self.sent.append((to, subject, html))
        return "<id@test>"


@pytest.fixture()
def mailer(client):
    fake = FakeMailer()
    app.dependency_overrides[get_email_dispatcher] = lambda: fake
    return fake


def test_register_login_check(client):
    resp = client.post(
        "/api/auth/register",
        json={"username": "alice", "email": "Alice@Test.com", "password": PASSWORD},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "alice@test.com"
    assert body["token"]

    resp = client.post("/api/auth/login", json={"email": "alice@test.com", "password": PASSWORD})
    assert resp.status_code == 200
    token = resp.json()["token"]

    for method in ("get", "post"):
        resp = getattr(client, method)("/api/auth/check", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["username"] == "alice"
        assert "password_hash" not in resp.json()


def test_duplicate_registration(client, register):
    register("alice")
    resp = client.post(
        "/api/auth/register",
        json={"username": "alice", "email": "other@test.com", "password": PASSWORD},
    )
    assert resp.status_code == 400
    assert resp.json() == {"message": "User already exists"}


def test_registration_validation(client):
    resp = client.post(
        "/api/auth/register",
        json={"username": "a!", "email": "not-an-email", "password": "short"},
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation failed"
    assert {e["field"] for e in body["errors"]} == {"username", "email", "password"}


def test_bad_login(client, register):
    register("alice")
    resp = client.post("/api/auth/login", json={"email": "alice@test.com", "password": "Wrong1234"})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid credentials"}


def test_login_throttled_after_repeated_failures(client, register):
    register("alice")
    for _ in range(5):
        client.post("/api/auth/login", json={"email": "alice@test.com", "password": "Wrong1234"})

    resp = client.post("/api/auth/login", json={"email": "alice@test.com", "password": PASSWORD})
    assert resp.status_code == 429


def test_check_without_token(client):
    resp = client.post("/api/auth/check")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_logout_needs_no_token(client):
    resp = client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logout successful"}


def test_password_reset_flow(client, register, mailer):
    register("alice")

    resp = client.post("/api/auth/forgot-password", json={"email": "alice@test.com"})
    assert resp.status_code == 200
    to, subject, html = mailer.sent[0]
    assert to == "alice@test.com"
    token = html.split("/reset-password/")[1].split('"')[0]

    new_password = "BrandNew456"
    resp = client.post(
        f"/api/auth/reset-password/{token}",
        json={"password": new_password, "confirm_password": new_password},
    )
    assert resp.status_code == 200

    assert client.post("/api/auth/login", json={"email": "alice@test.com", "password": new_password}).status_code == 200
    assert client.post("/api/auth/login", json={"email": "alice@test.com", "password": PASSWORD}).status_code == 401

    # tokens are single use
    resp = client.post(
        f"/api/auth/reset-password/{token}",
        json={"password": new_password, "confirm_password": new_password},
    )
    assert resp.status_code == 400


def test_forgot_password_unknown_email_gives_same_answer(client, mailer):
    resp = client.post("/api/auth/forgot-password", json={"email": "ghost@test.com"})
    assert resp.status_code == 200
    assert mailer.sent == []


def test_forgot_password_delivery_failure_clears_token(client, register, mailer, db):
    register("alice")
    mailer.fail = True

    resp = client.post("/api/auth/forgot-password", json={"email": "alice@test.com"})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Email could not be sent"}

    user = db.query(User).filter(User.email == "alice@test.com").one()
    assert user.reset_token_hash is None


def test_reset_password_mismatch(client):
    resp = client.post(
        "/api/auth/reset-password/whatever",
        json={"password": "BrandNew456", "confirm_password": "Different456"},
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation failed"
