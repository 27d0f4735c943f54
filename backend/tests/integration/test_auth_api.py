"""HTTP tests for registration, login, sessions and the current user."""

from __future__ import annotations

import pytest

from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.utils import bearer
from userauth.models.access_token import AccessToken
from userauth.models.user import User

API = "/api/auth"


def _register(client, **overrides):
    payload = {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "password": "password123",
        "password_confirmation": "password123",
    }
    payload.update(overrides)
    return client.post(f"{API}/register", json=payload)


def _login(client, email, password=DEFAULT_PASSWORD):
    return client.post(f"{API}/login", json={"email": email, "password": password})


# --------------------------------------------------------------------------- #
# Register
# --------------------------------------------------------------------------- #


def test_register_returns_token_and_user(client, notifier, session):
    resp = _register(client)

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["token_type"] == "Bearer"
    assert body["token"]
    assert body["user"]["email"] == "jane@example.com"
    assert body["user"]["role"] == "user"
    assert body["user"]["email_verified_at"] is None
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]

    # The returned token works straight away
    me = client.get(f"{API}/user", headers=bearer(body["token"]))
    assert me.status_code == 200
    assert me.get_json()["id"] == body["user"]["id"]

    assert session.query(AccessToken).count() == 1


def test_register_validation_errors(client, notifier, session):
    resp = _register(client, name="", email="nope", password="short", password_confirmation="x")

    assert resp.status_code == 422
    assert resp.mimetype == "application/problem+json"
    errors = resp.get_json()["errors"]
    assert set(errors) == {"name", "email", "password"}
    assert session.query(User).count() == 0
    assert notifier.sent == []


def test_register_with_null_role_defaults_to_user(client, notifier):
    resp = _register(client, role=None)

    assert resp.status_code == 201
    assert resp.get_json()["user"]["role"] == "user"


def test_register_duplicate_email(client, notifier):
    UserFactory(email="jane@example.com")

    resp = _register(client)

    assert resp.status_code == 422
    assert resp.get_json()["errors"] == {"email": ["The email has already been taken."]}


def test_register_ignores_non_json_body(client, notifier):
    resp = client.post(f"{API}/register", data="name=Jane", content_type="text/plain")
    assert resp.status_code == 422
    assert "email" in resp.get_json()["errors"]


def test_register_survives_notifier_failure(client, monkeypatch, session):
    from userauth.core import collaborators

    def _broken(user, link):
        raise ConnectionError("relay down")

    monkeypatch.setattr(collaborators.current().notifier, "send_verification", _broken)

    resp = _register(client)

    assert resp.status_code == 201
    assert session.query(User).count() == 1


# --------------------------------------------------------------------------- #
# Login
# --------------------------------------------------------------------------- #


def test_login_issues_new_token(client):
    user = UserFactory(email="login@example.com")

    resp = _login(client, "login@example.com")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["user"]["id"] == user.id
    assert client.get(f"{API}/user", headers=bearer(body["token"])).status_code == 200


def test_each_login_is_a_separate_session(client, session):
    UserFactory(email="login@example.com")

    first = _login(client, "login@example.com").get_json()["token"]
    second = _login(client, "login@example.com").get_json()["token"]

    assert first != second
    assert session.query(AccessToken).count() == 2


@pytest.mark.parametrize(
    "email,password",
    [("login@example.com", "wrong-password"), ("ghost@example.com", DEFAULT_PASSWORD)],
)
def test_login_rejects_bad_credentials(client, email, password):
    UserFactory(email="login@example.com")

    resp = _login(client, email, password)

    assert resp.status_code == 422
    assert resp.get_json()["errors"] == {"email": ["The provided credentials are incorrect."]}


def test_login_email_is_case_sensitive(client):
    UserFactory(email="login@example.com")
    assert _login(client, "Login@example.com").status_code == 422


# --------------------------------------------------------------------------- #
# Current user
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer"}, {"Authorization": "Basic abc"}, bearer("not-a-token")],
)
def test_current_user_requires_valid_token(client, headers):
    resp = client.get(f"{API}/user", headers=headers)

    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"
    assert resp.get_json()["code"] == "unauthenticated"


def test_update_profile(client, issue_token):
    user = UserFactory(name="Old Name")
    token = issue_token(user)

    resp = client.put(
        f"{API}/user", json={"name": "New Name", "role": "admin"}, headers=bearer(token)
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["name"] == "New Name"
    assert body["role"] == "user"


def test_update_password_then_login(client, issue_token):
    user = UserFactory(email="pw@example.com")
    token = issue_token(user)

    resp = client.put(
        f"{API}/user",
        json={"password": "changed-pass", "password_confirmation": "changed-pass"},
        headers=bearer(token),
    )

    assert resp.status_code == 200
    assert _login(client, "pw@example.com").status_code == 422
    assert _login(client, "pw@example.com", "changed-pass").status_code == 200


def test_update_profile_taken_email(client, issue_token):
    UserFactory(email="taken@example.com")
    token = issue_token(UserFactory())

    resp = client.put(f"{API}/user", json={"email": "taken@example.com"}, headers=bearer(token))

    assert resp.status_code == 422
    assert "email" in resp.get_json()["errors"]


# --------------------------------------------------------------------------- #
# Logout / refresh
# --------------------------------------------------------------------------- #


def test_logout_revokes_current_token_only(client, issue_token):
    user = UserFactory()
    current, other = issue_token(user), issue_token(user)

    resp = client.post(f"{API}/logout", headers=bearer(current))

    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Logged out"}
    assert client.get(f"{API}/user", headers=bearer(current)).status_code == 401
    assert client.get(f"{API}/user", headers=bearer(other)).status_code == 200


def test_logout_all_sessions(client, issue_token):
    user = UserFactory()
    current, other = issue_token(user), issue_token(user)
    bystander = issue_token(UserFactory())

    resp = client.post(f"{API}/logout", json={"all_sessions": True}, headers=bearer(current))

    assert resp.status_code == 200
    assert client.get(f"{API}/user", headers=bearer(other)).status_code == 401
    assert client.get(f"{API}/user", headers=bearer(bystander)).status_code == 200


def test_refresh_rotates_token(client, issue_token, session):
    user = UserFactory()
    old = issue_token(user)

    resp = client.post(f"{API}/refresh", headers=bearer(old))

    assert resp.status_code == 200
    new = resp.get_json()["token"]
    assert resp.get_json()["token_type"] == "Bearer"
    assert new != old
    assert client.get(f"{API}/user", headers=bearer(old)).status_code == 401
    assert client.get(f"{API}/user", headers=bearer(new)).status_code == 200
    assert session.query(AccessToken).count() == 1


def test_refresh_with_revoked_token(client, issue_token):
    token = issue_token(UserFactory())
    client.post(f"{API}/logout", headers=bearer(token))

    assert client.post(f"{API}/refresh", headers=bearer(token)).status_code == 401
