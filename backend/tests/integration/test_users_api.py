"""HTTP tests for the admin user directory."""

from __future__ import annotations

import pytest

from tests.factories.user import UserFactory
from tests.helpers.utils import bearer

API = "/api/users"


@pytest.fixture()
def admin_headers(issue_token):
    return bearer(issue_token(UserFactory(admin=True, verified=True)))


@pytest.fixture()
def member_headers(issue_token):
    return bearer(issue_token(UserFactory()))


def test_list_requires_token(client):
    assert client.get(API).status_code == 401


def test_list_forbidden_for_members(client, member_headers):
    resp = client.get(API, headers=member_headers)

    assert resp.status_code == 403
    assert resp.get_json()["code"] == "forbidden"


def test_list_users_newest_first(client, admin_headers):
    users = UserFactory.create_batch(3)

    resp = client.get(f"{API}?limit=2", headers=admin_headers)

    assert resp.status_code == 200
    body = resp.get_json()
    assert [u["id"] for u in body["data"]] == [users[2].id, users[1].id]
    assert body["meta"] == {
        "total": 4,
        "page": 1,
        "limit": 2,
        "last_page": 2,
        "has_prev": False,
        "has_next": True,
    }
    assert all("password_hash" not in u for u in body["data"])


def test_list_default_page_size(client, admin_headers, app):
    UserFactory.create_batch(20)

    body = client.get(API, headers=admin_headers).get_json()

    assert len(body["data"]) == app.config["USERS_PAGE_SIZE"]
    assert body["meta"]["total"] == 21


def test_list_filter_by_role(client, admin_headers):
    UserFactory.create_batch(2)

    body = client.get(f"{API}?role=admin", headers=admin_headers).get_json()

    assert body["meta"]["total"] == 1
    assert body["data"][0]["role"] == "admin"


def test_list_rejects_unknown_role(client, admin_headers):
    resp = client.get(f"{API}?role=owner", headers=admin_headers)

    assert resp.status_code == 422
    assert "role" in resp.get_json()["errors"]


def test_list_rejects_bad_page(client, admin_headers):
    assert client.get(f"{API}?page=0", headers=admin_headers).status_code == 422


def test_update_user(client, admin_headers):
    target = UserFactory(name="Before")

    resp = client.put(
        f"{API}/{target.id}",
        json={"name": "After", "role": "admin", "password": "ignored-pass"},
        headers=admin_headers,
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["name"] == "After"
    assert body["role"] == "admin"


def test_update_user_forbidden_for_members(client, member_headers):
    target = UserFactory()
    resp = client.put(f"{API}/{target.id}", json={"role": "admin"}, headers=member_headers)
    assert resp.status_code == 403


def test_update_unknown_user(client, admin_headers):
    resp = client.put(f"{API}/9999", json={"name": "x"}, headers=admin_headers)
    assert resp.status_code == 404


def test_update_user_invalid_payload(client, admin_headers):
    target = UserFactory()

    resp = client.put(
        f"{API}/{target.id}", json={"email": "broken", "role": "root"}, headers=admin_headers
    )

    assert resp.status_code == 422
    assert set(resp.get_json()["errors"]) == {"email", "role"}
