"""Unit tests for the relational access token store."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tests.factories.user import UserFactory
from userauth.infra.sql.sql_access_token_store import SQLAlchemyAccessTokenStore
from userauth.models.access_token import AccessToken


@pytest.fixture()
def store() -> SQLAlchemyAccessTokenStore:
    return SQLAlchemyAccessTokenStore()


@pytest.fixture()
def user():
    return UserFactory()


def _now() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


def test_add_and_get(store, user):
    now = _now()
    store.add(token_hash="a" * 64, user_id=user.id, name="laptop", created_at=now)

    view = store.get("a" * 64)
    assert view is not None
    assert view.user_id == user.id
    assert view.name == "laptop"
    assert view.created_at == now
    assert view.created_at.tzinfo is not None
    assert view.expires_at is None


def test_get_missing(store):
    assert store.get("b" * 64) is None


def test_replace(store, user, session):
    store.add(token_hash="a" * 64, user_id=user.id, name="auth_token", created_at=_now())
    expires = _now() + timedelta(hours=1)

    ok = store.replace(
        old_hash="a" * 64,
        new_hash="c" * 64,
        user_id=user.id,
        name="auth_token",
        created_at=_now(),
        expires_at=expires,
    )

    assert ok is True
    assert store.get("a" * 64) is None
    assert store.get("c" * 64).expires_at == expires
    assert session.query(AccessToken).count() == 1


def test_replace_consumed_token_fails(store, user):
    store.add(token_hash="a" * 64, user_id=user.id, name="auth_token", created_at=_now())
    kwargs = {"user_id": user.id, "name": "auth_token", "created_at": _now()}

    assert store.replace(old_hash="a" * 64, new_hash="c" * 64, **kwargs) is True
    assert store.replace(old_hash="a" * 64, new_hash="d" * 64, **kwargs) is False
    assert store.get("d" * 64) is None


def test_replace_foreign_token_fails(store, user):
    other = UserFactory()
    store.add(token_hash="a" * 64, user_id=user.id, name="auth_token", created_at=_now())

    ok = store.replace(
        old_hash="a" * 64, new_hash="c" * 64, user_id=other.id, name="x", created_at=_now()
    )

    assert ok is False
    assert store.get("a" * 64) is not None


def test_delete_and_delete_all(store, user):
    for ch in "abc":
        store.add(token_hash=ch * 64, user_id=user.id, name="auth_token", created_at=_now())

    assert store.delete("a" * 64) is True
    assert store.delete("a" * 64) is False
    assert store.delete_all_for_user(user.id) == 2
    assert list(store.list_for_user(user.id)) == []


def test_touch(store, user):
    store.add(token_hash="a" * 64, user_id=user.id, name="auth_token", created_at=_now())
    at = _now()

    assert store.touch("a" * 64, at) is True
    assert store.get("a" * 64).last_used_at == at
    assert store.touch("f" * 64, at) is False


def test_list_for_user_oldest_first(store, user):
    base = _now()
    store.add(token_hash="b" * 64, user_id=user.id, name="second", created_at=base)
    store.add(
        token_hash="a" * 64,
        user_id=user.id,
        name="first",
        created_at=base - timedelta(minutes=5),
    )

    assert [v.name for v in store.list_for_user(user.id)] == ["first", "second"]
