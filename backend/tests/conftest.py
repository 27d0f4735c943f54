"""Pytest fixtures configuring an isolated database per test.

Each test gets freshly created tables in an in-memory SQLite database (or
``TEST_DATABASE_URL`` when set) inside a pushed application context, so data
never leaks between cases.
"""

from __future__ import annotations

import pytest

from userauth.core import collaborators
from userauth.core.config import TestingConfig
from userauth.core.extensions import db as _db  # Flask-SQLAlchemy instance
from userauth.factory import create_app  # application factory under test
from userauth.services._shared.ports import InMemoryNotifier


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied and logging
        noise reduced.
    """
    app = create_app(TestingConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture()
def db(app):
    """Create all tables for one test and drop them afterwards.

    Parameters
    ----------
    app: flask.Flask
        Application fixture; its context stays pushed for the whole test so
        requests issued through the test client share the same session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        try:
            yield _db
        finally:
            _db.session.remove()
            _db.drop_all()


@pytest.fixture()
def session(db):
    """Return the Flask-scoped session used by the application code."""
    return db.session


@pytest.fixture()
def client(app, db):
    """Flask test client sharing the test's application context."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def notifier(db, monkeypatch) -> InMemoryNotifier:
    """Capture verification links sent by the running application."""
    fake = InMemoryNotifier()
    monkeypatch.setattr(collaborators.current(), "notifier", fake)
    return fake


@pytest.fixture()
def issue_token(db):
    """Return a callable minting a real bearer token for a persisted user."""

    def _issue(user) -> str:
        return collaborators.current().token_manager().issue(user.id).token

    return _issue


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the per-test session."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
    SQLAlchemySession.set(None)
