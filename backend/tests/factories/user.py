"""Factory Boy definition for :class:`userauth.models.user.User`."""

from __future__ import annotations

from datetime import UTC, datetime

import factory
from werkzeug.security import generate_password_hash

from tests.factories import BaseFactory
from userauth.models.user import ROLE_ADMIN, ROLE_USER, User

# Matches TestingConfig.PASSWORD_HASH_METHOD so logins never trigger a rehash
TEST_HASH_METHOD = "pbkdf2:sha256:1000"
DEFAULT_PASSWORD = "password123"


class UserFactory(BaseFactory):
    """
    Build persisted :class:`userauth.models.user.User` instances.

    Notes
    -----
    - ``raw_password`` is hashed with the cheap testing method; pass it to
      log the user in afterwards.
    - Traits ``verified`` and ``admin`` cover the common account states.
    """

    class Meta:
        model = User

    class Params:
        raw_password = DEFAULT_PASSWORD
        verified = factory.Trait(
            email_verified_at=factory.LazyFunction(lambda: datetime.now(UTC)),
        )
        admin = factory.Trait(role=ROLE_ADMIN)

    id = None  # let autoincrement handle it
    name = factory.Faker("name")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    role = ROLE_USER
    email_verified_at = None
    password_hash = factory.LazyAttribute(
        lambda o: generate_password_hash(o.raw_password, method=TEST_HASH_METHOD)
    )
