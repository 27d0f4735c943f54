"""
userauth.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that the service layer depends
on for token handling, password hashing and notification delivery.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`: abstraction for signed token creation
    and decoding.

- :mod:`access_token_store`:
    Defines :class:`~.AccessTokenStore` and :class:`~.AccessTokenView`:
    persistence of issued bearer tokens, including atomic replacement.

- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`.

- :mod:`notifier`:
    Defines :class:`~.VerificationNotifier`.

Design Notes
------------
Concrete adapters (SQL, Redis, Werkzeug, webhooks) live under
``userauth.infra``; in-memory doubles live next to their port.
"""

from __future__ import annotations

from .access_token_store import (
    AccessTokenStore,
    AccessTokenView,
    InMemoryAccessTokenStore,
    hash_token_id,
)
from .notifier import InMemoryNotifier, VerificationNotifier
from .password_hasher import PasswordHasher
from .token_provider import StubTokenProvider, TokenDecodeError, TokenProvider

__all__ = [
    "AccessTokenStore",
    "AccessTokenView",
    "InMemoryAccessTokenStore",
    "InMemoryNotifier",
    "PasswordHasher",
    "StubTokenProvider",
    "TokenDecodeError",
    "TokenProvider",
    "VerificationNotifier",
    "hash_token_id",
]
