from __future__ import annotations

import hashlib
import threading
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol


def hash_token_id(jti: str) -> str:
    """Return the SHA-256 hex digest under which a token id is stored."""
    return hashlib.sha256(jti.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class AccessTokenView:
    """
    Read-model for a stored bearer token.

    :ivar token_hash: SHA-256 digest of the token id.
    :ivar user_id: Owner user id.
    :ivar name: Token label.
    :ivar created_at: Issuance time (UTC).
    :ivar last_used_at: Last successful authentication, if any.
    :ivar expires_at: Absolute expiration (UTC) or ``None`` for no expiry.
    """

    token_hash: str
    user_id: int
    name: str
    created_at: datetime
    last_used_at: datetime | None
    expires_at: datetime | None


class AccessTokenStore(Protocol):
    """
    Stateful store for bearer tokens; the single source of truth for revocation.

    ``replace`` MUST be atomic: of two concurrent calls on the same
    ``old_hash`` exactly one returns ``True``.
    """

    def add(
        self,
        *,
        token_hash: str,
        user_id: int,
        name: str,
        created_at: datetime,
        expires_at: datetime | None = None,
    ) -> None:
        """
        Persist a brand-new token record.

        This MUST be executed *before* the token is handed to the client.
        """

    def get(self, token_hash: str) -> AccessTokenView | None:
        """Fetch a single token snapshot (if present)."""

    def replace(
        self,
        *,
        old_hash: str,
        new_hash: str,
        user_id: int,
        name: str,
        created_at: datetime,
        expires_at: datetime | None = None,
    ) -> bool:
        """
        Atomically delete ``old_hash`` and store ``new_hash``.

        :returns: ``False`` (and stores nothing) when ``old_hash`` was already
            gone or owned by someone else.
        """

    def delete(self, token_hash: str) -> bool:
        """Delete one token. :returns: True if it existed."""

    def delete_all_for_user(self, user_id: int) -> int:
        """
        Delete every token of the given user.

        :returns: Number of tokens removed.
        """

    def touch(self, token_hash: str, at: datetime) -> bool:
        """Record ``at`` as the last use. :returns: False if the token is gone."""

    def list_for_user(self, user_id: int) -> Iterable[AccessTokenView]:
        """List the tokens currently held by a user."""


class InMemoryAccessTokenStore(AccessTokenStore):
    """
    In-memory token store with atomic replace behavior.

    .. note::
       Uses a threading lock to simulate atomicity in unit tests.
    """

    def __init__(self) -> None:
        self._by_hash: dict[str, AccessTokenView] = {}
        self._lock = threading.Lock()

    def add(
        self,
        *,
        token_hash: str,
        user_id: int,
        name: str,
        created_at: datetime,
        expires_at: datetime | None = None,
    ) -> None:
        with self._lock:
            if token_hash in self._by_hash:
                raise ValueError("Token hash already stored.")
            self._by_hash[token_hash] = AccessTokenView(
                token_hash=token_hash,
                user_id=user_id,
                name=name,
                created_at=created_at,
                last_used_at=None,
                expires_at=expires_at,
            )

    def get(self, token_hash: str) -> AccessTokenView | None:
        return self._by_hash.get(token_hash)

    def replace(
        self,
        *,
        old_hash: str,
        new_hash: str,
        user_id: int,
        name: str,
        created_at: datetime,
        expires_at: datetime | None = None,
    ) -> bool:
        with self._lock:
            current = self._by_hash.get(old_hash)
            if current is None or current.user_id != user_id:
                return False
            del self._by_hash[old_hash]
            self._by_hash[new_hash] = AccessTokenView(
                token_hash=new_hash,
                user_id=user_id,
                name=name,
                created_at=created_at,
                last_used_at=None,
                expires_at=expires_at,
            )
            return True

    def delete(self, token_hash: str) -> bool:
        with self._lock:
            return self._by_hash.pop(token_hash, None) is not None

    def delete_all_for_user(self, user_id: int) -> int:
        with self._lock:
            doomed = [h for h, v in self._by_hash.items() if v.user_id == user_id]
            for token_hash in doomed:
                del self._by_hash[token_hash]
            return len(doomed)

    def touch(self, token_hash: str, at: datetime) -> bool:
        with self._lock:
            current = self._by_hash.get(token_hash)
            if current is None:
                return False
            self._by_hash[token_hash] = replace(current, last_used_at=at)
            return True

    def list_for_user(self, user_id: int) -> list[AccessTokenView]:
        views = [v for v in self._by_hash.values() if v.user_id == user_id]
        return sorted(views, key=lambda v: v.created_at)
