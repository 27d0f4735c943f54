# comments in English; reST docstrings
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]

from userauth.services._shared.ports import AccessTokenStore, AccessTokenView


def _b(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisAccessTokenStore(AccessTokenStore):
    """
    Redis-backed access token store with atomic replacement.

    Layout: one hash per token (``pat:{digest}``) and one set per user
    (``pat:u:{user_id}``) indexing the digests it owns. Tokens with an
    ``expires_at`` get a matching key expiry.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token_hash: str) -> str:
        return f"pat:{token_hash}"

    @staticmethod
    def _ku(user_id: int | str) -> str:
        return f"pat:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        # Naive values are taken as UTC
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    @staticmethod
    def _from_ts(raw: bytes | str | None) -> datetime | None:
        value = _b(raw)
        return datetime.fromtimestamp(int(value), tz=UTC) if value else None

    def _mapping(
        self,
        *,
        user_id: int,
        name: str,
        created_at: datetime,
        expires_at: datetime | None,
    ) -> dict[str, str]:
        return {
            "user_id": str(user_id),
            "name": name,
            "created_at": str(self._to_ts(created_at)),
            "last_used_at": "",
            "expires_at": str(self._to_ts(expires_at)) if expires_at else "",
        }

    # -------------------- API ------------------------

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
        Insert the token record *before* the token is handed to the client.

        This ensures there is no window where a token exists without a
        server-side record.
        """
        key = self._k(token_hash)
        pipe = self.r.pipeline(transaction=True)
        pipe.hset(
            key,
            mapping=self._mapping(
                user_id=user_id, name=name, created_at=created_at, expires_at=expires_at
            ),
        )
        if expires_at:
            pipe.expireat(key, self._to_ts(expires_at))
        pipe.sadd(self._ku(user_id), token_hash)
        pipe.execute()

    def get(self, token_hash: str) -> AccessTokenView | None:
        h = self.r.hgetall(self._k(token_hash))
        uid = _b(h.get(b"user_id")) if h else ""
        if not uid:
            return None
        return AccessTokenView(
            token_hash=token_hash,
            user_id=int(uid),
            name=_b(h.get(b"name")),
            created_at=cast(datetime, self._from_ts(h.get(b"created_at")) or datetime.now(UTC)),
            last_used_at=self._from_ts(h.get(b"last_used_at")),
            expires_at=self._from_ts(h.get(b"expires_at")),
        )

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
        Atomically consume ``old_hash`` and create ``new_hash``.

        Uses WATCH/MULTI/EXEC (optimistic locking): a concurrent delete or
        replace of ``old_hash`` aborts the transaction and the retry then
        sees the key gone.
        """
        k_old = self._k(old_hash)
        k_new = self._k(new_hash)
        k_user = self._ku(user_id)

        # Retry loop for optimistic locking in case of concurrent modifications
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(k_old)

                    owner = _b(p.hget(k_old, "user_id"))
                    if owner != str(user_id):
                        p.unwatch()
                        return False

                    p.multi()
                    p.delete(k_old)
                    p.srem(k_user, old_hash)
                    p.hset(
                        k_new,
                        mapping=self._mapping(
                            user_id=user_id,
                            name=name,
                            created_at=created_at,
                            expires_at=expires_at,
                        ),
                    )
                    if expires_at:
                        p.expireat(k_new, self._to_ts(expires_at))
                    p.sadd(k_user, new_hash)
                    p.execute()
                return True
            except redis.WatchError:
                continue

    def delete(self, token_hash: str) -> bool:
        key = self._k(token_hash)
        uid = _b(self.r.hget(key, "user_id"))
        with self.r.pipeline(transaction=True) as p:
            p.delete(key)
            if uid:
                p.srem(self._ku(uid), token_hash)
            out = cast(list[int], p.execute())
        return bool(out[0])

    def delete_all_for_user(self, user_id: int) -> int:
        key_u = self._ku(user_id)
        members = [_b(m) for m in self.r.smembers(key_u)]
        if not members:
            return 0
        pipe = self.r.pipeline(transaction=True)
        for token_hash in members:
            pipe.delete(self._k(token_hash))
        pipe.delete(key_u)
        out = cast(list[int], pipe.execute())
        # The last result belongs to the index key itself
        return sum(int(n) for n in out[:-1])

    def touch(self, token_hash: str, at: datetime) -> bool:
        key = self._k(token_hash)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    # Never resurrect a deleted token as a bare hash
                    if not p.exists(key):
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, "last_used_at", str(self._to_ts(at)))
                    p.execute()
                return True
            except redis.WatchError:
                continue

    def list_for_user(self, user_id: int) -> Iterable[AccessTokenView]:
        key_u = self._ku(user_id)
        members = sorted(_b(m) for m in self.r.smembers(key_u))

        views: list[AccessTokenView] = []
        stale: list[str] = []
        for token_hash in members:
            view = self.get(token_hash)
            if view:
                views.append(view)
            else:
                # Underlying hash expired or deleted
                stale.append(token_hash)

        if stale:
            self.r.srem(key_u, *stale)
        return sorted(views, key=lambda v: v.created_at)
