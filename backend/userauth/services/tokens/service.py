# userauth/services/tokens/service.py
from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from userauth.models.access_token import DEFAULT_TOKEN_NAME
from userauth.models.base import as_utc
from userauth.services._shared.base import BaseService
from userauth.services._shared.errors import UnauthenticatedError
from userauth.services._shared.ports import (
    AccessTokenStore,
    TokenDecodeError,
    TokenProvider,
    hash_token_id,
)
from userauth.services.identity.dto import UserOut
from userauth.services.tokens.dto import AuthContext, IssuedToken

log = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"


class SessionTokenManager(BaseService):
    """
    Bearer token lifecycle service (issue / authenticate / refresh / logout).

    Tokens are signed via a pluggable TokenProvider; the AccessTokenStore
    holds a digest of every live token id and is the only authority on
    revocation. A token whose record is gone is rejected even while its
    signature is still valid.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        token_store: AccessTokenStore,
        access_ttl: timedelta | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for minting/decoding tokens.
        :param token_store: Stateful store for issued tokens.
        :param access_ttl: Token lifetime; ``None`` means tokens live until
            revoked.
        """
        self.tokens = token_provider
        self.store = token_store
        self.access_ttl = access_ttl

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def issue(self, user_id: int, name: str = DEFAULT_TOKEN_NAME) -> IssuedToken:
        """
        Mint a new token for ``user_id``.

        The server-side record is stored FIRST so that no token ever exists
        without one.
        """
        jti = self._new_jti()
        now = self.now_utc()
        self.store.add(
            token_hash=hash_token_id(jti),
            user_id=user_id,
            name=name,
            created_at=now,
            expires_at=self._expires_at(now),
        )
        token = self._mint(user_id, jti)
        log.info("Token issued", extra={"event": "token.issued", "user_id": user_id})
        return IssuedToken(token=token)

    # ------------------------------------------------------------------ #
    # Authenticate
    # ------------------------------------------------------------------ #

    def authenticate(self, secret: str | None) -> AuthContext:
        """
        Resolve a bearer secret to its user.

        :raises UnauthenticatedError: When the token is malformed, tampered,
            unknown, revoked, expired or its owner no longer exists.
        """
        if not secret:
            raise UnauthenticatedError()

        try:
            claims = self.tokens.decode(secret)
        except TokenDecodeError as exc:
            raise UnauthenticatedError() from exc

        if claims.get("type", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE or not claims.get("jti"):
            raise UnauthenticatedError()
        user_id = self._coerce_user_id(claims.get("sub"))
        token_hash = hash_token_id(str(claims["jti"]))

        record = self.store.get(token_hash)
        if record is None or record.user_id != user_id:
            raise UnauthenticatedError()

        now = self.now_utc()
        expires_at = as_utc(record.expires_at)
        if expires_at is not None and expires_at <= now:
            self.store.delete(token_hash)
            raise UnauthenticatedError()

        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UnauthenticatedError()
            out = UserOut.from_model(user)

        # A concurrent logout may have removed the record meanwhile
        if not self.store.touch(token_hash, now):
            raise UnauthenticatedError()

        return AuthContext(user=out, token_hash=token_hash)

    # ------------------------------------------------------------------ #
    # Refresh with atomic replacement
    # ------------------------------------------------------------------ #

    def refresh(self, ctx: AuthContext) -> IssuedToken:
        """
        Replace the token that authenticated ``ctx`` with a new one.

        The old record is consumed and the new one stored in a single store
        transaction. If the old record is already gone (concurrent refresh
        or logout) no token is issued.

        :raises UnauthenticatedError: When the current token was already
            consumed.
        """
        record = self.store.get(ctx.token_hash)
        if record is None:
            raise UnauthenticatedError()

        jti = self._new_jti()
        now = self.now_utc()
        replaced = self.store.replace(
            old_hash=ctx.token_hash,
            new_hash=hash_token_id(jti),
            user_id=ctx.user.id,
            name=record.name,
            created_at=now,
            expires_at=self._expires_at(now),
        )
        if not replaced:
            log.info(
                "Refresh lost to a concurrent revocation",
                extra={"event": "token.refresh_conflict", "user_id": ctx.user.id},
            )
            raise UnauthenticatedError()

        token = self._mint(ctx.user.id, jti)
        log.info("Token refreshed", extra={"event": "token.refreshed", "user_id": ctx.user.id})
        return IssuedToken(token=token)

    # ------------------------------------------------------------------ #
    # Logout / revocation
    # ------------------------------------------------------------------ #

    def logout(self, ctx: AuthContext, *, all_sessions: bool = False) -> int:
        """
        Revoke the current token, or every token of the user.

        Idempotent: revoking an already deleted token is not an error.

        :returns: Number of tokens removed.
        """
        if all_sessions:
            removed = self.store.delete_all_for_user(ctx.user.id)
        else:
            removed = int(self.store.delete(ctx.token_hash))
        log.info(
            "Logged out",
            extra={"event": "token.revoked", "user_id": ctx.user.id},
        )
        return removed

    def revoke_all(self, user_id: int) -> int:
        """Delete every token owned by ``user_id``; returns the count."""
        removed = self.store.delete_all_for_user(user_id)
        log.info("All tokens revoked", extra={"event": "token.revoked_all", "user_id": user_id})
        return removed

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _mint(self, user_id: int, jti: str) -> str:
        expires_delta: timedelta | bool = self.access_ttl if self.access_ttl else False
        return self.tokens.create_access_token(
            identity=user_id,
            expires_delta=expires_delta,
            jti=jti,
        )

    def _expires_at(self, now: datetime) -> datetime | None:
        return now + self.access_ttl if self.access_ttl else None

    @staticmethod
    def _new_jti() -> str:
        return secrets.token_urlsafe(32)

    @staticmethod
    def _coerce_user_id(subject: Any) -> int:
        """Ensure the token subject can be treated as an integer user id."""
        if isinstance(subject, int):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise UnauthenticatedError()

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
