"""Per-application wiring of service ports to their concrete adapters."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask import Flask, current_app

from userauth.core.extensions import get_redis
from userauth.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from userauth.infra.notify.notifiers import LoggingNotifier, WebhookNotifier
from userauth.infra.redis.redis_access_token_store import RedisAccessTokenStore
from userauth.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from userauth.infra.sql.sql_access_token_store import SQLAlchemyAccessTokenStore
from userauth.services._shared.ports import (
    AccessTokenStore,
    PasswordHasher,
    TokenProvider,
    VerificationNotifier,
)
from userauth.services.directory.service import UserDirectoryService
from userauth.services.identity.service import IdentityService
from userauth.services.tokens.service import SessionTokenManager
from userauth.services.verification.links import VerificationLinkSigner
from userauth.services.verification.service import EmailVerificationService

EXTENSION_KEY = "userauth"


@dataclass(slots=True)
class Collaborators:
    """
    Adapters shared by every request of one application.

    Services are cheap and built per call from these; tests swap single
    attributes (``notifier``, ``token_store``) to observe side effects.
    """

    token_provider: TokenProvider
    token_store: AccessTokenStore
    password_hasher: PasswordHasher
    notifier: VerificationNotifier
    link_signer: VerificationLinkSigner
    password_min_length: int = 8
    access_ttl: timedelta | None = None

    @classmethod
    def from_config(cls, app: Flask) -> Collaborators:
        """
        Build adapters from ``app.config``.

        :raises RuntimeError: On an unknown ``TOKEN_STORE`` value.
        """
        cfg = app.config

        store_kind = str(cfg.get("TOKEN_STORE", "sql")).lower()
        token_store: AccessTokenStore
        if store_kind == "sql":
            token_store = SQLAlchemyAccessTokenStore()
        elif store_kind == "redis":
            token_store = RedisAccessTokenStore(get_redis())
        else:
            raise RuntimeError(f"Unknown TOKEN_STORE {store_kind!r}; expected 'sql' or 'redis'.")

        webhook_url = cfg.get("NOTIFIER_WEBHOOK_URL")
        notifier: VerificationNotifier
        if webhook_url:
            notifier = WebhookNotifier(
                url=webhook_url, timeout=float(cfg.get("NOTIFIER_TIMEOUT_SECONDS", 5))
            )
        else:
            notifier = LoggingNotifier()

        ttl_minutes = cfg.get("ACCESS_TOKEN_TTL_MINUTES")
        return cls(
            token_provider=JWTTokenProvider(),
            token_store=token_store,
            password_hasher=WerkzeugPasswordHasher(cfg.get("PASSWORD_HASH_METHOD", "scrypt")),
            notifier=notifier,
            link_signer=VerificationLinkSigner(
                secret_key=cfg["SECRET_KEY"],
                base_url=cfg.get("APP_URL", "http://localhost:8000"),
                api_prefix=cfg.get("API_BASE_PREFIX", "/api"),
                ttl_minutes=int(cfg.get("VERIFICATION_LINK_TTL_MINUTES", 60)),
            ),
            password_min_length=int(cfg.get("PASSWORD_MIN_LENGTH", 8)),
            access_ttl=timedelta(minutes=ttl_minutes) if ttl_minutes else None,
        )

    # ----------------------------- Service builders ---------------------------

    def identity_service(self) -> IdentityService:
        return IdentityService(
            hasher=self.password_hasher, password_min_length=self.password_min_length
        )

    def token_manager(self) -> SessionTokenManager:
        return SessionTokenManager(
            token_provider=self.token_provider,
            token_store=self.token_store,
            access_ttl=self.access_ttl,
        )

    def verification_service(self) -> EmailVerificationService:
        return EmailVerificationService(signer=self.link_signer, notifier=self.notifier)

    def directory_service(self) -> UserDirectoryService:
        return UserDirectoryService()


def current() -> Collaborators:
    """Return the collaborators of the active application."""
    return current_app.extensions[EXTENSION_KEY]  # type: ignore[no-any-return]


def init_app(app: Flask) -> None:
    """Build collaborators once per app; requires extensions to be initialized."""
    app.extensions[EXTENSION_KEY] = Collaborators.from_config(app)
