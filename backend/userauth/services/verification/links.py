"""Signed, expiring email verification links."""

from __future__ import annotations

import hashlib
import hmac
from datetime import UTC, datetime, timedelta
from urllib.parse import urlencode

from userauth.services._shared.errors import InvalidLinkError


def email_hash(user_id: int, email: str) -> str:
    """SHA-256 hex digest binding a link to the user's current email."""
    return hashlib.sha256(f"{user_id}:{email}".encode()).hexdigest()


class VerificationLinkSigner:
    """
    Build and check verification links of the form
    ``{base_url}{api_prefix}/auth/email/verify/{id}/{hash}?expires=..&signature=..``.

    ``signature`` is an HMAC-SHA256 over ``id``, ``hash`` and ``expires``
    keyed with the application secret, so none of them can be altered. The
    hash ties the link to the email it was sent to: changing the email
    invalidates outstanding links.

    :param secret_key: HMAC key (the Flask ``SECRET_KEY``).
    :param base_url: Public origin, e.g. ``"https://accounts.example.com"``.
    :param api_prefix: Mount point of the API.
    :param ttl_minutes: Validity window of new links.
    """

    def __init__(
        self,
        *,
        secret_key: str,
        base_url: str,
        api_prefix: str = "/api",
        ttl_minutes: int = 60,
    ) -> None:
        self._key = secret_key.encode()
        self.base_url = base_url.rstrip("/")
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self.ttl = timedelta(minutes=ttl_minutes)

    def sign(self, user_id: int, hash_: str, expires: int) -> str:
        message = f"{user_id}|{hash_}|{expires}".encode()
        return hmac.new(self._key, message, hashlib.sha256).hexdigest()

    def build(self, user_id: int, email: str, *, now: datetime | None = None) -> str:
        """Return an absolute link valid for ``ttl`` from ``now``."""
        now = now or datetime.now(UTC)
        expires = int((now + self.ttl).timestamp())
        hash_ = email_hash(user_id, email)
        query = urlencode({"expires": expires, "signature": self.sign(user_id, hash_, expires)})
        return f"{self.base_url}{self.api_prefix}/auth/email/verify/{user_id}/{hash_}?{query}"

    def check_signature(
        self,
        user_id: int,
        hash_: str,
        expires: str | int | None,
        signature: str | None,
        *,
        now: datetime | None = None,
    ) -> None:
        """
        Validate the signature and expiry of a link.

        :raises InvalidLinkError: When the signature does not match, the
            ``expires`` value is malformed or the link has expired.
        """
        try:
            expires_ts = int(expires)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise InvalidLinkError() from exc

        expected = self.sign(user_id, hash_, expires_ts)
        if not signature or not hmac.compare_digest(expected, signature):
            raise InvalidLinkError()

        now = now or datetime.now(UTC)
        if expires_ts <= int(now.timestamp()):
            raise InvalidLinkError()

    @staticmethod
    def matches_email(user_id: int, hash_: str, email: str) -> bool:
        """Constant-time check that ``hash_`` was built for ``email``."""
        return hmac.compare_digest(email_hash(user_id, email), hash_)
