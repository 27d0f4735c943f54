from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol


class TokenDecodeError(Exception):
    """Raised when a bearer token is malformed, tampered with or expired."""


class TokenProvider(Protocol):
    """Port for minting and decoding signed bearer tokens."""

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | bool | None = None,
        jti: str | None = None,
    ) -> str:
        """
        Mint a signed token.

        :param identity: Subject (user id).
        :param additional_claims: Extra non-PII claims.
        :param expires_delta: Lifetime; ``False`` for a token without ``exp``
            and ``None`` for the provider default.
        :param jti: Token identifier to embed; generated when omitted.
        """

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify the signature and return the claims.

        :raises TokenDecodeError: On any verification failure.
        """


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests."""

    def __init__(self) -> None:
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | bool | None = None,
        jti: str | None = None,
    ) -> str:
        self._seq += 1
        jti_value = jti or f"jti-{self._seq}"
        token = f"access.{identity}.{jti_value}.{self._seq}"
        payload: dict[str, Any] = {
            "sub": str(identity),
            "type": "access",
            "jti": jti_value,
        }
        if isinstance(expires_delta, timedelta):
            payload["exp"] = int((datetime.now(tz=UTC) + expires_delta).timestamp())
        if additional_claims:
            payload.update(additional_claims)
        self._issued[token] = payload
        return token

    def decode(self, token: str) -> dict[str, Any]:
        payload = self._issued.get(token)
        if payload is None:
            raise TokenDecodeError("Unknown token.")
        exp = payload.get("exp")
        if exp is not None and exp <= int(datetime.now(tz=UTC).timestamp()):
            raise TokenDecodeError("Token has expired.")
        return dict(payload)
