# userauth/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from flask_jwt_extended import create_access_token as _create_access
from flask_jwt_extended import decode_token as _decode
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import PyJWTError

from userauth.services._shared.ports import TokenDecodeError, TokenProvider


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    .. note::
       Requires an active Flask app context with proper JWT settings.
    """

    def _merge_claims(self, base: dict[str, Any] | None, extra: dict[str, Any]) -> dict[str, Any]:
        """Merge claim dictionaries without mutating inputs."""
        merged = dict(base or {})
        merged.update(extra)
        return merged

    def create_access_token(
        self,
        *,
        identity: str | int,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | bool | None = None,
        jti: str | None = None,
    ) -> str:
        # The server-side record is keyed by the jti, so it is passed through
        # additional_claims (which override the library's random jti).
        claims = additional_claims or {}
        if jti is not None:
            claims = self._merge_claims(claims, {"jti": jti})

        token = cast(
            str,
            _create_access(
                identity=str(identity),
                additional_claims=claims,
                expires_delta=expires_delta,
            ),
        )

        if jti is not None:
            # Fail fast on drift between the token and its stored digest.
            actual = cast(dict[str, Any], _decode(token))["jti"]
            if actual != jti:
                raise RuntimeError("Access token jti mismatch after creation.")

        return token

    def decode(self, token: str) -> dict[str, Any]:
        try:
            return cast(dict[str, Any], _decode(token))
        except (PyJWTError, JWTExtendedException) as exc:
            raise TokenDecodeError(str(exc)) from exc
