# userauth/services/tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass

from userauth.services.identity.dto import UserOut


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """
    Output DTO with a freshly minted bearer token.

    The plaintext is only ever available here, at issuance.

    :param token: Encoded bearer token.
    :type token: str
    :param token_type: Always ``"Bearer"``.
    :type token_type: str
    """

    token: str
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class AuthContext:
    """
    Identity resolved from a bearer token, passed explicitly to handlers.

    :param user: Authenticated user.
    :type user: UserOut
    :param token_hash: Digest of the token that authenticated the request.
    :type token_hash: str
    """

    user: UserOut
    token_hash: str
