"""Service layer public API.

This package exposes the essential building blocks for the service layer so
that callers can import from :mod:`userauth.services` without knowing the
internal structure.

Re-exports
----------
- Base primitives (from ``userauth.services._shared.base``)
    * :class:`BaseService`

- Shared DTOs (from ``userauth.services._shared.dto``)
    * :class:`PaginationIn`
    * :class:`PageMeta`

- Identity (from ``userauth.services.identity``)
    * :class:`IdentityService`, :class:`UserOut`

- Session tokens (from ``userauth.services.tokens``)
    * :class:`SessionTokenManager`, :class:`IssuedToken`, :class:`AuthContext`

- Email verification (from ``userauth.services.verification``)
    * :class:`EmailVerificationService`, :class:`VerificationLinkSigner`

- Admin directory (from ``userauth.services.directory``)
    * :class:`UserDirectoryService`, :class:`UserPageOut`
"""

from __future__ import annotations

from userauth.services._shared.base import BaseService
from userauth.services._shared.dto import PageMeta, PaginationIn
from userauth.services.directory.service import UserDirectoryService, UserPageOut
from userauth.services.identity.dto import UserOut
from userauth.services.identity.service import IdentityService
from userauth.services.tokens.dto import AuthContext, IssuedToken
from userauth.services.tokens.service import SessionTokenManager
from userauth.services.verification.links import VerificationLinkSigner
from userauth.services.verification.service import EmailVerificationService

__all__ = [
    "AuthContext",
    "BaseService",
    "EmailVerificationService",
    "IdentityService",
    "IssuedToken",
    "PageMeta",
    "PaginationIn",
    "SessionTokenManager",
    "UserDirectoryService",
    "UserOut",
    "UserPageOut",
    "VerificationLinkSigner",
]
