"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from userauth.models.base import as_utc
from userauth.models.user import User


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Output DTO representing public-safe user data.

    The password hash never leaves the service layer.

    :param id: User identifier.
    :type id: int
    :param name: Display name.
    :type name: str
    :param email: Email address.
    :type email: str
    :param role: ``"user"`` or ``"admin"``.
    :type role: str
    :param email_verified_at: Verification time, ``None`` while unverified.
    :type email_verified_at: datetime | None
    :param created_at: Creation time (UTC).
    :type created_at: datetime | None
    :param updated_at: Last update time (UTC).
    :type updated_at: datetime | None
    """

    id: int
    name: str
    email: str
    role: str
    email_verified_at: datetime | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_verified(self) -> bool:
        return self.email_verified_at is not None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_model(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            email_verified_at=as_utc(user.email_verified_at),
            created_at=as_utc(user.created_at),
            updated_at=as_utc(user.updated_at),
        )
