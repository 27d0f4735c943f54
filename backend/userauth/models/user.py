"""User account model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Final

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from userauth.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .access_token import AccessToken

ROLE_USER: Final[str] = "user"
ROLE_ADMIN: Final[str] = "admin"
ROLES: Final[tuple[str, ...]] = (ROLE_USER, ROLE_ADMIN)


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account identity with credentials, role and email verification state.

    Fields
    ------
    name : str
        Display name (at most 255 characters).
    email : str
        Login email. Stored trimmed and matched exactly as stored.
    password_hash : str
        One-way hash produced by the configured password hasher. Never
        serialized.
    role : str
        ``"user"`` (default) or ``"admin"``.
    email_verified_at : datetime | None
        ``None`` while the email address is unverified.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_USER)
    email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    access_tokens: Mapped[list[AccessToken]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    @property
    def is_verified(self) -> bool:
        """Whether the email address has been verified."""
        return self.email_verified_at is not None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Trim the email address.

        Case is preserved: lookups are exact, as stored.

        :raises ValueError: If the value is empty.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Email is required.")
        return value.strip()

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()

    @validates("role")
    def _check_role(self, key: str, value: str | None) -> str:
        """
        Default missing roles to ``"user"`` and reject unknown ones.

        :raises ValueError: If the role is not one of :data:`ROLES`.
        """
        role = value or ROLE_USER
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        return role
