"""Persisted bearer token records."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from userauth.core.extensions import db

from .base import PKMixin, ReprMixin

if TYPE_CHECKING:
    from .user import User

DEFAULT_TOKEN_NAME = "auth_token"


class AccessToken(PKMixin, ReprMixin, db.Model):
    """
    Server-side record of one issued bearer token.

    Only a SHA-256 digest of the token identifier is stored, so a leaked
    table cannot be replayed. Deleting the row revokes the token.

    Fields
    ------
    user_id : int
        Owner; rows are removed together with the user.
    name : str
        Free-form label, ``"auth_token"`` for tokens issued by login.
    token_hash : str
        Hex digest used for lookup. Unique.
    last_used_at : datetime | None
        Touched on every successful authentication.
    expires_at : datetime | None
        ``None`` means the token lives until revoked.
    """

    __tablename__ = "access_tokens"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, default=DEFAULT_TOKEN_NAME)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="access_tokens")

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_access_tokens_token_hash"),
        Index("ix_access_tokens_user_id", "user_id"),
    )
