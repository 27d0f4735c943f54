"""User repository: lookups and state transitions for :class:`User`."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from userauth.models.user import User
from userauth.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Email matching is exact (case-sensitive); values are only trimmed.
    """

    model = User

    def _sortable_fields(self):
        return {
            "id": User.id,
            "name": User.name,
            "email": User.email,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {"email": User.email, "role": User.role}

    def _updatable_fields(self):
        # role is only reachable through the admin allowlist
        return {"name", "email", "password_hash", "role"}

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by exact email.

        :param email: Email address; surrounding whitespace is ignored.
        :returns: User instance or ``None`` when not found.
        """
        stmt = select(User).where(User.email == email.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def email_taken(self, email: str, *, exclude_id: int | None = None) -> bool:
        """Return ``True`` when another user already owns ``email``.

        :param email: Candidate email address.
        :param exclude_id: User allowed to keep the address (profile updates).
        """
        stmt = select(User.id).where(User.email == email.strip())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def mark_email_verified(self, user_id: int, *, at: datetime) -> bool:
        """Set ``email_verified_at`` only if it is still ``NULL``.

        A single conditional ``UPDATE`` so that concurrent verifications
        produce exactly one transition.

        :returns: ``True`` when this call performed the transition.
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.email_verified_at.is_(None))
            .values(email_verified_at=at)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount)
