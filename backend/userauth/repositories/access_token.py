"""Access token repository used by the SQL token store."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select, update

from userauth.models.access_token import AccessToken
from userauth.repositories.base import BaseRepository


class AccessTokenRepository(BaseRepository[AccessToken]):
    """Persistence-only repository for :class:`AccessToken` rows.

    Deletes go through bulk statements so the returned row count tells
    concurrent callers which one actually removed the token.
    """

    model = AccessToken

    def _sortable_fields(self):
        return {"created_at": AccessToken.created_at, "id": AccessToken.id}

    def _filterable_fields(self):
        return {"user_id": AccessToken.user_id, "name": AccessToken.name}

    def get_by_hash(self, token_hash: str) -> AccessToken | None:
        stmt = select(AccessToken).where(AccessToken.token_hash == token_hash)
        return cast(AccessToken | None, self.session.execute(stmt).scalars().first())

    def delete_by_hash(self, token_hash: str, *, user_id: int | None = None) -> int:
        """Delete one token by digest, optionally scoped to its owner.

        :returns: Number of rows removed (0 or 1).
        """
        stmt = delete(AccessToken).where(AccessToken.token_hash == token_hash)
        if user_id is not None:
            stmt = stmt.where(AccessToken.user_id == user_id)
        result = self.session.execute(stmt.execution_options(synchronize_session=False))
        return int(result.rowcount or 0)

    def delete_for_user(self, user_id: int) -> int:
        """Delete every token owned by ``user_id``; returns the row count."""
        stmt = delete(AccessToken).where(AccessToken.user_id == user_id)
        result = self.session.execute(stmt.execution_options(synchronize_session=False))
        return int(result.rowcount or 0)

    def touch(self, token_hash: str, *, at: datetime) -> bool:
        """Record ``at`` as the last use of the token.

        :returns: ``False`` when the token no longer exists.
        """
        stmt = (
            update(AccessToken)
            .where(AccessToken.token_hash == token_hash)
            .values(last_used_at=at)
            .execution_options(synchronize_session=False)
        )
        return bool(self.session.execute(stmt).rowcount)
