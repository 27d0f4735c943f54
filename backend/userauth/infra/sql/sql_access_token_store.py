"""Relational access token store backed by the ``access_tokens`` table."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from userauth.models.access_token import AccessToken
from userauth.models.base import as_utc
from userauth.services._shared.ports import AccessTokenStore, AccessTokenView
from userauth.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def _view(row: AccessToken) -> AccessTokenView:
    return AccessTokenView(
        token_hash=row.token_hash,
        user_id=row.user_id,
        name=row.name,
        created_at=as_utc(row.created_at),  # type: ignore[arg-type]
        last_used_at=as_utc(row.last_used_at),
        expires_at=as_utc(row.expires_at),
    )


class SQLAlchemyAccessTokenStore(AccessTokenStore):
    """
    Token store over SQLAlchemy, one Unit of Work per call.

    ``replace`` deletes the old row and inserts the new one in a single
    transaction. The delete row count decides which of two racing refreshes
    wins; the loser stores nothing and reports ``False``.
    """

    def add(
        self,
        *,
        token_hash: str,
        user_id: int,
        name: str,
        created_at: datetime,
        expires_at: datetime | None = None,
    ) -> None:
        with SQLAlchemyUnitOfWork() as uow:
            uow.access_tokens.add(
                AccessToken(
                    token_hash=token_hash,
                    user_id=user_id,
                    name=name,
                    created_at=created_at,
                    expires_at=expires_at,
                )
            )

    def get(self, token_hash: str) -> AccessTokenView | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            row = uow.access_tokens.get_by_hash(token_hash)
            return _view(row) if row is not None else None

    def replace(
        self,
        *,
        old_hash: str,
        new_hash: str,
        user_id: int,
        name: str,
        created_at: datetime,
        expires_at: datetime | None = None,
    ) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            if uow.access_tokens.delete_by_hash(old_hash, user_id=user_id) == 0:
                return False
            uow.access_tokens.add(
                AccessToken(
                    token_hash=new_hash,
                    user_id=user_id,
                    name=name,
                    created_at=created_at,
                    expires_at=expires_at,
                )
            )
            return True

    def delete(self, token_hash: str) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.access_tokens.delete_by_hash(token_hash) > 0

    def delete_all_for_user(self, user_id: int) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.access_tokens.delete_for_user(user_id)

    def touch(self, token_hash: str, at: datetime) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.access_tokens.touch(token_hash, at=at)

    def list_for_user(self, user_id: int) -> Iterable[AccessTokenView]:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            rows = uow.access_tokens.list(filters={"user_id": user_id}, sort=["created_at"])
            return [_view(row) for row in rows]
