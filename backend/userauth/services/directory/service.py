"""
UserDirectoryService
====================

Admin surface over the user base: paginated listing and restricted edits.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError

from userauth.models.user import ROLES
from userauth.schemas.user import AdminUserUpdateSchema
from userauth.services._shared.base import BaseService, load_or_collect
from userauth.services._shared.dto import PageMeta, PaginationIn
from userauth.services._shared.errors import (
    EMAIL_TAKEN,
    AuthorizationError,
    FieldValidationError,
    NotFoundError,
    raise_if_errors,
    violates,
)
from userauth.services.identity.dto import UserOut

log = logging.getLogger(__name__)

DEFAULT_SORT = ("-created_at", "-id")

# Fields an admin may change on another account
ADMIN_UPDATABLE = ("name", "email", "role")


@dataclass(frozen=True, slots=True)
class UserPageOut:
    """
    One page of users.

    :param items: Users on the page, newest first.
    :type items: list[UserOut]
    :param meta: Pagination metadata.
    :type meta: PageMeta
    """

    items: list[UserOut]
    meta: PageMeta


class UserDirectoryService(BaseService):
    """Admin-only listing and editing of user accounts.

    Every operation takes the acting user explicitly and rejects non-admins
    with :class:`AuthorizationError` before touching the target.
    """

    @staticmethod
    def _ensure_admin(actor: UserOut) -> None:
        if not actor.is_admin:
            raise AuthorizationError()

    def list_users(
        self,
        actor: UserOut,
        *,
        role: str | None = None,
        pagination: PaginationIn | None = None,
    ) -> UserPageOut:
        """
        List users, newest first, optionally filtered by role.

        :raises AuthorizationError: If ``actor`` is not an admin.
        :raises FieldValidationError: On an unknown role filter.
        """
        self._ensure_admin(actor)
        if role is not None and role not in ROLES:
            raise FieldValidationError.single("role", "The selected role is invalid.")

        pagination = pagination or PaginationIn()
        p = self.ensure_pagination(
            page=pagination.page,
            limit=pagination.limit,
            sort=pagination.sort or DEFAULT_SORT,
        )
        with self.ro_uow() as uow:
            page = uow.users.paginate(p, filters={"role": role})
            items = [UserOut.from_model(user) for user in page.items]

        return UserPageOut(
            items=items,
            meta=PageMeta.build(page=page.page, limit=page.limit, total=page.total),
        )

    def update_user(
        self, actor: UserOut, user_id: int, payload: Mapping[str, Any] | None
    ) -> UserOut:
        """
        Update ``name``, ``email`` and/or ``role`` of any user.

        Other keys (passwords, timestamps, verification state) are ignored.

        :raises AuthorizationError: If ``actor`` is not an admin.
        :raises NotFoundError: When the target user does not exist.
        :raises FieldValidationError: When any field is invalid.
        """
        self._ensure_admin(actor)
        data, errors = load_or_collect(AdminUserUpdateSchema(), payload)

        with self.rw_uow() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            if "email" in data and uow.users.email_taken(data["email"], exclude_id=user.id):
                errors.setdefault("email", []).append(EMAIL_TAKEN)
            raise_if_errors(errors)

            updates = {k: data[k] for k in ADMIN_UPDATABLE if k in data}
            if updates:
                try:
                    uow.users.update(user, **updates)
                except IntegrityError as exc:
                    if violates(exc, "uq_users_email", "users.email"):
                        raise FieldValidationError.single("email", EMAIL_TAKEN) from exc
                    raise
                log.info(
                    "User updated by admin %s",
                    actor.id,
                    extra={"event": "user.admin_updated", "user_id": user.id},
                )
            return UserOut.from_model(user)
