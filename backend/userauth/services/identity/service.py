"""
IdentityService
===============

Aggregate service responsible for managing the `User` aggregate:
- Registration and uniqueness of the login email
- Credential verification (no token issuance)
- Self-service profile updates and the password lifecycle
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError

from userauth.models.user import ROLE_USER, User
from userauth.repositories.user import UserRepository
from userauth.schemas.auth import LoginSchema, RegisterSchema
from userauth.schemas.user import ProfileUpdateSchema
from userauth.services._shared.base import BaseService, load_or_collect
from userauth.services._shared.errors import (
    CREDENTIALS_INCORRECT,
    EMAIL_TAKEN,
    FieldValidationError,
    NotFoundError,
    raise_if_errors,
    violates,
)
from userauth.services._shared.ports import PasswordHasher
from userauth.services.identity.dto import UserOut

log = logging.getLogger(__name__)


class IdentityService(BaseService):
    """
    Application service for the `User` aggregate.

    Responsibilities
    ----------------
    - Register users ensuring email uniqueness.
    - Verify credentials, transparently upgrading outdated password hashes.
    - Retrieve and update user profile data safely.

    Field violations are collected across the whole payload and raised once
    as :class:`FieldValidationError`; nothing is written in that case.
    """

    def __init__(
        self,
        *,
        hasher: PasswordHasher,
        password_min_length: int = 8,
    ) -> None:
        """
        :param hasher: Password hashing adapter.
        :param password_min_length: Minimum accepted password length.
        """
        self.hasher = hasher
        self.password_min_length = password_min_length

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(
        self,
        payload: Mapping[str, Any] | None,
        *,
        on_committed: Callable[[UserOut], None] | None = None,
    ) -> UserOut:
        """
        Register a new user.

        :param payload: Raw input with ``name``, ``email``, ``password``,
            ``password_confirmation`` and optional ``role``.
        :param on_committed: Called with the new user once the transaction
            committed (sends the verification notification). Its failures
            are logged and do not undo the registration.
        :returns: Public-safe user DTO.
        :rtype: UserOut
        :raises FieldValidationError: When any field is invalid or the email
            is already taken.
        """
        data, errors = load_or_collect(
            RegisterSchema(password_min_length=self.password_min_length), payload
        )

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users

            if "email" in data and repo.email_taken(data["email"]):
                errors.setdefault("email", []).append(EMAIL_TAKEN)
            raise_if_errors(errors)

            user = User(
                name=data["name"],
                email=data["email"],
                password_hash=self.hasher.hash(data["password"]),
                role=data.get("role") or ROLE_USER,
            )
            try:
                repo.add(user)
            except IntegrityError as exc:
                # Lost a race against a concurrent registration
                if violates(exc, "uq_users_email", "users.email"):
                    raise FieldValidationError.single("email", EMAIL_TAKEN) from exc
                raise

            out = UserOut.from_model(user)

        log.info("User registered", extra={"event": "user.registered", "user_id": out.id})

        if on_committed is not None:
            try:
                on_committed(out)
            except Exception:
                log.error(
                    "Post-registration hook failed",
                    exc_info=True,
                    extra={"event": "user.registered.hook_failed", "user_id": out.id},
                )
        return out

    # --------------------------------------------------------------------- #
    # Authentication
    # --------------------------------------------------------------------- #

    def login(self, payload: Mapping[str, Any] | None) -> UserOut:
        """
        Verify credentials.

        Unknown emails and wrong passwords produce the same error so the
        response never reveals whether an account exists.

        :param payload: Raw input with ``email`` and ``password``.
        :returns: Authenticated user.
        :rtype: UserOut
        :raises FieldValidationError: On missing fields or bad credentials.
        """
        data, errors = load_or_collect(LoginSchema(), payload)
        raise_if_errors(errors)

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_by_email(data["email"])

            stored_hash = user.password_hash if user is not None else None
            password_ok = self.hasher.verify(stored_hash, data["password"])
            if user is None or not password_ok:
                log.info("Login rejected", extra={"event": "user.login_failed"})
                raise FieldValidationError.single("email", CREDENTIALS_INCORRECT)

            if self.hasher.needs_rehash(user.password_hash):
                repo.update(user, password_hash=self.hasher.hash(data["password"]))
                log.info(
                    "Password hash upgraded",
                    extra={"event": "user.password_rehashed", "user_id": user.id},
                )

            return UserOut.from_model(user)

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: int) -> UserOut:
        """
        Retrieve a user by identifier.

        :raises NotFoundError: If user does not exist.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserOut.from_model(user)

    def get_user_by_email(self, email: str) -> UserOut:
        """
        Retrieve a user by exact email.

        :raises NotFoundError: If no user owns the address.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            return UserOut.from_model(user)

    # --------------------------------------------------------------------- #
    # Profile update
    # --------------------------------------------------------------------- #

    def update_profile(self, user_id: int, payload: Mapping[str, Any] | None) -> UserOut:
        """
        Update the caller's own ``name``, ``email`` and/or ``password``.

        Absent fields are left untouched and unknown keys are ignored. The
        update is all-or-nothing.

        :param user_id: Authenticated user id.
        :param payload: Raw input; ``password`` requires a matching
            ``password_confirmation``.
        :returns: Updated user DTO.
        :rtype: UserOut
        :raises NotFoundError: When user not found.
        :raises FieldValidationError: When any field is invalid.
        """
        data, errors = load_or_collect(
            ProfileUpdateSchema(password_min_length=self.password_min_length), payload
        )

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            if "email" in data and repo.email_taken(data["email"], exclude_id=user.id):
                errors.setdefault("email", []).append(EMAIL_TAKEN)
            raise_if_errors(errors)

            updates: dict[str, Any] = {k: data[k] for k in ("name", "email") if k in data}
            if "password" in data:
                updates["password_hash"] = self.hasher.hash(data["password"])

            if updates:
                try:
                    repo.update(user, **updates)
                except IntegrityError as exc:
                    if violates(exc, "uq_users_email", "users.email"):
                        raise FieldValidationError.single("email", EMAIL_TAKEN) from exc
                    raise
                log.info(
                    "Profile updated",
                    extra={"event": "user.profile_updated", "user_id": user.id},
                )

            return UserOut.from_model(user)
