"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or
HTTP. They are the stable contract between repositories, services and the
delivery layer; ``userauth.core.errors`` translates them into RFC 7807
responses.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from sqlalchemy.exc import IntegrityError

CREDENTIALS_INCORRECT = "The provided credentials are incorrect."
EMAIL_TAKEN = "The email has already been taken."


def violates(exc: IntegrityError, constraint_name: str, *aliases: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite only reports the column
    (``UNIQUE constraint failed: users.email``), hence ``aliases``.

    :param exc: Exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint name, e.g. ``"uq_users_email"``.
    :param aliases: Extra fragments that identify the same violation.
    :returns: ``True`` when the driver message mentions any of the names.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return any(name.lower() in message for name in (constraint_name, *aliases))


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - Each subclass carries a default ``message`` safe to show to clients.
    """

    message = "The request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class FieldValidationError(ServiceError):
    """
    Raised when one or more input fields are invalid.

    Violations are collected per field and reported together.

    :param errors: Mapping of field name to its messages.
    """

    message = "The given data was invalid."

    def __init__(self, errors: Mapping[str, Sequence[str]]) -> None:
        super().__init__()
        self.errors: dict[str, list[str]] = {k: list(v) for k, v in errors.items()}

    @classmethod
    def single(cls, field_name: str, message: str) -> FieldValidationError:
        """Build an error carrying one message for one field."""
        return cls({field_name: [message]})


class UnauthenticatedError(ServiceError):
    """Raised when a bearer token is missing, unknown, revoked or expired."""

    message = "Unauthenticated."


class AuthorizationError(ServiceError):
    """Raised when an authenticated caller lacks the required role."""

    message = "This action is unauthorized."


class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    def __init__(self, entity: str, key: str | int) -> None:
        super().__init__(f"{entity} not found.")
        self.entity = entity
        self.key = key

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


class InvalidLinkError(ServiceError):
    """Raised when a signed verification link fails any check."""

    message = "Invalid verification link."


class AlreadyVerifiedError(ServiceError):
    """Raised when a verification action targets an already verified email."""

    message = "Email already verified."


def raise_if_errors(errors: Mapping[str, Sequence[str]]) -> None:
    """Raise :class:`FieldValidationError` when ``errors`` is not empty."""
    if errors:
        raise FieldValidationError(errors)
