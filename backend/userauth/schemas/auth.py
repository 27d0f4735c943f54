"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, ValidationError, fields, validate, validates, validates_schema

from userauth.models.user import ROLE_USER, ROLES
from userauth.schemas.common import TrimmedSchema

CONFIRMATION_MISMATCH = "The password field confirmation does not match."


def _required(field_name: str) -> dict[str, str]:
    message = f"The {field_name} field is required."
    return {"required": message, "null": message}


class PasswordPolicyMixin:
    """Minimum-length and confirmation rules shared by password inputs."""

    password_min_length: int = 8

    @validates("password")
    def _check_password_length(self, value: str, **_: Any) -> None:
        if len(value) < self.password_min_length:
            raise ValidationError(
                f"The password field must be at least {self.password_min_length} characters."
            )

    @validates_schema(skip_on_field_errors=False)
    def _check_confirmation(self, data: dict[str, Any], **_: Any) -> None:
        if "password" in data and data.get("password_confirmation") != data["password"]:
            raise ValidationError(CONFIRMATION_MISMATCH, field_name="password")


class RegisterSchema(PasswordPolicyMixin, TrimmedSchema):
    """Input payload for account registration."""

    def __init__(self, *, password_min_length: int = 8, **kwargs: Any) -> None:
        self.password_min_length = password_min_length
        super().__init__(**kwargs)

    name = fields.String(
        required=True,
        validate=validate.Length(min=1, max=255),
        error_messages=_required("name"),
    )
    email = fields.Email(
        required=True,
        validate=validate.Length(max=255),
        error_messages={**_required("email"), "invalid": "The email field must be a valid email address."},
    )
    password = fields.String(required=True, load_only=True, error_messages=_required("password"))
    password_confirmation = fields.String(load_default=None, load_only=True)
    role = fields.String(load_default=ROLE_USER, allow_none=True, validate=validate.OneOf(ROLES))


class LoginSchema(TrimmedSchema):
    """Input payload for authenticating a user."""

    email = fields.Email(
        required=True,
        error_messages={**_required("email"), "invalid": "The email field must be a valid email address."},
    )
    password = fields.String(required=True, load_only=True, error_messages=_required("password"))


class LogoutSchema(TrimmedSchema):
    """Optional logout flags."""

    all_sessions = fields.Boolean(load_default=False)


class TokenSchema(Schema):
    """Bearer token returned once at issuance."""

    token = fields.String(required=True)
    token_type = fields.String(dump_default="Bearer")
