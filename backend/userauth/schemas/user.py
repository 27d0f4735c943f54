"""User resource schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, validate

from userauth.models.user import ROLES
from userauth.schemas.auth import PasswordPolicyMixin
from userauth.schemas.common import TrimmedSchema

_EMAIL_INVALID = "The email field must be a valid email address."


class ProfileUpdateSchema(PasswordPolicyMixin, TrimmedSchema):
    """Self-service profile update; absent fields are left untouched."""

    def __init__(self, *, password_min_length: int = 8, **kwargs: Any) -> None:
        self.password_min_length = password_min_length
        super().__init__(**kwargs)

    name = fields.String(validate=validate.Length(min=1, max=255))
    email = fields.Email(validate=validate.Length(max=255), error_messages={"invalid": _EMAIL_INVALID})
    password = fields.String(load_only=True)
    password_confirmation = fields.String(load_default=None, load_only=True)


class AdminUserUpdateSchema(TrimmedSchema):
    """Admin update of another account; only these keys are ever assigned."""

    name = fields.String(validate=validate.Length(min=1, max=255))
    email = fields.Email(validate=validate.Length(max=255), error_messages={"invalid": _EMAIL_INVALID})
    role = fields.String(validate=validate.OneOf(ROLES))


class UserFilterSchema(Schema):
    """Supported query parameters for listing users."""

    class Meta:
        unknown = EXCLUDE

    role = fields.String(load_default=None, validate=validate.OneOf(ROLES))


class UserSchema(Schema):
    """Public representation of a user entity."""

    id = fields.Integer(required=True)
    name = fields.String(required=True)
    email = fields.Email(required=True)
    role = fields.String(required=True)
    email_verified_at = fields.DateTime(allow_none=True)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
