"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginSchema, LogoutSchema, RegisterSchema, TokenSchema
from .common import MessageSchema, MetaSchema, PaginationQuerySchema
from .user import AdminUserUpdateSchema, ProfileUpdateSchema, UserFilterSchema, UserSchema

__all__ = [
    "AdminUserUpdateSchema",
    "LoginSchema",
    "LogoutSchema",
    "MessageSchema",
    "MetaSchema",
    "PaginationQuerySchema",
    "ProfileUpdateSchema",
    "RegisterSchema",
    "TokenSchema",
    "UserFilterSchema",
    "UserSchema",
]
