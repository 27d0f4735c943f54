"""Repository package exposing persistence-layer access for all models."""

from __future__ import annotations

from userauth.repositories.access_token import AccessTokenRepository
from userauth.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)
from userauth.repositories.user import UserRepository

__all__ = [
    "AccessTokenRepository",
    "BaseRepository",
    "Page",
    "Pagination",
    "UserRepository",
    "apply_sorting",
    "paginate_select",
]
