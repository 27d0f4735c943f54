from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for one-way password hashing."""

    def hash(self, raw: str) -> str:
        """Return a salted hash of ``raw`` using the current method."""

    def verify(self, hashed: str | None, raw: str) -> bool:
        """
        Check ``raw`` against ``hashed``.

        ``hashed=None`` still performs a comparable amount of work and
        returns ``False`` so callers can hide unknown accounts.
        """

    def needs_rehash(self, hashed: str) -> bool:
        """Whether ``hashed`` was produced with outdated parameters."""
