"""Password hashing adapter over :mod:`werkzeug.security`."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from userauth.services._shared.ports import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    """
    Hash and verify passwords with Werkzeug's salted KDFs.

    Werkzeug hashes look like ``"scrypt:32768:8:1$<salt>$<hex>"``; the part
    before the first ``$`` names the method and its cost parameters. A stored
    hash whose prefix differs from the configured one needs a rehash.

    :param method: Werkzeug method string, e.g. ``"scrypt"`` or
        ``"pbkdf2:sha256:600000"``.
    """

    def __init__(self, method: str = "scrypt") -> None:
        self.method = method
        probe = generate_password_hash("probe", method=method)
        self._prefix = probe.split("$", 1)[0]
        # Verified against when the account does not exist
        self._dummy_hash = probe

    def hash(self, raw: str) -> str:
        return generate_password_hash(raw, method=self.method)

    def verify(self, hashed: str | None, raw: str) -> bool:
        if not hashed:
            check_password_hash(self._dummy_hash, raw)
            return False
        try:
            return check_password_hash(hashed, raw)
        except ValueError:
            # Unknown or corrupted hash format
            return False

    def needs_rehash(self, hashed: str) -> bool:
        return hashed.split("$", 1)[0] != self._prefix
