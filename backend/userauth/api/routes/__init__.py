"""Blueprint package bundling the API routes."""

from __future__ import annotations

from flask import Blueprint

# Import blueprints *only here* to keep imports localized and avoid cycles.
from .auth import bp as auth_bp
from .health import bp as health_bp
from .users import bp as users_bp

# Each tuple: (blueprint, url_prefix_relative_to_api_base)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),  # -> /api
    (auth_bp, "/auth"),  # -> /api/auth
    (users_bp, "/users"),
]
