"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from userauth.core import collaborators
from userauth.schemas.common import PaginationQuerySchema
from userauth.services._shared.dto import PaginationIn
from userauth.services._shared.errors import AuthorizationError
from userauth.services.tokens.dto import AuthContext

F = TypeVar("F", bound=Callable[..., Any])


def parse_pagination(default_limit: int = 15, max_limit: int = 100) -> PaginationIn:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return PaginationIn(page=data["page"], limit=data["limit"], sort=data["sort"])


def json_body() -> dict[str, Any]:
    """Return the JSON object sent by the client, or ``{}`` for anything else."""

    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def bearer_token() -> str | None:
    """Extract the secret from an ``Authorization: Bearer <token>`` header."""

    scheme, _, value = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()


def require_auth(func: F) -> F:
    """Resolve the bearer token and pass the identity as ``auth=AuthContext``.

    Unauthenticated requests never reach the view; the service raises
    ``UnauthenticatedError`` which renders as 401.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        auth = collaborators.current().token_manager().authenticate(bearer_token())
        g.user_id = auth.user.id
        return func(*args, auth=auth, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_role(role: str) -> Callable[[F], F]:
    """Ensure the authenticated user holds ``role``; apply below ``require_auth``."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, auth: AuthContext, **kwargs: Any):
            if auth.user.role != role:
                raise AuthorizationError()
            return func(*args, auth=auth, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
