"""Authentication, session and email verification endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from userauth.api.deps import json_body, json_response, require_auth, timing
from userauth.core import collaborators
from userauth.core.extensions import limiter
from userauth.schemas import LogoutSchema, MessageSchema, TokenSchema, UserSchema
from userauth.services.tokens.dto import AuthContext

bp = Blueprint("auth", __name__)

user_schema = UserSchema()
token_schema = TokenSchema()
logout_schema = LogoutSchema()
message_schema = MessageSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


def _message(text: str):
    return json_response(message_schema.dump({"message": text}))


# --------------------------------------------------------------------------- #
# Anonymous
# --------------------------------------------------------------------------- #


@bp.post("/register")
@timing
def register():
    """Create an account, send the verification link and return a first token."""

    c = collaborators.current()
    verification = c.verification_service()
    user = c.identity_service().register(json_body(), on_committed=verification.notify_registered)
    issued = c.token_manager().issue(user.id)
    body = {**token_schema.dump(issued), "user": user_schema.dump(user)}
    return json_response(body, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Verify credentials and issue a new bearer token."""

    c = collaborators.current()
    user = c.identity_service().login(json_body())
    issued = c.token_manager().issue(user.id)
    body = {**token_schema.dump(issued), "user": user_schema.dump(user)}
    return json_response(body)


# --------------------------------------------------------------------------- #
# Authenticated
# --------------------------------------------------------------------------- #


@bp.get("/user")
@require_auth
@timing
def current_user(auth: AuthContext):
    """Return the authenticated user."""

    return json_response(user_schema.dump(auth.user))


@bp.put("/user")
@require_auth
@timing
def update_current_user(auth: AuthContext):
    """Update name, email and/or password of the authenticated user."""

    user = collaborators.current().identity_service().update_profile(auth.user.id, json_body())
    return json_response(user_schema.dump(user))


@bp.post("/logout")
@require_auth
@timing
def logout(auth: AuthContext):
    """Revoke the current token (or all of them with ``all_sessions``)."""

    data = logout_schema.load(json_body())
    collaborators.current().token_manager().logout(auth, all_sessions=data["all_sessions"])
    return _message("Logged out")


@bp.post("/refresh")
@require_auth
@timing
def refresh(auth: AuthContext):
    """Exchange the current token for a new one; the old one stops working."""

    issued = collaborators.current().token_manager().refresh(auth)
    return json_response(token_schema.dump(issued))


@bp.post("/email/verify")
@require_auth
@timing
def verify_email(auth: AuthContext):
    """Mark the authenticated user's email as verified."""

    collaborators.current().verification_service().verify(auth.user.id)
    return _message("Email verified successfully.")


@bp.post("/email/verification-notification")
@require_auth
@timing
def resend_verification(auth: AuthContext):
    """Send a fresh verification link to the authenticated user."""

    collaborators.current().verification_service().resend(auth.user.id)
    return _message("Verification link sent.")


# --------------------------------------------------------------------------- #
# Signed link
# --------------------------------------------------------------------------- #


@bp.get("/email/verify/<user_id>/<hash_>")
@timing
def verify_email_link(user_id: str, hash_: str):
    """Verify an email from the signed link sent by the notifier."""

    collaborators.current().verification_service().verify_from_link(
        user_id,
        hash_,
        request.args.get("expires"),
        request.args.get("signature"),
    )
    return _message("Email verified successfully.")
