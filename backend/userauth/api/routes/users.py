"""Admin user directory endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from userauth.api.deps import (
    json_body,
    json_response,
    parse_pagination,
    require_auth,
    require_role,
    timing,
)
from userauth.core import collaborators
from userauth.models.user import ROLE_ADMIN
from userauth.schemas import MetaSchema, UserFilterSchema, UserSchema
from userauth.services.tokens.dto import AuthContext

bp = Blueprint("users", __name__)

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
user_filter_schema = UserFilterSchema()
meta_schema = MetaSchema()


@bp.get("")
@require_auth
@require_role(ROLE_ADMIN)
@timing
def list_users(auth: AuthContext):
    """Return paginated users, newest first."""

    filters = user_filter_schema.load(request.args)
    pagination = parse_pagination(default_limit=int(current_app.config.get("USERS_PAGE_SIZE", 15)))
    service = collaborators.current().directory_service()
    page = service.list_users(auth.user, role=filters["role"], pagination=pagination)
    return json_response(
        {"data": user_list_schema.dump(page.items), "meta": meta_schema.dump(page.meta)}
    )


@bp.put("/<int:user_id>")
@require_auth
@require_role(ROLE_ADMIN)
@timing
def update_user(user_id: int, auth: AuthContext):
    """Update name, email and/or role of any user."""

    service = collaborators.current().directory_service()
    user = service.update_user(auth.user, user_id, json_body())
    return json_response(user_schema.dump(user))
