from userauth.models.access_token import AccessToken
from userauth.models.user import ROLE_ADMIN, ROLE_USER, ROLES, User

__all__ = [
    "AccessToken",
    "ROLES",
    "ROLE_ADMIN",
    "ROLE_USER",
    "User",
]
