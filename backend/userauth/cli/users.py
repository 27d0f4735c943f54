"""Flask CLI commands for account administration."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from userauth.core import collaborators
from userauth.models.user import ROLE_ADMIN
from userauth.services._shared.errors import FieldValidationError, NotFoundError

LOGGER = logging.getLogger(__name__)


def _format_errors(errors: dict[str, list[str]]) -> str:
    return "; ".join(f"{field}: {' '.join(msgs)}" for field, msgs in sorted(errors.items()))


@click.group("users")
def users_cli() -> None:
    """Collection of account administration commands."""


@users_cli.command("create-admin")
@click.option("--name", required=True, help="Display name of the admin.")
@click.option("--email", required=True, help="Login email of the admin.")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password; prompted for when omitted.",
)
@with_appcontext
def create_admin_command(name: str, email: str, password: str) -> None:
    """Create an admin account whose email is already verified."""
    c = collaborators.current()
    payload = {
        "name": name,
        "email": email,
        "password": password,
        "password_confirmation": password,
        "role": ROLE_ADMIN,
    }
    try:
        user = c.identity_service().register(payload)
    except FieldValidationError as exc:
        raise click.ClickException(_format_errors(exc.errors)) from exc
    c.verification_service().verify(user.id)
    LOGGER.info("Admin created", extra={"event": "user.admin_created", "user_id": user.id})
    click.echo(f"Created admin #{user.id} <{user.email}>")


@users_cli.command("revoke-tokens")
@click.argument("email")
@with_appcontext
def revoke_tokens_command(email: str) -> None:
    """Log the user owning EMAIL out of every session."""
    c = collaborators.current()
    try:
        user = c.identity_service().get_user_by_email(email)
    except NotFoundError as exc:
        raise click.ClickException(f"No user with email {email!r}.") from exc
    removed = c.token_manager().revoke_all(user.id)
    click.echo(f"Revoked {removed} token(s) for {user.email}")
