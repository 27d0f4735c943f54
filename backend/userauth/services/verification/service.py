"""
EmailVerificationService
========================

Email ownership state machine: ``Unverified -> Verified``. The transition is
a conditional UPDATE, so racing verifications produce exactly one change and
the losers see :class:`AlreadyVerifiedError`.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from userauth.models.user import User
from userauth.services._shared.base import BaseService
from userauth.services._shared.errors import AlreadyVerifiedError, InvalidLinkError, NotFoundError
from userauth.services._shared.ports import VerificationNotifier
from userauth.services.identity.dto import UserOut
from userauth.services.verification.links import VerificationLinkSigner
from userauth.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


class EmailVerificationService(BaseService):
    """Verify email addresses and (re)send verification links."""

    def __init__(
        self,
        *,
        signer: VerificationLinkSigner,
        notifier: VerificationNotifier,
    ) -> None:
        self.signer = signer
        self.notifier = notifier

    # --------------------------------------------------------------------- #
    # Transitions
    # --------------------------------------------------------------------- #

    def verify(self, user_id: int) -> UserOut:
        """
        Mark the authenticated user's email as verified.

        :raises NotFoundError: If the user does not exist.
        :raises AlreadyVerifiedError: If the email was already verified.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return self._transition(uow, user)

    def verify_from_link(
        self,
        user_id: int | str,
        hash_: str,
        expires: str | int | None,
        signature: str | None,
    ) -> UserOut:
        """
        Verify through a signed link; no bearer token is involved.

        :raises InvalidLinkError: On a bad signature, an expired link, an
            unknown user, a hash that does not match the current email or an
            identifier that is not an integer.
        :raises AlreadyVerifiedError: If the email was already verified.
        """
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            raise InvalidLinkError() from None
        self.signer.check_signature(user_id, hash_, expires, signature)

        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None or not self.signer.matches_email(user.id, hash_, user.email):
                raise InvalidLinkError()
            return self._transition(uow, user)

    def _transition(self, uow: SQLAlchemyUnitOfWork, user: User) -> UserOut:
        if not uow.users.mark_email_verified(user.id, at=datetime.now(UTC)):
            raise AlreadyVerifiedError()
        uow.users.reload(user)
        log.info("Email verified", extra={"event": "email.verified", "user_id": user.id})
        return UserOut.from_model(user)

    # --------------------------------------------------------------------- #
    # Notifications
    # --------------------------------------------------------------------- #

    def resend(self, user_id: int) -> None:
        """
        Send a fresh verification link.

        :raises NotFoundError: If the user does not exist.
        :raises AlreadyVerifiedError: If there is nothing left to verify.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            out = UserOut.from_model(user)

        if out.is_verified:
            raise AlreadyVerifiedError()
        self._send(out)

    def notify_registered(self, user: UserOut) -> None:
        """Post-registration hook: send the first link to unverified users."""
        if not user.is_verified:
            self._send(user)

    def _send(self, user: UserOut) -> None:
        link = self.signer.build(user.id, user.email)
        self.notifier.send_verification(user, link)
        log.info(
            "Verification link sent",
            extra={"event": "email.verification_requested", "user_id": user.id},
        )
