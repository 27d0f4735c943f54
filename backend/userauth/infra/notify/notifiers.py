"""Verification notifier adapters."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from userauth.services._shared.ports import VerificationNotifier
from userauth.services.identity.dto import UserOut

log = logging.getLogger(__name__)


class LoggingNotifier(VerificationNotifier):
    """Write verification links to the application log (development default)."""

    def send_verification(self, user: UserOut, link: str) -> None:
        log.info(
            "Verification link for user %s: %s",
            user.id,
            link,
            extra={"event": "email.verification_sent", "user_id": user.id},
        )


@dataclass(slots=True)
class WebhookNotifier(VerificationNotifier):
    """
    POST verification requests to an external delivery service.

    The body is ``{"type": "email_verification", "user": {...}, "link": ...}``.
    Non-2xx answers raise :class:`requests.HTTPError`.

    :param url: Endpoint receiving the JSON payload.
    :param timeout: Request timeout in seconds.
    """

    url: str
    timeout: float = 5.0

    def send_verification(self, user: UserOut, link: str) -> None:
        payload = {
            "type": "email_verification",
            "user": {"id": user.id, "name": user.name, "email": user.email},
            "link": link,
        }
        response = requests.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        log.info(
            "Verification link delivered",
            extra={"event": "email.verification_sent", "user_id": user.id, "status": response.status_code},
        )
