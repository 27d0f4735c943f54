from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from userauth.services.identity.dto import UserOut


class VerificationNotifier(Protocol):
    """Port for delivering email verification links to users."""

    def send_verification(self, user: UserOut, link: str) -> None:
        """
        Deliver ``link`` to ``user.email``.

        Delivery failures are raised to the caller.
        """


@dataclass
class SentVerification:
    user_id: int
    email: str
    link: str


@dataclass
class InMemoryNotifier(VerificationNotifier):
    """Collects notifications instead of delivering them (tests)."""

    sent: list[SentVerification] = field(default_factory=list)

    def send_verification(self, user: UserOut, link: str) -> None:
        self.sent.append(SentVerification(user_id=user.id, email=user.email, link=link))

    def last_link_for(self, email: str) -> str | None:
        for item in reversed(self.sent):
            if item.email == email:
                return item.link
        return None
