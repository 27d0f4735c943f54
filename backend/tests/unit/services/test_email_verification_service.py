"""Unit tests for EmailVerificationService using the in-memory notifier."""

from __future__ import annotations

from datetime import timedelta

import pytest
from freezegun import freeze_time

from tests.factories.user import UserFactory
from tests.helpers.utils import split_link
from userauth.repositories.user import UserRepository
from userauth.services._shared.errors import (
    AlreadyVerifiedError,
    InvalidLinkError,
    NotFoundError,
)
from userauth.services._shared.ports import InMemoryNotifier
from userauth.services.identity.dto import UserOut
from userauth.services.verification.links import VerificationLinkSigner
from userauth.services.verification.service import EmailVerificationService


@pytest.fixture()
def notifier() -> InMemoryNotifier:
    return InMemoryNotifier()


@pytest.fixture()
def signer() -> VerificationLinkSigner:
    return VerificationLinkSigner(
        secret_key="unit-secret", base_url="http://testserver", ttl_minutes=60
    )


@pytest.fixture()
def service(signer, notifier) -> EmailVerificationService:
    return EmailVerificationService(signer=signer, notifier=notifier)


def _link_parts(link: str) -> tuple[int, str, str, str]:
    """Return ``(user_id, hash, expires, signature)`` from a sent link."""
    path, query = split_link(link)
    user_id, hash_ = path.rstrip("/").split("/")[-2:]
    return int(user_id), hash_, query["expires"], query["signature"]


class TestVerify:
    def test_verify_marks_email(self, service, session):
        user = UserFactory()

        result = service.verify(user.id)

        assert result.is_verified
        assert UserRepository(session=session).get(user.id).email_verified_at is not None

    def test_verify_twice_reports_already_verified(self, service):
        user = UserFactory()
        service.verify(user.id)
        with pytest.raises(AlreadyVerifiedError):
            service.verify(user.id)

    def test_verify_keeps_original_timestamp(self, service):
        user = UserFactory(verified=True)
        before = UserOut.from_model(user).email_verified_at

        with pytest.raises(AlreadyVerifiedError):
            service.verify(user.id)
        assert UserOut.from_model(user).email_verified_at == before

    def test_verify_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.verify(999)


class TestVerifyFromLink:
    def test_valid_link_verifies(self, service, signer):
        user = UserFactory()
        user_id, hash_, expires, signature = _link_parts(signer.build(user.id, user.email))

        assert service.verify_from_link(user_id, hash_, expires, signature).is_verified

    def test_link_used_twice(self, service, signer):
        user = UserFactory()
        parts = _link_parts(signer.build(user.id, user.email))

        service.verify_from_link(*parts)
        with pytest.raises(AlreadyVerifiedError):
            service.verify_from_link(*parts)

    def test_tampered_signature(self, service, signer):
        user = UserFactory()
        user_id, hash_, expires, signature = _link_parts(signer.build(user.id, user.email))

        with pytest.raises(InvalidLinkError):
            service.verify_from_link(user_id, hash_, expires, "0" * len(signature))

    def test_link_for_other_user_id(self, service, signer):
        user, other = UserFactory(), UserFactory()
        _, hash_, expires, signature = _link_parts(signer.build(user.id, user.email))

        with pytest.raises(InvalidLinkError):
            service.verify_from_link(other.id, hash_, expires, signature)

    def test_expired_link(self, service, signer):
        user = UserFactory()
        with freeze_time("2024-03-01 08:00:00") as frozen:
            parts = _link_parts(signer.build(user.id, user.email))
            frozen.tick(timedelta(minutes=61))
            with pytest.raises(InvalidLinkError):
                service.verify_from_link(*parts)

    def test_link_dies_when_email_changes(self, service, signer, session):
        user = UserFactory(email="before@example.com")
        parts = _link_parts(signer.build(user.id, user.email))

        UserRepository(session=session).update(user, email="after@example.com")
        session.commit()

        with pytest.raises(InvalidLinkError):
            service.verify_from_link(*parts)

    def test_link_for_deleted_user(self, service, signer, session):
        user = UserFactory()
        parts = _link_parts(signer.build(user.id, user.email))
        session.delete(user)
        session.commit()

        with pytest.raises(InvalidLinkError):
            service.verify_from_link(*parts)

    @pytest.mark.parametrize("raw_id", ["abc", "", None, "1.5"])
    def test_non_integer_user_id(self, service, raw_id):
        with pytest.raises(InvalidLinkError):
            service.verify_from_link(raw_id, "deadbeef", "1", "x")


class TestNotifications:
    def test_resend_sends_fresh_link(self, service, notifier, signer):
        user = UserFactory(email="resend@example.com")

        service.resend(user.id)

        link = notifier.last_link_for("resend@example.com")
        assert link is not None
        assert link.startswith(f"http://testserver/api/auth/email/verify/{user.id}/")
        service.verify_from_link(*_link_parts(link))

    def test_resend_when_verified(self, service, notifier):
        user = UserFactory(verified=True)
        with pytest.raises(AlreadyVerifiedError):
            service.resend(user.id)
        assert notifier.sent == []

    def test_resend_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.resend(999)

    def test_notify_registered_skips_verified(self, service, notifier):
        unverified = UserOut.from_model(UserFactory())
        verified = UserOut.from_model(UserFactory(verified=True))

        service.notify_registered(unverified)
        service.notify_registered(verified)

        assert [s.user_id for s in notifier.sent] == [unverified.id]
