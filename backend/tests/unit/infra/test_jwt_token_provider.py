"""Unit tests for the Flask-JWT-Extended token provider."""

from __future__ import annotations

from datetime import timedelta

import pytest

from userauth.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from userauth.services._shared.ports import TokenDecodeError


@pytest.fixture()
def provider(app):
    with app.app_context():
        yield JWTTokenProvider()


def test_claims_carry_subject_and_jti(provider):
    token = provider.create_access_token(identity=42, expires_delta=False, jti="fixed-jti")

    claims = provider.decode(token)
    assert claims["sub"] == "42"
    assert claims["jti"] == "fixed-jti"
    assert claims["type"] == "access"
    assert "exp" not in claims


def test_expiring_token_has_exp(provider):
    token = provider.create_access_token(identity=1, expires_delta=timedelta(minutes=5))
    claims = provider.decode(token)
    assert claims["exp"] > claims["iat"]


def test_additional_claims_are_kept(provider):
    token = provider.create_access_token(
        identity=1, additional_claims={"scope": "cli"}, expires_delta=False, jti="j"
    )
    assert provider.decode(token)["scope"] == "cli"


def test_expired_token_rejected(provider):
    token = provider.create_access_token(identity=1, expires_delta=timedelta(seconds=-5))
    with pytest.raises(TokenDecodeError):
        provider.decode(token)


@pytest.mark.parametrize("mangle", [lambda t: t[:-2] + "xx", lambda t: "garbage", lambda t: ""])
def test_tampered_token_rejected(provider, mangle):
    token = provider.create_access_token(identity=1, expires_delta=False, jti="j")
    with pytest.raises(TokenDecodeError):
        provider.decode(mangle(token))


def test_foreign_signature_rejected(provider, app):
    token = provider.create_access_token(identity=1, expires_delta=False, jti="j")
    original = app.config["JWT_SECRET_KEY"]
    app.config["JWT_SECRET_KEY"] = "another-secret-with-enough-length-too"
    try:
        with pytest.raises(TokenDecodeError):
            provider.decode(token)
    finally:
        app.config["JWT_SECRET_KEY"] = original
