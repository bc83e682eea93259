from datetime import datetime, timedelta, timezone

import jwt
import pytest
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from adminportal.identity.infrastructure.jwt_service import JWTSessionTokenService


def test_session_claims_shape(token_service, user_factory):
    user = user_factory("CLIENT_USER", tenant_id="t-1")
    claims = token_service.verify(token_service.issue(user))
    for key in ("userId", "sub", "role", "email", "type", "iat", "exp"):
        assert key in claims
    assert claims["userId"] == claims["sub"] == user.id
    assert claims["role"] == "CLIENT_USER"
    assert "tenant_id" not in claims


def test_token_lifetime_is_seven_days(token_service, user_factory):
    claims = token_service.verify(token_service.issue(user_factory("ADMIN")))
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_wrong_secret_rejected(token_service, user_factory):
    other = JWTSessionTokenService("another-secret-entirely-0123456789")
    with pytest.raises(InvalidTokenError):
        other.verify(token_service.issue(user_factory("ADMIN")))


def test_expired_rejected(settings):
    token = jwt.encode(
        {"sub": "u-1", "type": "session", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(ExpiredSignatureError):
        JWTSessionTokenService(settings.jwt_secret).verify(token)


def test_non_session_token_rejected(settings):
    token = jwt.encode(
        {"sub": "u-1", "type": "refresh", "exp": datetime.now(timezone.utc) + timedelta(minutes=1)},
        settings.jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        JWTSessionTokenService(settings.jwt_secret).verify(token)
