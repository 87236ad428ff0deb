# tests/test_tokens.py

from datetime import timedelta
import pytest
from fastapi import Response

from cleancloak.core.config import settings
from cleancloak.core.jwt import TokenService, InvalidTokenError, TokenConfigError
from cleancloak.core.security import set_session_cookie, clear_session_cookie
from cleancloak.db import mongo


def test_issued_token_verifies_with_same_secret():
    tokens = TokenService("s3cret")
    token = tokens.issue("652f1c2b9d1e8a0012345678")
    assert tokens.verify(token) == "652f1c2b9d1e8a0012345678"


def test_token_rejected_with_different_secret():
    token = TokenService("s3cret").issue("abc")
    with pytest.raises(InvalidTokenError):
        TokenService("other-secret").verify(token)


def test_expired_token_rejected():
    tokens = TokenService("s3cret", expires_delta=timedelta(seconds=-5))
    token = tokens.issue("abc")
    with pytest.raises(InvalidTokenError):
        tokens.verify(token)


def test_garbage_token_rejected():
    with pytest.raises(InvalidTokenError):
        TokenService("s3cret").verify("not.a.jwt")


def test_missing_secret_is_config_error():
    tokens = TokenService(None)
    with pytest.raises(TokenConfigError):
        tokens.ensure_configured()
    with pytest.raises(TokenConfigError):
        tokens.verify("anything")


def test_default_lifetime_is_seven_days():
    tokens = TokenService.from_settings(settings)
    assert tokens.expires_delta == timedelta(days=7)
    assert settings.session_max_age == 7 * 24 * 60 * 60


def test_session_cookie_is_lax_outside_production():
    response = Response()
    set_session_cookie(response, "tok", settings.model_copy(update={"ENVIRONMENT": "development"}))
    header = response.headers["set-cookie"].lower()
    assert "httponly" in header
    assert "samesite=lax" in header
    assert "secure" not in header
    assert f"max-age={7 * 24 * 60 * 60}" in header


def test_session_cookie_is_cross_site_in_production():
    response = Response()
    set_session_cookie(response, "tok", settings.model_copy(update={"ENVIRONMENT": "production"}))
    header = response.headers["set-cookie"].lower()
    assert "samesite=none" in header
    assert "secure" in header


def test_logout_cookie_uses_sentinel():
    response = Response()
    clear_session_cookie(response)
    header = response.headers["set-cookie"].lower()
    assert header.startswith("token=none")
    assert "max-age=10" in header


def test_logout_cookie_matches_session_attributes_in_production():
    response = Response()
    clear_session_cookie(response, settings.model_copy(update={"ENVIRONMENT": "production"}))
    header = response.headers["set-cookie"].lower()
    assert header.startswith("token=none")
    assert "samesite=none" in header
    assert "secure" in header


def test_mongo_client_returns_aware_datetimes():
    assert mongo.client.codec_options.tz_aware is True
