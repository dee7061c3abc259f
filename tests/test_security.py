from datetime import timedelta

import jwt
import pytest

from utils.security import (
    TokenExpired,
    TokenInvalid,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)


def test_password_hash_roundtrip():
    h = hash_password("pw1")
    assert h != "pw1"
    assert verify_password("pw1", h)
    assert not verify_password("pw2", h)


def test_password_hash_is_salted():
    assert hash_password("same") != hash_password("same")


def test_verify_password_rejects_garbage_hash():
    assert not verify_password("pw1", "not-a-hash")


def test_access_token_carries_user_id(app):
    with app.app_context():
        claims = decode_token(create_access_token("user-1"), expected_type="access")
    assert claims["sub"] == "user-1"
    assert claims["userId"] == "user-1"
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == 15 * 60


def test_tokens_issued_together_are_distinct(app):
    with app.app_context():
        assert create_refresh_token("user-1") != create_refresh_token("user-1")


def test_refresh_token_does_not_verify_as_access(app):
    with app.app_context():
        refresh = create_refresh_token("user-1")
        access = create_access_token("user-1")
        with pytest.raises(TokenInvalid):
            decode_token(refresh, expected_type="access")
        with pytest.raises(TokenInvalid):
            decode_token(access, expected_type="refresh")


def test_token_with_right_key_but_wrong_type_is_rejected(app):
    with app.app_context():
        forged = jwt.encode(
            {"sub": "user-1", "type": "refresh", "iss": app.config["JWT_ISSUER"]},
            app.config["ACCESS_TOKEN_SECRET"],
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalid, match="Wrong token type"):
            decode_token(forged, expected_type="access")


def test_token_from_another_issuer_is_rejected(app):
    with app.app_context():
        foreign = jwt.encode(
            {"sub": "user-1", "type": "access", "iss": "someone-else"},
            app.config["ACCESS_TOKEN_SECRET"],
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalid):
            decode_token(foreign)


def test_expired_access_token(app):
    app.config["ACCESS_TOKEN_EXPIRES"] = timedelta(seconds=-10)
    with app.app_context():
        token = create_access_token("user-1")
        with pytest.raises(TokenExpired):
            decode_token(token)


def test_garbage_token_is_invalid(app):
    with app.app_context():
        with pytest.raises(TokenInvalid):
            decode_token("not.a.jwt")


def test_refresh_token_without_expiry(app):
    app.config["REFRESH_TOKEN_EXPIRES"] = None
    with app.app_context():
        claims = decode_token(create_refresh_token("user-1"), expected_type="refresh")
    assert "exp" not in claims


def test_app_refuses_shared_signing_key():
    from api import create_app
    from api.config import TestingConfig

    with pytest.raises(RuntimeError):
        create_app("testing", test_config={"REFRESH_TOKEN_SECRET": TestingConfig.ACCESS_TOKEN_SECRET})
