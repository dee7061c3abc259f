"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Access / refresh JWT creation and verification via PyJWT
- JTI generation for token identifiers

Access and refresh tokens are signed with different secrets, so a refresh
token never verifies as an access token (and vice versa) even before the
"type" claim is checked.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError

from flask import current_app

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenInvalid(TokenError):
    """Bad signature, malformed token or wrong token type."""


class TokenExpired(TokenError):
    """Signature is fine but the token is past its exp claim."""


@dataclass(frozen=True)
class Principal:
    """Identity of the caller, taken from a verified access token."""
    user_id: str


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _signing_key(token_type: str) -> str:
    if token_type == ACCESS:
        return current_app.config["ACCESS_TOKEN_SECRET"]
    if token_type == REFRESH:
        return current_app.config["REFRESH_TOKEN_SECRET"]
    raise ValueError(f"Unknown token type: {token_type}")


def _create_token(user_id: str, token_type: str, expires_in: timedelta | None) -> str:
    now = _now()
    payload = {
        "iss": current_app.config.get("JWT_ISSUER", "todo-auth-api"),
        "sub": str(user_id),
        "userId": str(user_id),
        "iat": int(now.timestamp()),
        "type": token_type,
        "jti": generate_jti(),
    }
    if expires_in is not None:
        payload["exp"] = int((now + expires_in).timestamp())
    return jwt.encode(payload, _signing_key(token_type), algorithm=current_app.config["JWT_ALGORITHM"])


def create_access_token(user_id: str) -> str:
    """Short-lived token carried as `Authorization: Bearer <token>`."""
    return _create_token(user_id, ACCESS, current_app.config["ACCESS_TOKEN_EXPIRES"])


def create_refresh_token(user_id: str) -> str:
    """Long-lived token delivered in the refresh cookie.

    REFRESH_TOKEN_EXPIRES may be set to None to issue tokens without an
    exp claim; they then stay valid until rotated or cleared on logout.
    """
    return _create_token(user_id, REFRESH, current_app.config.get("REFRESH_TOKEN_EXPIRES"))


def decode_token(token: str, expected_type: str = ACCESS) -> Dict[str, Any]:
    """
    Decode and validate a JWT with the key for `expected_type`.
    Raises TokenExpired on an expired token and TokenInvalid on anything
    else (bad signature, garbage input, wrong type).
    """
    try:
        decoded = jwt.decode(
            token,
            _signing_key(expected_type),
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            issuer=current_app.config.get("JWT_ISSUER", "todo-auth-api"),
            options={"require": ["sub", "type", "iss"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired("Token expired")
    except jwt.InvalidTokenError as exc:
        raise TokenInvalid(f"Invalid token: {exc}")

    if decoded.get("type") != expected_type:
        raise TokenInvalid("Wrong token type")
    return decoded
