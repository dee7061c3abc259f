from __future__ import annotations
from functools import wraps
from flask import request, g, abort
from utils.security import decode_token, TokenError, Principal, ACCESS


def bearer_token() -> str:
    """Return the token from `Authorization: Bearer <token>` or abort 401."""
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        abort(401, description="Missing or invalid Authorization header")
    return token


def access_token_required():
    """
    Authenticate the caller once and hand the view a Principal.

    - no/malformed Authorization header -> 401
    - token fails verification (signature, expiry, type) -> 403
    The wrapped view gets `principal` as a keyword argument; the same
    object is stored on g.principal.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            try:
                decoded = decode_token(token, expected_type=ACCESS)
            except TokenError as e:
                abort(403, description=str(e))

            principal = Principal(user_id=decoded["sub"])
            g.principal = principal
            kwargs["principal"] = principal
            return fn(*args, **kwargs)

        return wrapper

    return decorator
