"""
Session blueprint (mounted at /api/user):
- POST /register
- POST /login
- POST /token     (refresh cookie -> new access token, rotated refresh cookie)
- POST /logout
- GET  /username

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs signed
  with separate keys)
- Stores the current refresh token on the user row so /token and /logout can
  invalidate earlier ones; only one refresh token per user is live at a time
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, abort, current_app, make_response

from api import current_storage
from models.credential_store import CredentialStore
from models.schemas.user import UserCreateSchema, UserOutSchema, UserLoginSchema

from utils.decorators import access_token_required
from utils.security import (
    Principal,
    TokenError,
    REFRESH,
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
)

bp = Blueprint("auth", __name__)
logger = logging.getLogger(__name__)

user_create_schema = UserCreateSchema()
user_login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()


def credentials() -> CredentialStore:
    return CredentialStore(current_storage())


def _set_refresh_cookie(response, token: str):
    response.set_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        token,
        httponly=True,
        secure=current_app.config["REFRESH_COOKIE_SECURE"],
        samesite=current_app.config["REFRESH_COOKIE_SAMESITE"],
        path="/",
    )
    return response


def _token_response(access_token: str, refresh_token: str):
    response = make_response(jsonify({"accessToken": access_token}), 200)
    return _set_refresh_cookie(response, refresh_token)


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, password]
          properties:
            username: { type: string }
            password: { type: string }
    responses:
      200:
        description: Created user (id, username, createdAt)
      400:
        description: Missing fields or username already exists
    """
    data = user_create_schema.load(request.get_json(silent=True) or {})

    store = credentials()
    if store.username_taken(data["username"]):
        abort(400, description="Username already exists")

    user = store.create_user(data["username"], hash_password(data["password"]))
    logger.info("Registered user %s", user.id)
    return jsonify(user_out_schema.dump(user)), 200


@bp.post("/login")
def login():
    """
    Login: returns an access token and sets the refresh token cookie
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [username, password]
           properties:
             username: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (accessToken in body, refreshToken HTTP-only cookie)
      400:
        description: Invalid username or password
      404:
        description: User not found
    """
    data = user_login_schema.load(request.get_json(silent=True) or {})

    store = credentials()
    user = store.find_by_username(data["username"])
    if not user:
        abort(404, description="User not found")
    if not verify_password(data["password"], user.password_hash):
        abort(400, description="Invalid username or password")

    access_token = create_access_token(user.id)
    refresh_token = create_refresh_token(user.id)
    store.set_refresh_token(user, refresh_token)

    logger.info("User %s logged in", user.id)
    return _token_response(access_token, refresh_token)


@bp.post("/token")
def refresh():
    """
    Use the refresh token cookie to obtain a new access token (rotates the cookie)
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK (new accessToken, new refreshToken cookie)
      401:
        description: No refresh token cookie
      403:
        description: Refresh token invalid, expired or superseded
    """
    token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    if not token:
        abort(401, description="Refresh token required")

    try:
        decoded = decode_token(token, expected_type=REFRESH)
    except TokenError as e:
        logger.warning("Rejected refresh token: %s", e)
        abort(403, description=str(e))

    store = credentials()
    user = store.get(decoded["sub"])
    if not user or user.refresh_token != token:
        logger.warning("Refresh token does not match the stored session for %s", decoded["sub"])
        abort(403, description="Invalid or revoked refresh token")

    access_token = create_access_token(user.id)
    new_refresh_token = create_refresh_token(user.id)
    if not store.swap_refresh_token(user.id, token, new_refresh_token):
        logger.warning("Concurrent refresh lost the rotation for %s", user.id)
        abort(403, description="Invalid or revoked refresh token")

    logger.info("Rotated refresh token for %s", user.id)
    return _token_response(access_token, new_refresh_token)


@bp.post("/logout")
@access_token_required()
def logout(principal: Principal):
    """
    Logout: forget the stored refresh token and clear the cookie
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      204:
        description: Logged out
      401:
        description: Missing Authorization header
      403:
        description: Invalid access token
      404:
        description: User not found
    """
    store = credentials()
    user = store.get(principal.user_id)
    if not user:
        abort(404, description="User not found")

    store.clear_refresh_token(user)

    response = make_response("", 204)
    response.delete_cookie(current_app.config["REFRESH_COOKIE_NAME"], path="/")
    logger.info("User %s logged out", user.id)
    return response


@bp.get("/username")
@access_token_required()
def username(principal: Principal):
    """
    Username of the authenticated user
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
        schema:
          type: object
          properties:
            username: { type: string }
      401:
        description: Missing Authorization header
      403:
        description: Invalid access token
      404:
        description: User not found
    """
    user = credentials().get(principal.user_id)
    if not user:
        abort(404, description="User not found")
    return jsonify({"username": user.username}), 200
