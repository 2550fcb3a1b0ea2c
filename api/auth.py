"""
Authentication blueprint:
- POST   /auth/signup
- POST   /auth/login
- POST   /auth/refresh
- DELETE /auth/logout
- GET    /auth/          (bearer access token required)

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs signed with HS256,
  each kind with its own secret)
- Stores the current refresh token on the user row; it only travels in an HTTP-only cookie
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.user import UserSignupSchema, UserLoginSchema, IdentityClaimsSchema
from services.errors import MissingRefreshToken
from services.session_manager import SessionManager
from utils.decorators import jwt_required

bp = Blueprint("auth", __name__, url_prefix="/auth")

signup_schema = UserSignupSchema()
login_schema = UserLoginSchema()
claims_schema = IdentityClaimsSchema()


def _sessions() -> SessionManager:
    return current_app.extensions["session_manager"]


def _refresh_cookie() -> str | None:
    return request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])


def _cookie_options() -> dict:
    return {
        "path": current_app.config["REFRESH_COOKIE_PATH"],
        "secure": True,
        "httponly": True,
        "samesite": "Strict",
    }


def _set_refresh_cookie(response, token: str):
    response.set_cookie(current_app.config["REFRESH_COOKIE_NAME"], token, **_cookie_options())
    return response


@bp.get("/")
@jwt_required()
def me():
    """
    Identity of the bearer of the access token.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Decoded identity claims (userId, name, email)
      401:
        description: Authorization header missing
      403:
        description: Invalid or expired token
    """
    return jsonify(
        {
            "success": True,
            "data": claims_schema.dump(g.current_identity),
        }
    ), 200


@bp.post("/signup")
def signup():
    """
    Register a new user. Does not log the user in.
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
          required: [name, email, password]
          properties:
            name: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      400:
        description: A field is missing
      401:
        description: Email already registered
    """
    data = signup_schema.load(request.get_json(silent=True) or {})
    _sessions().signup(data["name"], data["email"], data["password"])
    return jsonify(
        {
            "success": True,
            "message": "User registered successfully.",
        }
    ), 201


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
           required: [email, password]
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (accessToken in body, refreshToken cookie set)
      400:
        description: A field is missing
      401:
        description: Invalid email or password
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    pair = _sessions().login(data["email"], data["password"])
    response = jsonify(
        {
            "success": True,
            "message": "Login successful.",
            "accessToken": pair.access_token,
        }
    )
    return _set_refresh_cookie(response, pair.refresh_token), 200


@bp.post("/refresh")
def refresh():
    """
    Use the refresh token cookie to obtain a new access token
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK (new accessToken in body)
      401:
        description: Refresh token cookie missing
      403:
        description: Refresh token unknown, superseded, expired or tampered
    """
    pair = _sessions().refresh(_refresh_cookie())
    response = jsonify(
        {
            "success": True,
            "accessToken": pair.access_token,
        }
    )
    if pair.refresh_token:
        _set_refresh_cookie(response, pair.refresh_token)
    return response, 200


@bp.delete("/logout")
def logout():
    """
    Logout: clears the stored refresh token and the cookie
    ---
    tags:
      - Auth
    responses:
      200:
        description: Logged out
      400:
        description: Refresh token cookie missing
    """
    try:
        _sessions().logout(_refresh_cookie())
    except MissingRefreshToken as exc:
        raise MissingRefreshToken(exc.message, status=400) from exc

    response = jsonify(
        {
            "success": True,
            "message": "Logout successful.",
        }
    )
    response.delete_cookie(current_app.config["REFRESH_COOKIE_NAME"], **_cookie_options())
    return response, 200
