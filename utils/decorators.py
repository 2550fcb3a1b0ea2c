from __future__ import annotations
from functools import wraps
from typing import Any, Dict, Optional

from flask import request, g, current_app

from services.errors import Forbidden, Unauthorized
from utils.security import TokenError, TokenService


def authenticate(header: Optional[str], tokens: TokenService) -> Dict[str, Any]:
    """
    Resolve a bearer Authorization header to the access token's claims.
    Raises Unauthorized when no credential is presented and Forbidden when
    the token does not verify. The credential store is not consulted.
    """
    if not header:
        raise Unauthorized()
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        raise Unauthorized("Missing or invalid Authorization header.")
    token = token.strip()
    if not token:
        raise Unauthorized("Bearer token missing.")
    try:
        return tokens.verify_access_token(token)
    except TokenError as exc:
        raise Forbidden() from exc


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            tokens = current_app.extensions["session_manager"].tokens
            g.current_identity = authenticate(request.headers.get("Authorization"), tokens)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
