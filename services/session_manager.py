"""
Session lifecycle: signup, login, refresh, logout.

A user holds at most one refresh token, stored in ``User.refresh_token``.
Login overwrites it, logout blanks it, and refresh only accepts a token
that both matches the stored value and verifies against the refresh secret.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import NamedTuple, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import Argon2Error, InvalidHashError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user import User
from services.errors import (
    EmailConflict,
    InternalError,
    InvalidCredentials,
    InvalidRefreshToken,
    MissingFields,
    MissingRefreshToken,
)
from utils.security import (
    TokenError,
    TokenService,
    hash_password,
    identity_claims,
    ph,
    verify_password,
)

logger = logging.getLogger(__name__)


class TokenPair(NamedTuple):
    access_token: str
    # None when refresh did not rotate the stored token
    refresh_token: Optional[str] = None


@contextmanager
def _operation(name: str):
    """Turn store, hashing and signing failures into InternalError."""
    try:
        yield
    except (SQLAlchemyError, Argon2Error, InvalidHashError, jwt.PyJWTError) as exc:
        logger.exception("%s failed: %s", name, exc)
        raise InternalError() from exc


class SessionManager:
    def __init__(self, store, tokens: TokenService, hasher: PasswordHasher = ph, rotate_refresh_tokens: bool = False):
        self.store = store
        self.tokens = tokens
        self.hasher = hasher
        self.rotate_refresh_tokens = rotate_refresh_tokens

    @classmethod
    def from_config(cls, store, config) -> "SessionManager":
        return cls(
            store,
            TokenService.from_config(config),
            rotate_refresh_tokens=bool(config.get("REFRESH_TOKEN_ROTATION", False)),
        )

    def signup(self, name: str, email: str, password: str) -> User:
        """Create a user with an empty session slot. Does not log in."""
        if not name or not email or not password:
            raise MissingFields()

        with _operation("signup"):
            if self.store.get_user_by_email(email):
                raise EmailConflict(email)

            user = User(
                name=name,
                email=email,
                password_hash=hash_password(password, self.hasher),
                refresh_token="",
            )
            try:
                self.store.add_user(user)
            except IntegrityError as exc:
                # lost a race with a concurrent signup for the same email
                raise EmailConflict(email) from exc

        logger.info("user %s signed up", user.id)
        return user

    def login(self, email: str, password: str) -> TokenPair:
        """Verify credentials and start a new session, replacing any old one."""
        if not email or not password:
            raise MissingFields()

        with _operation("login"):
            user = self.store.get_user_by_email(email)
            if not user or not verify_password(password, user.password_hash, self.hasher):
                raise InvalidCredentials()

            claims = identity_claims(user)
            pair = TokenPair(
                access_token=self.tokens.mint_access_token(claims),
                refresh_token=self.tokens.mint_refresh_token(claims),
            )
            self.store.set_refresh_token(user, pair.refresh_token)

        logger.info("user %s logged in", user.id)
        return pair

    def refresh(self, refresh_token: Optional[str]) -> TokenPair:
        """
        Exchange a stored, valid refresh token for a new access token.

        Without rotation the same refresh token stays usable until it
        expires or the user logs out. With rotation a new refresh token
        replaces it and is returned in the pair.
        """
        if not refresh_token:
            raise MissingRefreshToken()

        with _operation("refresh"):
            user = self.store.get_user_by_refresh_token(refresh_token)
            if not user:
                raise InvalidRefreshToken()

            try:
                self.tokens.verify_refresh_token(refresh_token)
            except TokenError as exc:
                raise InvalidRefreshToken("Invalid or expired refresh token.") from exc

            claims = identity_claims(user)
            access_token = self.tokens.mint_access_token(claims)
            if not self.rotate_refresh_tokens:
                return TokenPair(access_token)

            new_refresh_token = self.tokens.mint_refresh_token(claims)
            self.store.set_refresh_token(user, new_refresh_token)

        logger.info("rotated refresh token for user %s", user.id)
        return TokenPair(access_token, new_refresh_token)

    def logout(self, refresh_token: Optional[str]) -> int:
        """Clear whichever session holds ``refresh_token``. Idempotent."""
        if not refresh_token:
            raise MissingRefreshToken()

        with _operation("logout"):
            cleared = self.store.clear_refresh_token(refresh_token)

        logger.info("logout cleared %d session(s)", cleared)
        return cleared
