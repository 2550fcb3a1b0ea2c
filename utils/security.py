"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT (TokenService)

TokenService takes its secrets and lifetimes explicitly; it never reads the
Flask config or the environment, so it can be built with fixed test secrets.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"
IDENTITY_CLAIMS = ("userId", "name", "email")


def hash_password(password: str, hasher: PasswordHasher = ph) -> str:
    """Hash a plaintext password using Argon2
    """
    return hasher.hash(password)


def verify_password(password: str, password_hash: str, hasher: PasswordHasher = ph) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return hasher.verify(password_hash, password)
    except VerifyMismatchError:
        return False


class TokenError(Exception):
    """Raised when a token fails verification."""


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID) so tokens minted in the same second differ.
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def identity_claims(user) -> Dict[str, str]:
    """Build the {userId, name, email} payload from a user record."""
    return {"userId": str(user.id), "name": user.name, "email": user.email}


class TokenService:
    """Mints and verifies access/refresh JWTs signed with independent secrets."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expires: timedelta = timedelta(minutes=1),
        refresh_expires: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("access and refresh secrets are required")
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm

    @classmethod
    def from_config(cls, config) -> "TokenService":
        return cls(
            access_secret=config["ACCESS_TOKEN_SECRET"],
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            access_expires=config["ACCESS_TOKEN_EXPIRES"],
            refresh_expires=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )

    def _mint(self, claims: Dict[str, Any], secret: str, lifetime: timedelta, token_type: str) -> str:
        now = _now()
        payload = {key: claims[key] for key in IDENTITY_CLAIMS}
        payload.update({"iat": now, "exp": now + lifetime, "type": token_type, "jti": generate_jti()})
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def mint_access_token(self, claims: Dict[str, Any]) -> str:
        return self._mint(claims, self.access_secret, self.access_expires, ACCESS)

    def mint_refresh_token(self, claims: Dict[str, Any]) -> str:
        return self._mint(claims, self.refresh_secret, self.refresh_expires, REFRESH)

    def verify(self, token: str, secret: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Decode and validate a JWT. Raises TokenExpired or TokenInvalid;
        callers that don't care which can catch TokenError.
        """
        if not token:
            raise TokenInvalid("Token missing")
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(f"Invalid token: {exc}") from exc

        if expected_type and decoded.get("type") != expected_type:
            raise TokenInvalid("Wrong token type")
        if any(key not in decoded for key in IDENTITY_CLAIMS):
            raise TokenInvalid("Token is missing identity claims")
        return decoded

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.access_secret, expected_type=ACCESS)

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.refresh_secret, expected_type=REFRESH)
