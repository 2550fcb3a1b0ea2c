"""
Environment-aware configuration.
Signing secrets, token lifetimes, refresh cookie settings, database and CORS.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

DEV_ACCESS_SECRET = "dev-access-secret-change-me"
DEV_REFRESH_SECRET = "dev-refresh-secret-change-me"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    DEBUG = False
    TESTING = False
    # CORS: the browser client sends the refresh cookie, so origins must be explicit
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///token-sessions.db")
    # Two independent secrets: one signs access tokens, the other refresh tokens
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", DEV_ACCESS_SECRET)
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", DEV_REFRESH_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "60")))
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", str(7 * 24 * 3600))))
    REFRESH_TOKEN_ROTATION = _env_flag("REFRESH_TOKEN_ROTATION")
    REFRESH_COOKIE_NAME = os.getenv("REFRESH_COOKIE_NAME", "refreshToken")
    REFRESH_COOKIE_PATH = os.getenv("REFRESH_COOKIE_PATH", "/")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    ACCESS_TOKEN_SECRET = "test-access-secret-0123456789abcdef"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-0123456789abcdef"
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=1)
    REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    REFRESH_TOKEN_ROTATION = False


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig


def validate_config(config) -> None:
    """Refuse to serve production traffic with unsafe signing secrets."""
    if config.get("DEBUG") or config.get("TESTING"):
        return
    access = config.get("ACCESS_TOKEN_SECRET")
    refresh = config.get("REFRESH_TOKEN_SECRET")
    if access in (None, "", DEV_ACCESS_SECRET) or refresh in (None, "", DEV_REFRESH_SECRET):
        raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be set in production")
    if access == refresh:
        raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
