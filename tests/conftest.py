"""Test fixtures: one app per test, each with a fresh in-memory SQLite store.

The testing config pins the signing secrets, so tokens minted in tests can be
verified with the same TokenService the app uses.
"""

import pytest

from api import create_app
from models import storage


@pytest.fixture()
def app():
    app = create_app("testing")
    yield app
    storage.close()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def sessions(app):
    """The app's SessionManager, for exercising the lifecycle without HTTP."""
    return app.extensions["session_manager"]


@pytest.fixture()
def tokens(sessions):
    return sessions.tokens


@pytest.fixture()
def registered_user(sessions):
    return sessions.signup("A", "a@x.com", "pw")


@pytest.fixture()
def app_factory():
    """Build extra apps with config overrides (lifetimes, rotation)."""
    def _make(**overrides):
        return create_app("testing", overrides=overrides)

    yield _make
    storage.close()
