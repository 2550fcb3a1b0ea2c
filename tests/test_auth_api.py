"""HTTP surface of the /auth blueprint.

Covers:
1. Signup + duplicate prevention
2. Login -> access token in body, refresh token in cookie
3. Refresh from the cookie
4. Logout clears cookie and stored token
5. Protected GET /auth/
6. Generic 500 envelope for store and unexpected failures
"""

import logging
from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from models import storage

COOKIE = "refreshToken"
USER = {"name": "A", "email": "a@x.com", "password": "pw"}


def _signup(client, **body):
    return client.post("/auth/signup", json={**USER, **body})


def _login(client, email="a@x.com", password="pw"):
    return client.post("/auth/login", json={"email": email, "password": password})


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def _set_cookie_header(resp):
    return next(h for h in resp.headers.getlist("Set-Cookie") if h.startswith(f"{COOKIE}="))


# ═══════════════════════════════════════════════════════════
# Signup
# ═══════════════════════════════════════════════════════════


def test_signup_created(client):
    r = _signup(client)
    assert r.status_code == 201
    assert r.get_json() == {"success": True, "message": "User registered successfully."}
    # signup never logs in
    assert client.get_cookie(COOKIE) is None


def test_signup_duplicate_email_is_401(client):
    assert _signup(client).status_code == 201
    r = _signup(client, name="Other")
    assert r.status_code == 401
    body = r.get_json()
    assert body["success"] is False
    assert body["message"] == "User with this email a@x.com already exists."


def test_signup_email_is_normalized(client):
    _signup(client, email="  A@X.com ")
    assert _signup(client).status_code == 401


@pytest.mark.parametrize("missing", ["name", "email", "password"])
def test_signup_missing_field_is_400(client, missing):
    body = {k: v for k, v in USER.items() if k != missing}
    r = client.post("/auth/signup", json=body)
    assert r.status_code == 400
    payload = r.get_json()
    assert payload["success"] is False
    assert payload["message"] == "All fields are required."
    assert missing in payload["details"]


def test_signup_without_json_is_400(client):
    r = client.post("/auth/signup", data="not json", content_type="text/plain")
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


def test_login_sets_cookie_and_returns_access_token(client, tokens):
    _signup(client)
    r = _login(client)
    assert r.status_code == 200
    body = r.get_json()
    assert body["success"] is True
    assert body["message"] == "Login successful."
    assert tokens.verify_access_token(body["accessToken"])["email"] == "a@x.com"
    # refresh token only travels in the cookie
    assert "refreshToken" not in body

    header = _set_cookie_header(r)
    assert "HttpOnly" in header
    assert "Secure" in header
    assert "SameSite=Strict" in header
    assert "Max-Age" not in header
    assert tokens.verify_refresh_token(client.get_cookie(COOKIE).value)


def test_login_failures_share_one_message(client):
    _signup(client)
    wrong_password = _login(client, password="nope")
    unknown_email = _login(client, email="nobody@x.com")
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.get_json() == unknown_email.get_json()
    assert wrong_password.get_json()["message"] == "Invalid email or password."


def test_login_missing_field_is_400(client):
    r = client.post("/auth/login", json={"email": "a@x.com"})
    assert r.status_code == 400
    assert r.get_json()["message"] == "All fields are required."


# ═══════════════════════════════════════════════════════════
# Refresh
# ═══════════════════════════════════════════════════════════


def test_refresh_returns_new_access_token(client, tokens):
    _signup(client)
    _login(client)
    first = client.post("/auth/refresh")
    assert first.status_code == 200
    assert tokens.verify_access_token(first.get_json()["accessToken"])["name"] == "A"
    # not rotated: cookie untouched and still usable
    assert not first.headers.getlist("Set-Cookie")
    assert client.post("/auth/refresh").status_code == 200


def test_refresh_without_cookie_is_401(client):
    r = client.post("/auth/refresh")
    assert r.status_code == 401
    assert r.get_json() == {"success": False, "error": "MISSING_TOKEN", "message": "Refresh token not found."}


def test_refresh_with_unknown_token_is_403(client):
    client.set_cookie(COOKIE, "never-issued")
    r = client.post("/auth/refresh")
    assert r.status_code == 403
    assert r.get_json()["message"] == "Invalid refresh token."


def test_refresh_rotates_cookie_when_enabled(app_factory):
    client = app_factory(REFRESH_TOKEN_ROTATION=True).test_client()
    _signup(client)
    _login(client)
    old = client.get_cookie(COOKIE).value

    r = client.post("/auth/refresh")
    assert r.status_code == 200
    new = client.get_cookie(COOKIE).value
    assert new != old

    client.set_cookie(COOKIE, old)
    assert client.post("/auth/refresh").status_code == 403


# ═══════════════════════════════════════════════════════════
# Logout
# ═══════════════════════════════════════════════════════════


def test_logout_clears_cookie_and_session(client):
    _signup(client)
    _login(client)
    token = client.get_cookie(COOKIE).value

    r = client.delete("/auth/logout")
    assert r.status_code == 200
    assert r.get_json() == {"success": True, "message": "Logout successful."}
    assert _set_cookie_header(r).startswith(f"{COOKIE}=;")
    assert client.get_cookie(COOKIE) is None

    # the cleared token can no longer mint access tokens
    client.set_cookie(COOKIE, token)
    assert client.post("/auth/refresh").status_code == 403


def test_logout_without_cookie_is_400(client):
    r = client.delete("/auth/logout")
    assert r.status_code == 400
    assert r.get_json()["message"] == "Refresh token not found."


def test_logout_with_unknown_cookie_succeeds(client):
    client.set_cookie(COOKIE, "never-issued")
    assert client.delete("/auth/logout").status_code == 200


# ═══════════════════════════════════════════════════════════
# Protected identity endpoint
# ═══════════════════════════════════════════════════════════


def test_identity_requires_header(client):
    r = client.get("/auth/")
    assert r.status_code == 401
    assert r.get_json()["message"] == "Authorization header missing."


def test_identity_rejects_bad_token(client):
    r = client.get("/auth/", headers=_bearer("garbage"))
    assert r.status_code == 403
    assert r.get_json()["message"] == "Invalid or expired token."


def test_expired_access_token_is_403(app_factory):
    client = app_factory(ACCESS_TOKEN_EXPIRES=timedelta(seconds=-1)).test_client()
    _signup(client)
    access = _login(client).get_json()["accessToken"]
    assert client.get("/auth/", headers=_bearer(access)).status_code == 403


def test_full_session_scenario(client, sessions):
    assert _signup(client).status_code == 201

    login = _login(client)
    assert login.status_code == 200
    access = login.get_json()["accessToken"]
    assert client.get_cookie(COOKIE) is not None

    me = client.get("/auth/", headers=_bearer(access))
    assert me.status_code == 200
    user_id = sessions.store.get_user_by_email("a@x.com").id
    assert me.get_json() == {
        "success": True,
        "data": {"userId": user_id, "name": "A", "email": "a@x.com"},
    }

    assert client.delete("/auth/logout").status_code == 200
    assert client.post("/auth/refresh").status_code == 401


# ═══════════════════════════════════════════════════════════
# Misc
# ═══════════════════════════════════════════════════════════


def test_health_and_root(client):
    assert client.get("/health").get_json() == {"status": "ok", "database": "ok", "version": "1.0.0"}
    assert client.get("/").status_code == 200


def test_unknown_route_uses_error_envelope(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.get_json()["success"] is False


def test_access_token_survives_logout(client):
    _signup(client)
    access = _login(client).get_json()["accessToken"]
    assert client.delete("/auth/logout").status_code == 200

    # the gate trusts the signature alone; the token lives until it expires
    r = client.get("/auth/", headers=_bearer(access))
    assert r.status_code == 200
    assert r.get_json()["data"]["email"] == "a@x.com"


# ═══════════════════════════════════════════════════════════
# Server errors
# ═══════════════════════════════════════════════════════════


INTERNAL = {"success": False, "error": "INTERNAL_ERROR", "message": "Internal Server Error"}


def test_store_failure_is_generic_500(client, monkeypatch):
    def broken(*args, **kwargs):
        raise SQLAlchemyError("secret db detail")

    monkeypatch.setattr(storage, "get_user_by_email", broken)
    r = client.post("/auth/login", json={"email": "a@x.com", "password": "pw"})
    assert r.status_code == 500
    assert r.get_json() == INTERNAL
    assert "secret" not in r.get_data(as_text=True)


def test_unexpected_exception_is_logged_and_generic_500(client, monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise RuntimeError("secret runtime detail")

    monkeypatch.setattr(storage, "get_user_by_email", broken)
    with caplog.at_level(logging.ERROR, logger="api.errors"):
        r = client.post("/auth/login", json={"email": "a@x.com", "password": "pw"})
    assert r.status_code == 500
    assert r.get_json() == INTERNAL
    assert "secret" not in r.get_data(as_text=True)
    assert "secret runtime detail" in caplog.text
