"""Tests for Google sign-in, session cookies and the dev login."""
import pytest
from httpx import AsyncClient

from app.core.config import settings
from app.core.deps import COOKIE_NAME, CSRF_HEADER
from app.core.security import (
    OAuthState,
    create_session_token,
    decode_session_token,
    encode_oauth_state,
    hash_user_agent,
)
from app.routers import auth as auth_router
from app.services.google_oauth import GoogleUserInfo

USER_AGENT = "pytest-agent"


@pytest.mark.asyncio
async def test_login_redirects_to_google(client: AsyncClient):
    response = await client.get("/auth/google/login", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"].startswith("https://accounts.google.com/")
    assert "oauth_state" in response.headers.get("set-cookie", "")


@pytest.mark.asyncio
async def test_me_requires_session(client: AsyncClient):
    response = await client.get("/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_for_unregistered_google_user(client: AsyncClient):
    client.cookies.set(COOKIE_NAME, create_session_token("New.Person@Example.com", "New Person"))
    response = await client.get("/auth/me")
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "new.person@example.com"
    assert data["is_registered"] is False
    assert data["role"] is None


@pytest.mark.asyncio
async def test_me_reads_flags_from_database(client: AsyncClient, make_resident):
    pending = make_resident(approved=False)
    # Cookie claims are stale on purpose; /me must reflect the row
    client.cookies.set(COOKIE_NAME, create_session_token(pending.email, pending.name))
    response = await client.get("/auth/me")
    data = response.json()
    assert data["is_registered"] is True
    assert data["is_approved"] is False
    assert data["role"] == "RESIDENT"
    assert data["resident_id"] == str(pending.id)


@pytest.mark.asyncio
async def test_tampered_cookie_is_rejected(client: AsyncClient):
    client.cookies.set(COOKIE_NAME, "not-a-jwt")
    response = await client.get("/auth/me")
    assert response.status_code == 401


def test_previous_secret_still_verifies(monkeypatch):
    token = create_session_token("someone@example.com", "Someone")
    monkeypatch.setattr(settings, "JWT_SECRET", "rotated-secret")
    monkeypatch.setattr(settings, "JWT_SECRET_PREVIOUS", "test-secret")
    assert decode_session_token(token)["email"] == "someone@example.com"


@pytest.mark.asyncio
async def test_refresh_requires_csrf_header(client: AsyncClient, resident, login):
    login(client, resident)
    response = await client.post("/auth/session/refresh", headers={CSRF_HEADER: ""})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_refresh_reissues_cookie_with_current_flags(client: AsyncClient, resident, login):
    login(client, resident)
    response = await client.post("/auth/session/refresh")
    assert response.status_code == 200
    assert response.json()["is_approved"] is True
    token = response.cookies.get(COOKIE_NAME)
    assert decode_session_token(token)["role"] == "RESIDENT"


@pytest.mark.asyncio
async def test_logout_clears_cookie(client: AsyncClient, resident, login):
    login(client, resident)
    response = await client.post("/auth/logout")
    assert response.status_code == 200
    assert f'{COOKIE_NAME}=""' in response.headers["set-cookie"]


# =============================================================================
# OAuth callback
# =============================================================================

def _set_state_cookie(client: AsyncClient, state: str = "state-123", nonce: str = "nonce-1"):
    oauth_state = OAuthState(state=state, nonce=nonce, ua_hash=hash_user_agent(USER_AGENT))
    client.cookies.set("oauth_state", encode_oauth_state(oauth_state))


@pytest.mark.asyncio
async def test_callback_rejects_state_mismatch(client: AsyncClient):
    _set_state_cookie(client)
    response = await client.get(
        "/auth/google/callback",
        params={"code": "abc", "state": "other-state"},
        headers={"User-Agent": USER_AGENT},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"].endswith("/login?error=state_mismatch")


@pytest.mark.asyncio
async def test_callback_without_state_cookie(client: AsyncClient):
    response = await client.get(
        "/auth/google/callback",
        params={"code": "abc", "state": "state-123"},
        follow_redirects=False,
    )
    assert response.headers["location"].endswith("/login?error=state_expired")


@pytest.mark.asyncio
async def test_callback_with_corrupt_state_cookie(client: AsyncClient):
    client.cookies.set("oauth_state", "not-json")
    response = await client.get(
        "/auth/google/callback",
        params={"code": "abc", "state": "state-123"},
        follow_redirects=False,
    )
    assert response.headers["location"].endswith("/login?error=invalid_state")


@pytest.mark.asyncio
async def test_callback_from_another_browser(client: AsyncClient):
    _set_state_cookie(client)
    response = await client.get(
        "/auth/google/callback",
        params={"code": "abc", "state": "state-123"},
        headers={"User-Agent": "some-other-browser"},
        follow_redirects=False,
    )
    assert response.headers["location"].endswith("/login?error=state_mismatch")


@pytest.mark.asyncio
async def test_callback_sends_new_user_to_registration(client: AsyncClient, monkeypatch):
    async def fake_exchange(code):
        return {"id_token": "signed-token"}

    def fake_verify(token, expected_nonce):
        assert expected_nonce == "nonce-1"
        return GoogleUserInfo(
            sub="123", email="guest.user@example.com", name="Guest User", picture=None
        )

    monkeypatch.setattr(auth_router, "exchange_code_for_tokens", fake_exchange)
    monkeypatch.setattr(auth_router, "verify_id_token", fake_verify)
    _set_state_cookie(client)

    response = await client.get(
        "/auth/google/callback",
        params={"code": "abc", "state": "state-123"},
        headers={"User-Agent": USER_AGENT},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == f"{settings.FRONTEND_URL}/register"
    token = response.cookies.get(COOKIE_NAME)
    assert decode_session_token(token)["is_registered"] is False


@pytest.mark.asyncio
async def test_callback_sends_registered_user_home(client: AsyncClient, resident, monkeypatch):
    async def fake_exchange(code):
        return {"id_token": "signed-token"}

    def fake_verify(token, expected_nonce):
        return GoogleUserInfo(sub="456", email=resident.email, name=resident.name, picture=None)

    monkeypatch.setattr(auth_router, "exchange_code_for_tokens", fake_exchange)
    monkeypatch.setattr(auth_router, "verify_id_token", fake_verify)
    _set_state_cookie(client)

    response = await client.get(
        "/auth/google/callback",
        params={"code": "abc", "state": "state-123"},
        headers={"User-Agent": USER_AGENT},
        follow_redirects=False,
    )
    assert response.headers["location"] == f"{settings.FRONTEND_URL}/"


@pytest.mark.asyncio
async def test_callback_invalid_id_token(client: AsyncClient, monkeypatch):
    async def fake_exchange(code):
        return {"id_token": "bad"}

    def fake_verify(token, expected_nonce):
        raise ValueError("Invalid nonce")

    monkeypatch.setattr(auth_router, "exchange_code_for_tokens", fake_exchange)
    monkeypatch.setattr(auth_router, "verify_id_token", fake_verify)
    _set_state_cookie(client)

    response = await client.get(
        "/auth/google/callback",
        params={"code": "abc", "state": "state-123"},
        headers={"User-Agent": USER_AGENT},
        follow_redirects=False,
    )
    assert response.headers["location"].endswith("/login?error=token_invalid")


# =============================================================================
# Dev login
# =============================================================================

@pytest.mark.asyncio
async def test_dev_login_requires_secret(client: AsyncClient):
    response = await client.post(
        "/dev/login-as",
        json={"email": "dev@example.com"},
        headers={"X-Dev-Secret": "wrong"},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_dev_login_sets_session(client: AsyncClient, resident):
    response = await client.post(
        "/dev/login-as",
        json={"email": resident.email, "name": "Ignored"},
        headers={"X-Dev-Secret": "test-dev-secret"},
    )
    assert response.status_code == 200
    assert response.json()["is_registered"] is True
    assert response.cookies.get(COOKIE_NAME)
