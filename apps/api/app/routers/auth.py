"""Authentication router with Google OAuth and session management."""

import logging

import httpx
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import COOKIE_NAME, get_db, get_token_payload, require_csrf_header
from app.core.rate_limit import AUTH_LIMIT, limiter
from app.core.security import (
    OAuthStateError,
    encode_oauth_state,
    new_oauth_state,
    verify_oauth_state,
)
from app.schemas.auth import MeResponse, TokenPayload
from app.services import auth_service
from app.services.google_oauth import (
    build_authorization_url,
    exchange_code_for_tokens,
    verify_id_token,
)

logger = logging.getLogger(__name__)

router = APIRouter()

OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_STATE_MAX_AGE = 300  # 5 minutes


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRES_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
    )


# =============================================================================
# OAuth Endpoints
# =============================================================================

def _frontend(path: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}{path}"


def _login_error(error_code: str) -> RedirectResponse:
    """Back to the login page with an error code; the state cookie is dropped."""
    response = RedirectResponse(url=_frontend(f"/login?error={error_code}"), status_code=302)
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/auth")
    return response


@router.get("/google/login")
@limiter.limit(AUTH_LIMIT)
def google_login(request: Request):
    """
    Start the Google sign-in flow.

    State and nonce go into a short-lived cookie bound to the user-agent.
    """
    oauth_state = new_oauth_state(request.headers.get("user-agent", ""))

    response = RedirectResponse(
        url=build_authorization_url(oauth_state.state, oauth_state.nonce), status_code=302
    )
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=encode_oauth_state(oauth_state),
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/auth",
    )
    return response


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    db: Session = Depends(get_db),
):
    """
    Handle the Google OAuth callback.

    Unregistered users land on the registration page, everyone else on the
    home page. Every failure redirects to /login?error=<code>.
    """
    if error:
        return _login_error(f"google_{error}")
    if not code or not state:
        return _login_error("missing_params")

    try:
        stored = verify_oauth_state(
            request.cookies.get(OAUTH_STATE_COOKIE),
            state,
            request.headers.get("user-agent", ""),
        )
    except OAuthStateError as e:
        return _login_error(e.code)

    try:
        tokens = await exchange_code_for_tokens(code)
    except httpx.HTTPError:
        logger.warning("Google token exchange failed", exc_info=True)
        return _login_error("token_exchange_failed")

    try:
        google_user = verify_id_token(tokens["id_token"], expected_nonce=stored.nonce)
    except (KeyError, ValueError):
        return _login_error("token_invalid")

    token, me = auth_service.session_for_google_user(db, google_user)

    response = RedirectResponse(
        url=_frontend("/" if me.is_registered else "/register"), status_code=302
    )
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/auth")
    set_session_cookie(response, token)
    return response


# =============================================================================
# Session Endpoints
# =============================================================================

@router.get("/me", response_model=MeResponse)
def get_me(
    payload: TokenPayload = Depends(get_token_payload),
    db: Session = Depends(get_db),
):
    """Session claims with registration flags read from the database."""
    return auth_service.build_me(db, payload.email, payload.name, payload.picture)


@router.post(
    "/session/refresh",
    response_model=MeResponse,
    dependencies=[Depends(require_csrf_header)],
)
def refresh_session(
    response: Response,
    payload: TokenPayload = Depends(get_token_payload),
    db: Session = Depends(get_db),
):
    """Re-issue the session cookie, e.g. right after registering."""
    token, me = auth_service.refresh_session(db, payload)
    set_session_cookie(response, token)
    return me


@router.post("/logout", dependencies=[Depends(require_csrf_header)])
def logout(response: Response):
    """Clear the session cookie."""
    response.delete_cookie(COOKIE_NAME, path="/")
    return {"status": "logged_out"}

