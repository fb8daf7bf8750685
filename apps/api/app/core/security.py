"""Security utilities for JWT session tokens and OAuth state management."""

import hashlib
import json
import secrets
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone

import jwt

from app.core.config import settings


# =============================================================================
# Session Token (JWT in cookie)
# =============================================================================

def create_session_token(
    email: str,
    name: str,
    image: str | None = None,
    is_registered: bool = False,
    is_approved: bool = False,
    role: str | None = None,
) -> str:
    """
    Create signed session JWT.

    Always signs with current secret (JWT_SECRET).
    The token carries identity plus the registration flags and role as they
    were at issue time; authorization still re-reads the resident row.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": email.lower(),
        "email": email.lower(),
        "name": name,
        "picture": image,
        "is_registered": is_registered,
        "is_approved": is_approved,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_session_token(token: str) -> dict:
    """
    Decode and verify session JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore


# =============================================================================
# OAuth State/Nonce with User-Agent Binding
# =============================================================================

class OAuthStateError(Exception):
    """OAuth callback state could not be verified; `code` goes in the login redirect."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


@dataclass(frozen=True)
class OAuthState:
    state: str
    nonce: str
    ua_hash: str


def hash_user_agent(user_agent: str) -> str:
    return hashlib.sha256(user_agent.encode()).hexdigest()[:16]


def new_oauth_state(user_agent: str) -> OAuthState:
    """Fresh random state and nonce bound to the caller's user-agent."""
    return OAuthState(
        state=secrets.token_urlsafe(32),
        nonce=secrets.token_urlsafe(32),
        ua_hash=hash_user_agent(user_agent),
    )


def encode_oauth_state(oauth_state: OAuthState) -> str:
    """Cookie value for the login round-trip."""
    return json.dumps(asdict(oauth_state))


def verify_oauth_state(
    cookie_value: str | None,
    received_state: str,
    user_agent: str,
) -> OAuthState:
    """
    Check the callback's state against the login cookie.

    Returns the stored state (its nonce is checked against the ID token).
    Raises OAuthStateError with state_expired, invalid_state or state_mismatch.
    """
    if not cookie_value:
        raise OAuthStateError("state_expired")
    try:
        stored = OAuthState(**json.loads(cookie_value))
    except (TypeError, ValueError):
        raise OAuthStateError("invalid_state")

    if stored.state != received_state:
        raise OAuthStateError("state_mismatch")
    if stored.ua_hash != hash_user_agent(user_agent):
        raise OAuthStateError("state_mismatch")
    return stored
