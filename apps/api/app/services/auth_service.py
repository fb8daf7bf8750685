"""Authentication service - session claims refreshed from the resident row."""

import logging

from sqlalchemy.orm import Session

from app.core.security import create_session_token
from app.db.models import Resident
from app.schemas.auth import MeResponse, TokenPayload
from app.services.google_oauth import GoogleUserInfo

logger = logging.getLogger(__name__)


def build_me(db: Session, email: str, name: str, image: str | None) -> MeResponse:
    """
    Identity plus registration flags as they are in the database right now.

    Unregistered Google users get is_registered=False and no role.
    """
    resident = db.query(Resident).filter(Resident.email == email.lower()).first()
    if not resident:
        return MeResponse(
            email=email.lower(),
            name=name,
            image=image,
            is_registered=False,
            is_approved=False,
        )
    return MeResponse(
        email=resident.email,
        name=resident.name or name,
        image=image or resident.google_image,
        is_registered=True,
        is_approved=resident.is_approved,
        role=resident.role_name,
        resident_id=resident.id,
    )


def issue_session_token(db: Session, email: str, name: str, image: str | None) -> tuple[str, MeResponse]:
    """Sign a session token carrying freshly read flags."""
    me = build_me(db, email, name, image)
    token = create_session_token(
        email=me.email,
        name=me.name,
        image=me.image,
        is_registered=me.is_registered,
        is_approved=me.is_approved,
        role=me.role.value if me.role else None,
    )
    return token, me


def session_for_google_user(db: Session, google_user: GoogleUserInfo) -> tuple[str, MeResponse]:
    """Session token after a successful Google sign-in."""
    token, me = issue_session_token(db, google_user.email, google_user.name, google_user.picture)
    logger.info(
        "Google sign-in",
        extra={"is_registered": me.is_registered, "is_approved": me.is_approved},
    )
    return token, me


def refresh_session(db: Session, payload: TokenPayload) -> tuple[str, MeResponse]:
    return issue_session_token(db, payload.email, payload.name, payload.picture)
