"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.security import decode_session_token
from app.db.session import SessionLocal


# Cookie and header names
COOKIE_NAME = "portal_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_token_payload(request: Request):
    """
    Decode the session cookie without touching the database.

    Used by endpoints open to signed-in but unregistered users (registration,
    /auth/me).

    Raises:
        HTTPException 401: Missing or invalid session
    """
    from app.schemas.auth import TokenPayload

    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = decode_session_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid session")

    return TokenPayload(**payload)


def get_current_session(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Get session context for a registered resident.

    This is the PRIMARY auth dependency for most endpoints. Role and approval
    are read from the resident row on every request.

    Raises:
        HTTPException 401: Not authenticated
        HTTPException 403: Not registered or unknown role
    """
    # Import here to avoid circular imports
    from app.db.enums import Role
    from app.db.models import Resident
    from app.schemas.auth import UserSession

    payload = get_token_payload(request)

    resident = db.query(Resident).filter(Resident.email == payload.email.lower()).first()
    if not resident:
        raise HTTPException(status_code=403, detail="Not registered")

    # Validate role is a known enum value - return 403 not 500
    if not Role.has_value(resident.role.name):
        raise HTTPException(
            status_code=403,
            detail=f"Unknown role '{resident.role.name}'. Contact administrator."
        )

    return UserSession(
        resident_id=resident.id,
        email=resident.email,
        name=resident.name,
        role=Role(resident.role.name),
        is_approved=resident.is_approved,
        block=resident.block,
        flat_number=resident.flat_number,
    )


def get_optional_session(request: Request, db: Session = Depends(get_db)):
    """Like get_current_session, but returns None instead of raising."""
    try:
        return get_current_session(request, db)
    except HTTPException:
        return None


def require_approved(request: Request, db: Session = Depends(get_db)):
    """Registered resident whose registration has been approved."""
    session = get_current_session(request, db)
    if not session.is_approved:
        raise HTTPException(status_code=403, detail="Registration pending approval")
    return session


def require_roles(allowed_roles: set):
    """
    Dependency factory for role-based authorization.

    Uses enum values (not strings) to prevent drift. Staff roles must also be
    approved.

    Usage:
        @router.post("/admin", dependencies=[Depends(require_roles(ROLES_ADMIN))])
    """
    def dependency(request: Request, db: Session = Depends(get_db)):
        session = get_current_session(request, db)
        if session.role not in allowed_roles or not session.is_approved:
            raise HTTPException(
                status_code=403,
                detail=f"Role '{session.role.value}' not authorized for this action"
            )
        return session
    return dependency


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Apply to state-changing endpoints (POST, PATCH, DELETE) that rely on the
    session cookie.

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'"
        )


# =============================================================================
# Permission Check Helpers (use enum sets from db.enums)
# =============================================================================

def is_admin(session) -> bool:
    from app.db.enums import ROLES_ADMIN
    return session.role in ROLES_ADMIN


def is_superadmin(session) -> bool:
    from app.db.enums import ROLES_SUPERADMIN
    return session.role in ROLES_SUPERADMIN


def can_manage_visitors(session) -> bool:
    """Admins and security staff."""
    from app.db.enums import ROLES_CAN_MANAGE_VISITORS
    return session.role in ROLES_CAN_MANAGE_VISITORS


def can_manage_issues(session) -> bool:
    """Facility managers and admins."""
    from app.db.enums import ROLES_CAN_MANAGE_ISSUES
    return session.role in ROLES_CAN_MANAGE_ISSUES


def lives_in_flat(session, block: int, flat_number: str) -> bool:
    """Check if the resident's registered flat is the given one."""
    return session.block == block and session.flat_number == flat_number
