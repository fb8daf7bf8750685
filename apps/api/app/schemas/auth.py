"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel

from app.db.enums import Role


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    sub: str  # email
    email: str
    name: str = ""
    picture: str | None = None
    is_registered: bool = False
    is_approved: bool = False
    role: str | None = None


class UserSession(BaseModel):
    """
    Session context for a registered resident.

    Returned by get_current_session. Role and approval come from the database,
    not from the cookie, so changes apply on the next request.
    """
    resident_id: UUID
    email: str
    name: str
    role: Role  # Validated enum
    is_approved: bool
    block: int
    flat_number: str


class MeResponse(BaseModel):
    """Response schema for GET /auth/me."""
    email: str
    name: str
    image: str | None = None
    is_registered: bool
    is_approved: bool
    role: Role | None = None
    resident_id: UUID | None = None
