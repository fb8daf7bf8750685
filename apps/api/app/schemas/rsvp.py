"""Pydantic schemas for resident and guest RSVPs.

Request bodies are parsed by rsvp_service once the deadline gate has passed,
and business validation lives there too.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.announcement import EventConfigRead, EventInfo, MenuItemRead
from app.schemas.resident import ResidentBrief


# =============================================================================
# Requests
# =============================================================================

class RsvpItemIn(BaseModel):
    menu_item_id: UUID | None = None
    plates: int = 0


class FieldResponseIn(BaseModel):
    custom_field_id: UUID | None = None
    value: str | None = None


class RsvpSubmit(BaseModel):
    """Resident RSVP (create or replace)."""
    items: list[RsvpItemIn] = Field(default_factory=list)
    notes: str | None = None
    field_responses: list[FieldResponseIn] = Field(default_factory=list)


class GuestRsvpSubmit(BaseModel):
    """RSVP from a non-resident guest; no account needed."""
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    block: int | None = None
    flat_number: str | None = None
    items: list[RsvpItemIn] = Field(default_factory=list)
    notes: str | None = None
    field_responses: list[FieldResponseIn] = Field(default_factory=list)


class PaidUpdate(BaseModel):
    paid: bool


# =============================================================================
# Responses
# =============================================================================

class RsvpItemRead(BaseModel):
    id: UUID
    plates: int
    menu_item: MenuItemRead

    model_config = {"from_attributes": True}


class FieldResponseRead(BaseModel):
    custom_field_id: UUID
    label: str
    value: str

    model_config = {"from_attributes": True}


class RsvpRead(BaseModel):
    id: UUID
    pass_code: str
    total_plates: int
    notes: str | None
    paid: bool
    attended: bool
    attended_at: datetime | None
    created_at: datetime
    items: list[RsvpItemRead]
    field_responses: list[FieldResponseRead]

    model_config = {"from_attributes": True}


class AdminRsvpRead(RsvpRead):
    resident: ResidentBrief


class GuestRsvpRead(BaseModel):
    id: UUID
    pass_code: str
    name: str
    email: str
    phone: str
    block: int
    flat_number: str
    total_plates: int
    notes: str | None
    paid: bool
    attended: bool
    attended_at: datetime | None
    created_at: datetime
    items: list[RsvpItemRead]
    field_responses: list[FieldResponseRead]

    model_config = {"from_attributes": True}


class RsvpEventResponse(BaseModel):
    """Event page for a signed-in resident."""
    announcement: EventInfo
    event_config: EventConfigRead
    my_rsvp: RsvpRead | None = None


class GuestEventResponse(BaseModel):
    announcement: EventInfo
    event_config: EventConfigRead


class RsvpResult(BaseModel):
    success: bool = True
    rsvp: RsvpRead


class GuestRsvpResult(BaseModel):
    success: bool = True
    guest_rsvp: GuestRsvpRead


class AdminRsvpResult(BaseModel):
    success: bool = True
    rsvp: AdminRsvpRead


class AdminGuestRsvpResult(BaseModel):
    success: bool = True
    guest_rsvp: GuestRsvpRead


class SuccessResponse(BaseModel):
    success: bool = True


# =============================================================================
# Admin summary
# =============================================================================

class ItemTotal(BaseModel):
    name: str
    plates: int
    amount: float


class RsvpSummary(BaseModel):
    total_rsvps: int
    total_plates: int
    total_amount: float
    paid_count: int
    unpaid_count: int
    item_totals: list[ItemTotal]


class AdminRsvpListResponse(BaseModel):
    announcement: EventInfo
    event_config: EventConfigRead
    rsvps: list[AdminRsvpRead]
    guest_rsvps: list[GuestRsvpRead]
    summary: RsvpSummary
