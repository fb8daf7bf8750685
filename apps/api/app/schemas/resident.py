"""Pydantic schemas for residents, flats and admin resident management."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.db.enums import MealType, ResidentType, Role


class ResidentRegister(BaseModel):
    """Self-registration after Google sign-in."""
    phone: str = Field(..., min_length=1, max_length=30)
    block: int = Field(..., ge=1, le=4)
    flat_number: str = Field(..., min_length=1, max_length=20)
    resident_type: ResidentType


class ResidentBrief(BaseModel):
    """Resident reference embedded in other responses."""
    id: UUID
    name: str
    email: str
    block: int
    flat_number: str

    model_config = {"from_attributes": True}


class ResidentRead(BaseModel):
    """Full resident response."""
    id: UUID
    email: str
    name: str
    phone: str | None
    block: int
    flat_number: str
    resident_type: ResidentType
    google_image: str | None = None
    is_approved: bool
    role: Role
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("role", mode="before")
    @classmethod
    def _role_name(cls, value):
        # Accept the ORM Role row as well as a plain name
        return getattr(value, "name", value)


class ResidentListResponse(BaseModel):
    residents: list[ResidentRead]


class RegistrationResult(BaseModel):
    success: bool = True
    id: UUID


class ResidentSearchResult(BaseModel):
    id: UUID
    name: str
    block: int
    flat_number: str

    model_config = {"from_attributes": True}


class ResidentSearchResponse(BaseModel):
    residents: list[ResidentSearchResult]


# =============================================================================
# My registrations (upcoming events)
# =============================================================================

class MyRsvpItem(BaseModel):
    id: UUID
    pass_code: str
    announcement_id: UUID
    event_title: str
    event_date: datetime
    meal_type: MealType | None
    total_plates: int
    paid: bool


class MySportsRegistrationItem(BaseModel):
    id: UUID
    announcement_id: UUID
    event_title: str
    event_date: datetime
    participant_count: int
    sports: list[str]


class MyRegistrationsResponse(BaseModel):
    rsvps: list[MyRsvpItem]
    sports_registrations: list[MySportsRegistrationItem]


# =============================================================================
# Admin
# =============================================================================

class AdminResidentCreate(BaseModel):
    """Superadmin creates a pre-approved resident."""
    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=30)
    block: int = Field(..., ge=1, le=4)
    flat_number: str = Field(..., min_length=1, max_length=20)
    resident_type: ResidentType = ResidentType.OWNER
    role: Role = Role.RESIDENT


class ResidentAction(BaseModel):
    """Approve or reject a pending registration."""
    resident_id: UUID
    action: Literal["approve", "reject"]


class RoleUpdate(BaseModel):
    resident_id: UUID
    role: Role


class ResidentActionResult(BaseModel):
    success: bool = True
    resident: ResidentRead | None = None


# =============================================================================
# Flats
# =============================================================================

class FlatRead(BaseModel):
    id: UUID
    block: int
    flat_number: str

    model_config = {"from_attributes": True}


class FlatListResponse(BaseModel):
    flats: list[FlatRead]
