"""Pydantic schemas for announcements and their event/sports configuration."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.db.enums import (
    AnnouncementCategory,
    AnnouncementPriority,
    CustomFieldType,
    MealType,
)


# =============================================================================
# Event / sports configuration (admin input)
# =============================================================================

class MenuItemIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price_per_plate: float = Field(..., ge=0)


class CustomFieldIn(BaseModel):
    label: str = Field(..., min_length=1, max_length=255)
    field_type: CustomFieldType = CustomFieldType.TEXT
    required: bool = False
    options: list[str] | None = None

    @model_validator(mode="after")
    def _select_needs_options(self):
        if self.field_type == CustomFieldType.SELECT:
            options = [o.strip() for o in (self.options or []) if o and o.strip()]
            if not options:
                raise ValueError(f'Select field "{self.label}" needs at least one option')
            self.options = options
        else:
            self.options = None
        return self


class EventConfigIn(BaseModel):
    """Food RSVP settings. Menu items are optional (RSVP-only events)."""
    meal_type: MealType | None = None
    rsvp_deadline: datetime | None = None
    menu_items: list[MenuItemIn] = Field(default_factory=list)
    custom_fields: list[CustomFieldIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def _deadline_required(self):
        if self.rsvp_deadline is None:
            raise ValueError("RSVP deadline is required")
        return self


class SportItemIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class SportsConfigIn(BaseModel):
    registration_deadline: datetime | None = None
    sport_items: list[SportItemIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def _deadline_and_sports_required(self):
        if self.registration_deadline is None:
            raise ValueError("Registration deadline is required")
        if not self.sport_items:
            raise ValueError("At least one sport is required")
        return self


class AnnouncementCreate(BaseModel):
    """Request to create an announcement."""
    title: str = Field(..., min_length=1, max_length=255)
    date: datetime | None = None
    category: AnnouncementCategory = AnnouncementCategory.GENERAL
    priority: AnnouncementPriority = AnnouncementPriority.NORMAL
    summary: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1, max_length=255)
    link: str | None = None
    link_text: str | None = None
    published: bool = True
    event_config: EventConfigIn | None = None
    sports_config: SportsConfigIn | None = None


class AnnouncementUpdate(BaseModel):
    """
    Partial update.

    Only fields present in the request are applied. Sending event_config or
    sports_config as null removes that configuration.
    """
    title: str | None = Field(None, min_length=1, max_length=255)
    date: datetime | None = None
    category: AnnouncementCategory | None = None
    priority: AnnouncementPriority | None = None
    summary: str | None = Field(None, min_length=1)
    body: str | None = Field(None, min_length=1)
    author: str | None = Field(None, min_length=1, max_length=255)
    link: str | None = None
    link_text: str | None = None
    published: bool | None = None
    event_config: EventConfigIn | None = None
    sports_config: SportsConfigIn | None = None


# =============================================================================
# Responses
# =============================================================================

class MenuItemRead(BaseModel):
    id: UUID
    name: str
    price_per_plate: float
    sort_order: int

    model_config = {"from_attributes": True}


class CustomFieldRead(BaseModel):
    id: UUID
    label: str
    field_type: CustomFieldType
    required: bool
    options: list[str] | None
    sort_order: int

    model_config = {"from_attributes": True}


class EventConfigRead(BaseModel):
    id: UUID
    meal_type: MealType | None
    rsvp_deadline: datetime
    menu_items: list[MenuItemRead]
    custom_fields: list[CustomFieldRead]

    model_config = {"from_attributes": True}


class SportItemRead(BaseModel):
    id: UUID
    name: str
    sort_order: int

    model_config = {"from_attributes": True}


class SportsConfigRead(BaseModel):
    id: UUID
    registration_deadline: datetime
    sport_items: list[SportItemRead]

    model_config = {"from_attributes": True}


class AnnouncementRead(BaseModel):
    """Full announcement response."""
    id: UUID
    title: str
    date: datetime
    category: AnnouncementCategory
    priority: AnnouncementPriority
    summary: str
    body: str
    author: str
    link: str | None
    link_text: str | None
    published: bool
    created_at: datetime
    event_config: EventConfigRead | None = None
    sports_config: SportsConfigRead | None = None

    model_config = {"from_attributes": True}


class AnnouncementListResponse(BaseModel):
    announcements: list[AnnouncementRead]


class AnnouncementResult(BaseModel):
    success: bool = True
    announcement: AnnouncementRead


class EventInfo(BaseModel):
    """Announcement header shown on RSVP and sports pages."""
    id: UUID
    title: str
    date: datetime
    summary: str
    body: str
    author: str

    model_config = {"from_attributes": True}
