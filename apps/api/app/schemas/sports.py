"""Pydantic schemas for sports registration."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.announcement import EventInfo, SportItemRead, SportsConfigRead
from app.schemas.resident import ResidentBrief


class ParticipantIn(BaseModel):
    name: str | None = None
    age_category: str | None = None
    sport_item_ids: list[UUID] = Field(default_factory=list)


class SportsRegistrationSubmit(BaseModel):
    """Create or replace the household's registration."""
    participants: list[ParticipantIn] = Field(default_factory=list)
    notes: str | None = None


class ParticipantSportRead(BaseModel):
    sport_item_id: UUID
    sport_item: SportItemRead

    model_config = {"from_attributes": True}


class ParticipantRead(BaseModel):
    id: UUID
    name: str
    age_category: str
    sports: list[ParticipantSportRead]

    model_config = {"from_attributes": True}


class SportsRegistrationRead(BaseModel):
    id: UUID
    notes: str | None
    created_at: datetime
    participants: list[ParticipantRead]

    model_config = {"from_attributes": True}


class AdminSportsRegistrationRead(SportsRegistrationRead):
    resident: ResidentBrief


class SportsEventResponse(BaseModel):
    announcement: EventInfo
    sports_config: SportsConfigRead
    my_registration: SportsRegistrationRead | None = None


class SportsRegistrationResult(BaseModel):
    success: bool = True
    registration: SportsRegistrationRead


class SportCount(BaseModel):
    name: str
    count: int


class AgeCounts(BaseModel):
    kid: int = 0
    teen: int = 0
    adult: int = 0


class SportsSummary(BaseModel):
    total_registrations: int
    total_participants: int
    sport_counts: list[SportCount]
    age_counts: AgeCounts


class AdminSportsResponse(BaseModel):
    announcement: EventInfo
    sports_config: SportsConfigRead
    registrations: list[AdminSportsRegistrationRead]
    summary: SportsSummary
