"""Pydantic schemas for visitor gate passes."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.db.enums import VisitorStatus


class VisitorCreate(BaseModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    vehicle_number: str | None = None
    visiting_block: int | None = None
    visiting_flat: str | None = None


class VisitorStatusUpdate(BaseModel):
    status: str | None = None


class VisitorRead(BaseModel):
    id: UUID
    name: str
    phone: str | None
    email: str | None
    vehicle_number: str | None
    visiting_block: int
    visiting_flat: str
    status: VisitorStatus
    decided_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class VisitorResponse(BaseModel):
    visitor: VisitorRead


class VisitorListResponse(BaseModel):
    visitors: list[VisitorRead]


class VisitorSuggestion(BaseModel):
    """Past visitor details offered for autofill at the gate."""
    name: str
    phone: str | None
    email: str | None
    vehicle_number: str | None

    model_config = {"from_attributes": True}


class VisitorSearchResponse(BaseModel):
    visitors: list[VisitorSuggestion]
