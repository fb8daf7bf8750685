"""Pydantic schemas for event passes."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel


class PassItem(BaseModel):
    name: str
    plates: int
    price_per_plate: float


class PassFieldResponse(BaseModel):
    label: str
    value: str


class PassRead(BaseModel):
    """Public view of a resident or guest pass."""
    type: Literal["resident", "guest"]
    pass_code: str
    event_title: str
    event_date: datetime
    announcement_id: UUID
    name: str
    email: str
    block: int
    flat_number: str
    has_food: bool
    items: list[PassItem]
    paid: bool
    notes: str | None
    created_at: datetime
    attended: bool
    attended_at: datetime | None
    field_responses: list[PassFieldResponse]

    @property
    def total_plates(self) -> int:
        return sum(item.plates for item in self.items)

    @property
    def total_amount(self) -> float:
        return sum(item.plates * item.price_per_plate for item in self.items)


class AttendanceResult(BaseModel):
    success: bool = True
    already_attended: bool
    attended_at: datetime
    name: str


class PassEmailRequest(BaseModel):
    email: str | None = None
    pass_url: str | None = None


class PassWhatsAppRequest(BaseModel):
    phone: str | None = None
    pass_url: str | None = None


class DeliveryResult(BaseModel):
    success: bool = True
