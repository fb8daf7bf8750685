"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.db.models import CustomField, EventConfig, MenuItem, Resident


# =============================================================================
# Resident RSVPs
# =============================================================================

class Rsvp(Base):
    """
    A resident's RSVP (and food order) for an event.

    One per (event_config, resident). `paid` and `attended` are toggled
    independently by admins and the entrance scanner.
    """

    __tablename__ = "rsvps"
    __table_args__ = (
        UniqueConstraint("event_config_id", "resident_id", name="uq_rsvps_event_resident"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    event_config_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("event_configs.id", ondelete="CASCADE"), nullable=False
    )
    resident_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("residents.id", ondelete="CASCADE"), nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    attended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    attended_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    event_config: Mapped["EventConfig"] = relationship(back_populates="rsvps")
    resident: Mapped["Resident"] = relationship(back_populates="rsvps")
    items: Mapped[list["RsvpItem"]] = relationship(
        back_populates="rsvp", cascade="all, delete-orphan"
    )
    field_responses: Mapped[list["RsvpFieldResponse"]] = relationship(
        back_populates="rsvp", cascade="all, delete-orphan"
    )

    @property
    def pass_code(self) -> str:
        return f"r-{self.id}"

    @property
    def total_plates(self) -> int:
        return sum(item.plates for item in self.items)


class RsvpItem(Base):
    __tablename__ = "rsvp_items"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    rsvp_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rsvps.id", ondelete="CASCADE"), nullable=False
    )
    menu_item_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False
    )
    plates: Mapped[int] = mapped_column(Integer, nullable=False)

    rsvp: Mapped[Rsvp] = relationship(back_populates="items")
    menu_item: Mapped["MenuItem"] = relationship(back_populates="rsvp_items", lazy="joined")


class RsvpFieldResponse(Base):
    __tablename__ = "rsvp_field_responses"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    rsvp_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rsvps.id", ondelete="CASCADE"), nullable=False
    )
    custom_field_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("custom_fields.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[str] = mapped_column(Text, nullable=False)

    rsvp: Mapped[Rsvp] = relationship(back_populates="field_responses")
    custom_field: Mapped["CustomField"] = relationship(
        back_populates="rsvp_responses", lazy="joined"
    )

    @property
    def label(self) -> str:
        return self.custom_field.label


# =============================================================================
# Guest RSVPs (no account)
# =============================================================================

class GuestRsvp(Base):
    """A non-resident's RSVP, keyed by (event_config, lowercased email)."""

    __tablename__ = "guest_rsvps"
    __table_args__ = (
        UniqueConstraint("event_config_id", "email", name="uq_guest_rsvps_event_email"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    event_config_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("event_configs.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    block: Mapped[int] = mapped_column(Integer, nullable=False)
    flat_number: Mapped[str] = mapped_column(String(20), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    attended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    attended_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    event_config: Mapped["EventConfig"] = relationship(back_populates="guest_rsvps")
    items: Mapped[list["GuestRsvpItem"]] = relationship(
        back_populates="guest_rsvp", cascade="all, delete-orphan"
    )
    field_responses: Mapped[list["GuestRsvpFieldResponse"]] = relationship(
        back_populates="guest_rsvp", cascade="all, delete-orphan"
    )

    @property
    def pass_code(self) -> str:
        return f"g-{self.id}"

    @property
    def total_plates(self) -> int:
        return sum(item.plates for item in self.items)


class GuestRsvpItem(Base):
    __tablename__ = "guest_rsvp_items"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    guest_rsvp_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("guest_rsvps.id", ondelete="CASCADE"), nullable=False
    )
    menu_item_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False
    )
    plates: Mapped[int] = mapped_column(Integer, nullable=False)

    guest_rsvp: Mapped[GuestRsvp] = relationship(back_populates="items")
    menu_item: Mapped["MenuItem"] = relationship(
        back_populates="guest_rsvp_items", lazy="joined"
    )


class GuestRsvpFieldResponse(Base):
    __tablename__ = "guest_rsvp_field_responses"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    guest_rsvp_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("guest_rsvps.id", ondelete="CASCADE"), nullable=False
    )
    custom_field_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("custom_fields.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[str] = mapped_column(Text, nullable=False)

    guest_rsvp: Mapped[GuestRsvp] = relationship(back_populates="field_responses")
    custom_field: Mapped["CustomField"] = relationship(
        back_populates="guest_rsvp_responses", lazy="joined"
    )

    @property
    def label(self) -> str:
        return self.custom_field.label
