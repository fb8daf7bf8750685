"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.enums import AnnouncementCategory, AnnouncementPriority, CustomFieldType
from app.db.types import JSONType, Money

if TYPE_CHECKING:
    from app.db.models import (
        GuestRsvp,
        GuestRsvpFieldResponse,
        GuestRsvpItem,
        Notification,
        Rsvp,
        RsvpFieldResponse,
        RsvpItem,
        SportsConfig,
    )


class Announcement(Base):
    """
    A news post on the community board.

    Drafts (published = false) are only visible to admins. An announcement can
    carry a food RSVP (EventConfig) and/or a sports registration (SportsConfig).
    """

    __tablename__ = "announcements"
    __table_args__ = (
        Index("idx_announcements_published_date", "published", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    category: Mapped[str] = mapped_column(
        String(20), default=AnnouncementCategory.GENERAL.value, nullable=False
    )
    priority: Mapped[str] = mapped_column(
        String(10), default=AnnouncementPriority.NORMAL.value, nullable=False
    )
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    link: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    link_text: Mapped[str | None] = mapped_column(String(255), nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    event_config: Mapped["EventConfig | None"] = relationship(
        back_populates="announcement", cascade="all, delete-orphan", uselist=False
    )
    sports_config: Mapped["SportsConfig | None"] = relationship(
        back_populates="announcement", cascade="all, delete-orphan", uselist=False
    )
    notifications: Mapped[list["Notification"]] = relationship(
        back_populates="announcement", cascade="all, delete-orphan"
    )


class EventConfig(Base):
    """RSVP settings for an event announcement (deadline, menu, custom questions)."""

    __tablename__ = "event_configs"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    announcement_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("announcements.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    meal_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    rsvp_deadline: Mapped[datetime] = mapped_column(nullable=False)

    announcement: Mapped[Announcement] = relationship(back_populates="event_config")
    menu_items: Mapped[list["MenuItem"]] = relationship(
        back_populates="event_config",
        cascade="all, delete-orphan",
        order_by="MenuItem.sort_order",
    )
    custom_fields: Mapped[list["CustomField"]] = relationship(
        back_populates="event_config",
        cascade="all, delete-orphan",
        order_by="CustomField.sort_order",
    )
    rsvps: Mapped[list["Rsvp"]] = relationship(
        back_populates="event_config",
        cascade="all, delete-orphan",
        order_by="Rsvp.created_at.desc()",
    )
    guest_rsvps: Mapped[list["GuestRsvp"]] = relationship(
        back_populates="event_config",
        cascade="all, delete-orphan",
        order_by="GuestRsvp.created_at.desc()",
    )

    @property
    def has_food(self) -> bool:
        return len(self.menu_items) > 0


class MenuItem(Base):
    __tablename__ = "menu_items"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    event_config_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("event_configs.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price_per_plate: Mapped[float] = mapped_column(Money, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    event_config: Mapped[EventConfig] = relationship(back_populates="menu_items")
    rsvp_items: Mapped[list["RsvpItem"]] = relationship(
        back_populates="menu_item", cascade="all, delete-orphan"
    )
    guest_rsvp_items: Mapped[list["GuestRsvpItem"]] = relationship(
        back_populates="menu_item", cascade="all, delete-orphan"
    )


class CustomField(Base):
    """Admin-defined RSVP question. Select fields keep their choices in `options`."""

    __tablename__ = "custom_fields"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    event_config_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("event_configs.id", ondelete="CASCADE"), nullable=False
    )
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    field_type: Mapped[str] = mapped_column(
        String(20), default=CustomFieldType.TEXT.value, nullable=False
    )
    required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    options: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    event_config: Mapped[EventConfig] = relationship(back_populates="custom_fields")
    rsvp_responses: Mapped[list["RsvpFieldResponse"]] = relationship(
        back_populates="custom_field", cascade="all, delete-orphan"
    )
    guest_rsvp_responses: Mapped[list["GuestRsvpFieldResponse"]] = relationship(
        back_populates="custom_field", cascade="all, delete-orphan"
    )
