"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import (
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
    from app.db.models import Announcement, Resident


class SportsConfig(Base):
    """Sports registration settings for an announcement."""

    __tablename__ = "sports_configs"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    announcement_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("announcements.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    registration_deadline: Mapped[datetime] = mapped_column(nullable=False)

    announcement: Mapped["Announcement"] = relationship(back_populates="sports_config")
    sport_items: Mapped[list["SportItem"]] = relationship(
        back_populates="sports_config",
        cascade="all, delete-orphan",
        order_by="SportItem.sort_order",
    )
    registrations: Mapped[list["SportsRegistration"]] = relationship(
        back_populates="sports_config",
        cascade="all, delete-orphan",
        order_by="SportsRegistration.created_at.desc()",
    )


class SportItem(Base):
    __tablename__ = "sport_items"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    sports_config_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sports_configs.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    sports_config: Mapped[SportsConfig] = relationship(back_populates="sport_items")
    participant_links: Mapped[list["ParticipantSport"]] = relationship(
        back_populates="sport_item", cascade="all, delete-orphan"
    )


class SportsRegistration(Base):
    """A household's registration for a sports event. One per (sports_config, resident)."""

    __tablename__ = "sports_registrations"
    __table_args__ = (
        UniqueConstraint(
            "sports_config_id", "resident_id", name="uq_sports_registrations_config_resident"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    sports_config_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sports_configs.id", ondelete="CASCADE"), nullable=False
    )
    resident_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("residents.id", ondelete="CASCADE"), nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    sports_config: Mapped[SportsConfig] = relationship(back_populates="registrations")
    resident: Mapped["Resident"] = relationship(back_populates="sports_registrations")
    participants: Mapped[list["Participant"]] = relationship(
        back_populates="registration", cascade="all, delete-orphan"
    )


class Participant(Base):
    __tablename__ = "participants"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    registration_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sports_registrations.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    age_category: Mapped[str] = mapped_column(String(10), nullable=False)

    registration: Mapped[SportsRegistration] = relationship(back_populates="participants")
    sports: Mapped[list["ParticipantSport"]] = relationship(
        back_populates="participant", cascade="all, delete-orphan"
    )


class ParticipantSport(Base):
    """Association between a participant and a sport they entered."""

    __tablename__ = "participant_sports"
    __table_args__ = (
        UniqueConstraint(
            "participant_id", "sport_item_id", name="uq_participant_sports_pair"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    participant_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"), nullable=False
    )
    sport_item_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sport_items.id", ondelete="CASCADE"), nullable=False
    )

    participant: Mapped[Participant] = relationship(back_populates="sports")
    sport_item: Mapped[SportItem] = relationship(
        back_populates="participant_links", lazy="joined"
    )
