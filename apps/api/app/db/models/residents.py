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
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.enums import Role as RoleName

if TYPE_CHECKING:
    from app.db.models import Issue, Notification, Rsvp, SportsRegistration


class Role(Base):
    """Named role row; every resident points at exactly one."""

    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)

    residents: Mapped[list["Resident"]] = relationship(back_populates="role")


class Flat(Base):
    """A flat that exists in the community, seeded from the building roster."""

    __tablename__ = "flats"
    __table_args__ = (
        UniqueConstraint("block", "flat_number", name="uq_flats_block_flat_number"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    block: Mapped[int] = mapped_column(Integer, nullable=False)
    flat_number: Mapped[str] = mapped_column(String(20), nullable=False)


class Resident(Base):
    """
    A registered member of the community, identified by their Google email.

    New registrations start unapproved with the RESIDENT role.
    """

    __tablename__ = "residents"
    __table_args__ = (
        Index("idx_residents_block_flat", "block", "flat_number"),
        Index("idx_residents_role", "role_id", "is_approved"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    block: Mapped[int] = mapped_column(Integer, nullable=False)
    flat_number: Mapped[str] = mapped_column(String(20), nullable=False)
    resident_type: Mapped[str] = mapped_column(String(10), nullable=False)
    google_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    role_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    role: Mapped[Role] = relationship(back_populates="residents", lazy="joined")
    notifications: Mapped[list["Notification"]] = relationship(
        back_populates="resident", cascade="all, delete-orphan"
    )
    rsvps: Mapped[list["Rsvp"]] = relationship(
        back_populates="resident", cascade="all, delete-orphan"
    )
    sports_registrations: Mapped[list["SportsRegistration"]] = relationship(
        back_populates="resident", cascade="all, delete-orphan"
    )
    issues: Mapped[list["Issue"]] = relationship(
        back_populates="resident",
        foreign_keys="Issue.resident_id",
        cascade="all, delete-orphan",
    )

    @property
    def role_name(self) -> RoleName:
        return RoleName(self.role.name)
