"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.enums import VisitorStatus

if TYPE_CHECKING:
    from app.db.models import Notification, Resident


class Visitor(Base):
    """
    A gate pass request registered by security for a visit to one flat.

    A resident of the target flat (or staff) approves or rejects it once.
    """

    __tablename__ = "visitors"
    __table_args__ = (
        Index("idx_visitors_flat", "visiting_block", "visiting_flat"),
        Index("idx_visitors_created", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    vehicle_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    visiting_block: Mapped[int] = mapped_column(Integer, nullable=False)
    visiting_flat: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(10), default=VisitorStatus.PENDING.value, nullable=False
    )
    created_by_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("residents.id", ondelete="SET NULL"), nullable=True
    )
    decided_by_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("residents.id", ondelete="SET NULL"), nullable=True
    )
    decided_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    created_by: Mapped["Resident | None"] = relationship(foreign_keys=[created_by_id])
    decided_by: Mapped["Resident | None"] = relationship(foreign_keys=[decided_by_id])
    notifications: Mapped[list["Notification"]] = relationship(
        back_populates="visitor", cascade="all, delete-orphan"
    )
