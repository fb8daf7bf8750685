"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.enums import IssueStatus

if TYPE_CHECKING:
    from app.db.models import Notification, Resident


class Issue(Base):
    """
    A maintenance issue raised by a resident.

    Facility managers and admins close it with a mandatory closure comment.
    """

    __tablename__ = "issues"
    __table_args__ = (
        Index("idx_issues_resident", "resident_id", "created_at"),
        Index("idx_issues_status", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(10), default=IssueStatus.OPEN.value, nullable=False
    )
    resident_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("residents.id", ondelete="CASCADE"), nullable=False
    )
    closure_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    closed_by_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("residents.id", ondelete="SET NULL"), nullable=True
    )
    closed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    resident: Mapped["Resident"] = relationship(
        foreign_keys=[resident_id], back_populates="issues"
    )
    closed_by: Mapped["Resident | None"] = relationship(foreign_keys=[closed_by_id])
    notifications: Mapped[list["Notification"]] = relationship(
        back_populates="issue", cascade="all, delete-orphan"
    )
