"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.enums import NotificationTarget

if TYPE_CHECKING:
    from app.db.models import Announcement, Issue, Resident, Task, Visitor


class Notification(Base):
    """
    In-app notification for a resident.

    Points at exactly one of announcement, visitor, issue or task. Announcement
    fan-out is deduplicated by the (resident, announcement) unique constraint.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        UniqueConstraint(
            "resident_id", "announcement_id", name="uq_notifications_resident_announcement"
        ),
        CheckConstraint(
            "(CASE WHEN announcement_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN visitor_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN issue_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN task_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_notifications_single_target",
        ),
        Index("idx_notif_resident_unread", "resident_id", "read", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    resident_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("residents.id", ondelete="CASCADE"), nullable=False
    )

    # Target (exactly one is set)
    announcement_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("announcements.id", ondelete="CASCADE"), nullable=True
    )
    visitor_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("visitors.id", ondelete="CASCADE"), nullable=True
    )
    issue_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("issues.id", ondelete="CASCADE"), nullable=True
    )
    task_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True
    )

    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    resident: Mapped["Resident"] = relationship(back_populates="notifications")
    announcement: Mapped["Announcement | None"] = relationship(back_populates="notifications")
    visitor: Mapped["Visitor | None"] = relationship(back_populates="notifications")
    issue: Mapped["Issue | None"] = relationship(back_populates="notifications")
    task: Mapped["Task | None"] = relationship(back_populates="notifications")

    @property
    def target(self) -> NotificationTarget:
        if self.announcement_id is not None:
            return NotificationTarget.ANNOUNCEMENT
        if self.visitor_id is not None:
            return NotificationTarget.VISITOR
        if self.issue_id is not None:
            return NotificationTarget.ISSUE
        return NotificationTarget.TASK
