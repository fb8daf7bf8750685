"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.enums import TaskPriority, TaskStatus

if TYPE_CHECKING:
    from app.db.models import Notification, Resident


class Task(Base):
    """
    Facility work item assigned by an admin to a facility manager.

    Status follows TASK_TRANSITIONS; every move is recorded as a TaskComment.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_owner_status", "owner_id", "status"),
        Index("idx_tasks_created", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    priority: Mapped[str] = mapped_column(
        String(10), default=TaskPriority.NORMAL.value, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=TaskStatus.OPEN.value, nullable=False
    )
    deadline: Mapped[datetime] = mapped_column(nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("residents.id", ondelete="RESTRICT"), nullable=False
    )
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("residents.id", ondelete="RESTRICT"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    owner: Mapped["Resident"] = relationship(foreign_keys=[owner_id])
    created_by: Mapped["Resident"] = relationship(foreign_keys=[created_by_id])
    comments: Mapped[list["TaskComment"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskComment.created_at",
    )
    notifications: Mapped[list["Notification"]] = relationship(
        back_populates="task", cascade="all, delete-orphan"
    )

    @property
    def comment_count(self) -> int:
        return len(self.comments)


class TaskComment(Base):
    """Comment or status-change audit record on a task."""

    __tablename__ = "task_comments"
    __table_args__ = (
        Index("idx_task_comments_task", "task_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    task_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("residents.id", ondelete="RESTRICT"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    old_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    new_status: Mapped[str | None] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    task: Mapped[Task] = relationship(back_populates="comments")
    author: Mapped["Resident"] = relationship()
