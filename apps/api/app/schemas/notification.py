"""Pydantic schemas for in-app notifications."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.db.enums import NotificationTarget


class NotificationAnnouncement(BaseModel):
    id: UUID
    title: str
    category: str

    model_config = {"from_attributes": True}


class NotificationVisitor(BaseModel):
    id: UUID
    name: str
    status: str

    model_config = {"from_attributes": True}


class NotificationIssue(BaseModel):
    id: UUID
    title: str
    category: str
    status: str

    model_config = {"from_attributes": True}


class NotificationTask(BaseModel):
    id: UUID
    title: str
    status: str

    model_config = {"from_attributes": True}


class NotificationRead(BaseModel):
    id: UUID
    target: NotificationTarget
    read: bool
    created_at: datetime
    announcement: NotificationAnnouncement | None = None
    visitor: NotificationVisitor | None = None
    issue: NotificationIssue | None = None
    task: NotificationTask | None = None

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    notifications: list[NotificationRead]


class UnreadCountResponse(BaseModel):
    count: int


class MarkReadRequest(BaseModel):
    """Mark one notification read, or all of them."""
    notification_id: UUID | None = None
    mark_all_read: bool = False
