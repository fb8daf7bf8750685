"""Pydantic schemas for the facility task board."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.db.enums import TaskCategory, TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    """Request to create a task (admins only)."""
    title: str | None = None
    description: str | None = None
    category: str | None = None
    priority: str | None = None
    owner_id: UUID | None = None
    deadline: datetime | None = None


class TaskUpdate(BaseModel):
    """Status change and/or comment."""
    status: str | None = None
    comment: str | None = None


class TaskCommentCreate(BaseModel):
    content: str | None = None


class TaskPerson(BaseModel):
    id: UUID
    name: str

    model_config = {"from_attributes": True}


class TaskOwner(TaskPerson):
    block: int
    flat_number: str


class TaskCommentRead(BaseModel):
    id: UUID
    content: str
    old_status: TaskStatus | None
    new_status: TaskStatus | None
    created_at: datetime
    author: TaskPerson

    model_config = {"from_attributes": True}


class TaskRead(BaseModel):
    id: UUID
    title: str
    description: str
    category: TaskCategory
    priority: TaskPriority
    status: TaskStatus
    deadline: datetime
    closed_at: datetime | None
    created_at: datetime
    updated_at: datetime
    owner: TaskOwner
    created_by: TaskPerson
    comment_count: int

    model_config = {"from_attributes": True}


class TaskDetail(TaskRead):
    comments: list[TaskCommentRead]


class TaskListResponse(BaseModel):
    tasks: list[TaskRead]
    is_admin: bool
    facility_managers: list[TaskOwner]


class TaskDetailResponse(BaseModel):
    task: TaskDetail
    is_admin: bool


class TaskResult(BaseModel):
    success: bool = True
    task: TaskRead


class TaskCommentResult(BaseModel):
    success: bool = True
    comment: TaskCommentRead
