"""Pydantic schemas for maintenance issues."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.db.enums import IssueCategory, IssueStatus


class IssueCreate(BaseModel):
    title: str | None = None
    description: str | None = None
    category: str | None = None


class IssueClose(BaseModel):
    closure_comment: str | None = None


class IssueReporter(BaseModel):
    name: str
    block: int
    flat_number: str

    model_config = {"from_attributes": True}


class ClosedBy(BaseModel):
    name: str

    model_config = {"from_attributes": True}


class IssueRead(BaseModel):
    id: UUID
    title: str
    description: str
    category: IssueCategory
    status: IssueStatus
    closure_comment: str | None
    closed_at: datetime | None
    created_at: datetime
    resident: IssueReporter
    closed_by: ClosedBy | None = None

    model_config = {"from_attributes": True}


class IssueListResponse(BaseModel):
    issues: list[IssueRead]
    is_manager: bool
    can_raise: bool


class IssueResult(BaseModel):
    success: bool = True
    issue: IssueRead
