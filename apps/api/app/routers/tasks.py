"""Facility task board endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, is_admin, require_csrf_header, require_roles
from app.db.enums import ROLES_ADMIN, ROLES_CAN_ACCESS_TASKS
from app.schemas.auth import UserSession
from app.schemas.task import (
    TaskCommentCreate,
    TaskCommentRead,
    TaskCommentResult,
    TaskCreate,
    TaskDetail,
    TaskDetailResponse,
    TaskListResponse,
    TaskOwner,
    TaskRead,
    TaskResult,
    TaskUpdate,
)
from app.services import task_service
from app.services.task_service import (
    ReopenNotAllowedError,
    TaskAccessDeniedError,
    TaskNotFoundError,
    TaskServiceError,
    TaskValidationError,
)

router = APIRouter()

require_task_access = require_roles(ROLES_CAN_ACCESS_TASKS)


def _http_error(e: TaskServiceError) -> HTTPException:
    if isinstance(e, TaskNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (TaskAccessDeniedError, ReopenNotAllowedError)):
        return HTTPException(status_code=403, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=TaskListResponse)
def list_tasks(
    status_filter: str | None = Query(None, alias="status"),
    session: UserSession = Depends(require_task_access),
    db: Session = Depends(get_db),
):
    """Admins see every task; facility managers see tasks they own."""
    admin = is_admin(session)
    tasks = task_service.list_tasks(
        db,
        owner_id=None if admin else session.resident_id,
        status=status_filter,
    )
    managers = task_service.list_facility_managers(db) if admin else []
    return TaskListResponse(
        tasks=[TaskRead.model_validate(t) for t in tasks],
        is_admin=admin,
        facility_managers=[TaskOwner.model_validate(m) for m in managers],
    )


@router.post(
    "",
    response_model=TaskResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_task(
    data: TaskCreate,
    session: UserSession = Depends(require_task_access),
    db: Session = Depends(get_db),
):
    if session.role not in ROLES_ADMIN:
        raise HTTPException(status_code=403, detail="Only admins can create tasks")
    try:
        task = task_service.create_task(db, data, session.resident_id)
    except TaskValidationError as e:
        raise _http_error(e)
    return TaskResult(task=TaskRead.model_validate(task))


@router.get("/{task_id}", response_model=TaskDetailResponse)
def get_task(
    task_id: UUID,
    session: UserSession = Depends(require_task_access),
    db: Session = Depends(get_db),
):
    admin = is_admin(session)
    try:
        task = task_service.get_task_for(db, task_id, session.resident_id, admin)
    except (TaskNotFoundError, TaskAccessDeniedError) as e:
        raise _http_error(e)
    return TaskDetailResponse(task=TaskDetail.model_validate(task), is_admin=admin)


@router.patch(
    "/{task_id}",
    response_model=TaskResult,
    dependencies=[Depends(require_csrf_header)],
)
def update_task(
    task_id: UUID,
    data: TaskUpdate,
    session: UserSession = Depends(require_task_access),
    db: Session = Depends(get_db),
):
    """Move the task along its status machine and/or add a comment."""
    try:
        task = task_service.update_task(
            db, task_id, data, session.resident_id, is_admin(session)
        )
    except TaskServiceError as e:
        raise _http_error(e)
    return TaskResult(task=TaskRead.model_validate(task))


@router.post(
    "/{task_id}/comments",
    response_model=TaskCommentResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def add_comment(
    task_id: UUID,
    data: TaskCommentCreate,
    session: UserSession = Depends(require_task_access),
    db: Session = Depends(get_db),
):
    try:
        comment = task_service.add_comment(
            db, task_id, data.content, session.resident_id, is_admin(session)
        )
    except TaskServiceError as e:
        raise _http_error(e)
    return TaskCommentResult(comment=TaskCommentRead.model_validate(comment))
