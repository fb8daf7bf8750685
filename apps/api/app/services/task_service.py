"""Task service - facility work items assigned by admins to facility managers.

Status moves follow TASK_TRANSITIONS. Each move writes a TaskComment audit
record and notifies the other party (creator or owner).
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session, joinedload, selectinload

from app.db.enums import TASK_TRANSITIONS, Role, TaskCategory, TaskPriority, TaskStatus
from app.db.models import Resident, Task, TaskComment
from app.db.models import Role as RoleRow
from app.schemas.task import TaskCreate, TaskUpdate
from app.services import notification_service
from app.utils.normalization import clean_text

logger = logging.getLogger(__name__)


class TaskServiceError(Exception):
    """Base exception for task service errors."""

    pass


class TaskNotFoundError(TaskServiceError):
    pass


class TaskAccessDeniedError(TaskServiceError):
    pass


class TaskValidationError(TaskServiceError):
    pass


class InvalidTransitionError(TaskServiceError):
    pass


class ReopenNotAllowedError(TaskServiceError):
    pass


CATEGORIES = [category.value for category in TaskCategory]
PRIORITIES = [priority.value for priority in TaskPriority]


def _query(db: Session):
    return db.query(Task).options(
        joinedload(Task.owner),
        joinedload(Task.created_by),
        selectinload(Task.comments).joinedload(TaskComment.author),
    )


def get_task(db: Session, task_id: UUID) -> Task | None:
    return _query(db).filter(Task.id == task_id).first()


def get_task_for(db: Session, task_id: UUID, actor_id: UUID, is_admin: bool) -> Task:
    """Load a task the actor may see: admins see all, managers their own."""
    task = get_task(db, task_id)
    if not task:
        raise TaskNotFoundError("Task not found")
    if not is_admin and task.owner_id != actor_id:
        raise TaskAccessDeniedError("Access denied")
    return task


def list_tasks(
    db: Session,
    owner_id: UUID | None = None,
    status: str | None = None,
) -> list[Task]:
    query = _query(db)
    if owner_id is not None:
        query = query.filter(Task.owner_id == owner_id)
    if status and status != "ALL":
        query = query.filter(Task.status == status)
    return query.order_by(Task.created_at.desc()).all()


def _facility_managers(db: Session):
    return (
        db.query(Resident)
        .join(Resident.role)
        .filter(
            RoleRow.name == Role.FACILITY_MANAGER.value,
            Resident.is_approved.is_(True),
        )
    )


def list_facility_managers(db: Session) -> list[Resident]:
    return _facility_managers(db).order_by(Resident.name.asc()).all()


def create_task(db: Session, data: TaskCreate, created_by_id: UUID) -> Task:
    title = clean_text(data.title)
    description = clean_text(data.description)
    category = clean_text(data.category)
    if not title or not description or not category or not data.owner_id or not data.deadline:
        raise TaskValidationError(
            "Title, description, category, owner, and deadline are required"
        )
    if category not in CATEGORIES:
        raise TaskValidationError(f"Category must be one of: {', '.join(CATEGORIES)}")
    priority = clean_text(data.priority)
    if priority and priority not in PRIORITIES:
        raise TaskValidationError(f"Priority must be one of: {', '.join(PRIORITIES)}")

    owner = _facility_managers(db).filter(Resident.id == data.owner_id).first()
    if not owner:
        raise TaskValidationError("Owner must be an approved Facility Manager")

    task = Task(
        title=title,
        description=description,
        category=category,
        priority=priority or TaskPriority.NORMAL.value,
        status=TaskStatus.OPEN.value,
        deadline=data.deadline,
        owner_id=owner.id,
        created_by_id=created_by_id,
    )
    db.add(task)
    db.flush()
    notification_service.notify_task_event(db, task.id, owner.id, created_by_id)
    db.commit()

    logger.info("Task created", extra={"task_id": str(task.id), "owner_id": str(owner.id)})
    return get_task(db, task.id)


def _other_party(task: Task, actor_id: UUID) -> UUID:
    return task.created_by_id if actor_id == task.owner_id else task.owner_id


def check_transition(current: str, target: str, is_admin: bool) -> None:
    """Raise unless `current -> target` is allowed for this actor."""
    try:
        allowed = TASK_TRANSITIONS[TaskStatus(current)]
        target_status = TaskStatus(target)
    except ValueError:
        raise InvalidTransitionError(f"Cannot transition from {current} to {target}")
    if target_status not in allowed:
        raise InvalidTransitionError(f"Cannot transition from {current} to {target}")
    if current == TaskStatus.CLOSED.value and target_status == TaskStatus.OPEN and not is_admin:
        raise ReopenNotAllowedError("Only admins can reopen tasks")


def update_task(
    db: Session,
    task_id: UUID,
    data: TaskUpdate,
    actor_id: UUID,
    is_admin: bool,
) -> Task:
    """Apply a status change (with audit comment) or append a plain comment."""
    task = get_task_for(db, task_id, actor_id, is_admin)
    new_status = clean_text(data.status)
    comment = clean_text(data.comment)

    if new_status and new_status != task.status:
        old_status = task.status
        check_transition(old_status, new_status, is_admin)

        task.status = new_status
        if new_status == TaskStatus.CLOSED.value:
            task.closed_at = datetime.now(timezone.utc)
        if old_status == TaskStatus.CLOSED.value and new_status == TaskStatus.OPEN.value:
            task.closed_at = None

        db.add(
            TaskComment(
                task_id=task.id,
                author_id=actor_id,
                content=comment or f"Status changed from {old_status} to {new_status}",
                old_status=old_status,
                new_status=new_status,
            )
        )
        notification_service.notify_task_event(
            db, task.id, _other_party(task, actor_id), actor_id
        )
        db.commit()
        logger.info(
            "Task status changed",
            extra={"task_id": str(task.id), "old_status": old_status, "new_status": new_status},
        )
    elif comment:
        db.add(TaskComment(task_id=task.id, author_id=actor_id, content=comment))
        notification_service.notify_task_event(
            db, task.id, _other_party(task, actor_id), actor_id
        )
        db.commit()
    else:
        raise TaskValidationError("No changes provided")

    db.expire_all()
    return get_task(db, task.id)


def add_comment(
    db: Session,
    task_id: UUID,
    content: str | None,
    actor_id: UUID,
    is_admin: bool,
) -> TaskComment:
    task = get_task_for(db, task_id, actor_id, is_admin)
    content = clean_text(content)
    if not content:
        raise TaskValidationError("Comment content is required")

    comment = TaskComment(task_id=task.id, author_id=actor_id, content=content)
    db.add(comment)
    notification_service.notify_task_event(
        db, task.id, _other_party(task, actor_id), actor_id
    )
    db.commit()
    db.refresh(comment)
    return comment
