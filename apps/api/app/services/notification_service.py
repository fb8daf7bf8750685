"""Notification service - in-app notifications for residents and staff.

Notifications point at exactly one announcement, visitor, issue or task.
Trigger helpers add rows to the session; callers commit with their own
write so the notification and its target land together.
"""

import logging
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session, joinedload

from app.core.constants import NOTIFICATION_LIST_LIMIT
from app.db.enums import Role
from app.db.models import Notification, Resident
from app.db.models import Role as RoleRow

logger = logging.getLogger(__name__)


class NotificationServiceError(Exception):
    """Base exception for notification service errors."""

    pass


class NotificationNotFoundError(NotificationServiceError):
    pass


# =============================================================================
# Creation
# =============================================================================


def create_notification(
    db: Session,
    resident_id: UUID,
    *,
    announcement_id: UUID | None = None,
    visitor_id: UUID | None = None,
    issue_id: UUID | None = None,
    task_id: UUID | None = None,
) -> Notification:
    """Stage a notification for one resident (no commit)."""
    targets = [announcement_id, visitor_id, issue_id, task_id]
    if sum(target is not None for target in targets) != 1:
        raise ValueError("Exactly one notification target is required")

    notification = Notification(
        resident_id=resident_id,
        announcement_id=announcement_id,
        visitor_id=visitor_id,
        issue_id=issue_id,
        task_id=task_id,
    )
    db.add(notification)
    return notification


def _approved_residents(db: Session):
    return db.query(Resident).filter(Resident.is_approved.is_(True))


# =============================================================================
# Triggers
# =============================================================================


def notify_announcement_published(db: Session, announcement_id: UUID) -> int:
    """
    Fan out an announcement to every approved resident.

    Residents that already have a notification for it are skipped. Returns
    the number of notifications staged.
    """
    already = {
        row.resident_id
        for row in db.query(Notification.resident_id).filter(
            Notification.announcement_id == announcement_id
        )
    }
    count = 0
    for (resident_id,) in _approved_residents(db).with_entities(Resident.id):
        if resident_id in already:
            continue
        create_notification(db, resident_id, announcement_id=announcement_id)
        count += 1
    logger.info(
        "Announcement notifications staged",
        extra={"event_id": str(announcement_id), "count": count},
    )
    return count


def has_announcement_notifications(db: Session, announcement_id: UUID) -> bool:
    return (
        db.query(Notification.id)
        .filter(Notification.announcement_id == announcement_id)
        .first()
        is not None
    )


def notify_visitor_registered(
    db: Session, visitor_id: UUID, block: int, flat_number: str
) -> int:
    """Notify every resident registered to the visited flat."""
    residents = (
        db.query(Resident.id)
        .filter(
            Resident.block == block,
            Resident.flat_number == flat_number,
        )
        .all()
    )
    for (resident_id,) in residents:
        create_notification(db, resident_id, visitor_id=visitor_id)
    return len(residents)


def notify_issue_raised(db: Session, issue_id: UUID) -> int:
    """Notify all approved facility managers of a new issue."""
    managers = (
        _approved_residents(db)
        .join(Resident.role)
        .filter(RoleRow.name == Role.FACILITY_MANAGER.value)
        .with_entities(Resident.id)
        .all()
    )
    for (resident_id,) in managers:
        create_notification(db, resident_id, issue_id=issue_id)
    return len(managers)


def notify_issue_closed(db: Session, issue_id: UUID, reporter_id: UUID) -> None:
    create_notification(db, reporter_id, issue_id=issue_id)


def notify_task_event(
    db: Session, task_id: UUID, recipient_id: UUID, actor_id: UUID
) -> None:
    """Notify the other party on a task; nothing is sent to the actor themselves."""
    if recipient_id == actor_id:
        return
    create_notification(db, recipient_id, task_id=task_id)


# =============================================================================
# Reading
# =============================================================================


def list_notifications(
    db: Session,
    resident_id: UUID,
    limit: int = NOTIFICATION_LIST_LIMIT,
) -> list[Notification]:
    """Latest notifications for a resident, newest first."""
    return (
        db.query(Notification)
        .options(
            joinedload(Notification.announcement),
            joinedload(Notification.visitor),
            joinedload(Notification.issue),
            joinedload(Notification.task),
        )
        .filter(Notification.resident_id == resident_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )


def get_unread_count(db: Session, resident_id: UUID) -> int:
    """Get count of unread notifications."""
    return (
        db.query(Notification)
        .filter(
            and_(
                Notification.resident_id == resident_id,
                Notification.read.is_(False),
            )
        )
        .count()
    )


def mark_read(db: Session, notification_id: UUID, resident_id: UUID) -> Notification:
    """Mark one of the resident's notifications as read."""
    notification = (
        db.query(Notification)
        .filter(
            Notification.id == notification_id,
            Notification.resident_id == resident_id,
        )
        .first()
    )
    if not notification:
        raise NotificationNotFoundError("Notification not found")

    if not notification.read:
        notification.read = True
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, resident_id: UUID) -> int:
    """Mark all notifications as read. Returns count updated."""
    count = (
        db.query(Notification)
        .filter(
            Notification.resident_id == resident_id,
            Notification.read.is_(False),
        )
        .update({"read": True}, synchronize_session=False)
    )
    db.commit()
    return count
