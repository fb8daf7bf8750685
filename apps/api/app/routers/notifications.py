"""
Notifications Router - /api/notifications endpoints.

Listing, unread badge count and read status.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.deps import get_current_session, get_db, get_optional_session, require_csrf_header
from app.schemas.auth import UserSession
from app.schemas.notification import (
    MarkReadRequest,
    NotificationListResponse,
    NotificationRead,
    UnreadCountResponse,
)
from app.services import notification_service
from app.services.notification_service import NotificationNotFoundError

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Latest notifications with a summary of what each points at."""
    notifications = notification_service.list_notifications(db, session.resident_id)
    return NotificationListResponse(
        notifications=[NotificationRead.model_validate(n) for n in notifications]
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    session: UserSession | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
):
    """Badge count; anonymous callers get 0 instead of 401."""
    if session is None:
        return UnreadCountResponse(count=0)
    return UnreadCountResponse(
        count=notification_service.get_unread_count(db, session.resident_id)
    )


@router.patch("/read", dependencies=[Depends(require_csrf_header)])
def mark_read(
    data: MarkReadRequest,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    if data.mark_all_read:
        count = notification_service.mark_all_read(db, session.resident_id)
        return {"success": True, "count": count}

    if data.notification_id is None:
        raise HTTPException(
            status_code=400, detail="notification_id or mark_all_read is required"
        )
    try:
        notification_service.mark_read(db, data.notification_id, session.resident_id)
    except NotificationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "count": 1}
