"""Public announcement feed (published posts only)."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.schemas.announcement import AnnouncementListResponse, AnnouncementRead
from app.services import announcement_service

router = APIRouter()


@router.get("", response_model=AnnouncementListResponse)
def list_announcements(db: Session = Depends(get_db)):
    announcements = announcement_service.list_announcements(db)
    return AnnouncementListResponse(
        announcements=[AnnouncementRead.model_validate(a) for a in announcements]
    )


@router.get("/{announcement_id}", response_model=AnnouncementRead)
def get_announcement(announcement_id: UUID, db: Session = Depends(get_db)):
    announcement = announcement_service.get_announcement(db, announcement_id)
    if not announcement:
        raise HTTPException(status_code=404, detail="Announcement not found")
    return announcement
