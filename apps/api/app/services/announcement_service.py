"""Announcement service - news posts with optional RSVP and sports configuration."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from app.db.models import (
    Announcement,
    CustomField,
    EventConfig,
    MenuItem,
    SportItem,
    SportsConfig,
)
from app.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementUpdate,
    EventConfigIn,
    SportsConfigIn,
)
from app.services import notification_service
from app.utils.normalization import clean_text

logger = logging.getLogger(__name__)


class AnnouncementServiceError(Exception):
    """Base exception for announcement service errors."""

    pass


class AnnouncementNotFoundError(AnnouncementServiceError):
    pass


_LOAD_OPTIONS = (
    selectinload(Announcement.event_config).selectinload(EventConfig.menu_items),
    selectinload(Announcement.event_config).selectinload(EventConfig.custom_fields),
    selectinload(Announcement.sports_config).selectinload(SportsConfig.sport_items),
)


# =============================================================================
# Queries
# =============================================================================


def list_announcements(db: Session, include_drafts: bool = False) -> list[Announcement]:
    """Announcements newest first. Drafts only when include_drafts."""
    query = db.query(Announcement).options(*_LOAD_OPTIONS)
    if not include_drafts:
        query = query.filter(Announcement.published.is_(True))
    return query.order_by(Announcement.date.desc()).all()


def get_announcement(
    db: Session, announcement_id: UUID, include_drafts: bool = False
) -> Announcement | None:
    query = db.query(Announcement).options(*_LOAD_OPTIONS).filter(
        Announcement.id == announcement_id
    )
    if not include_drafts:
        query = query.filter(Announcement.published.is_(True))
    return query.first()


# =============================================================================
# Config builders
# =============================================================================


def _build_menu_items(data: EventConfigIn) -> list[MenuItem]:
    return [
        MenuItem(name=item.name.strip(), price_per_plate=item.price_per_plate, sort_order=index)
        for index, item in enumerate(data.menu_items)
    ]


def _build_custom_fields(data: EventConfigIn) -> list[CustomField]:
    return [
        CustomField(
            label=field.label.strip(),
            field_type=field.field_type.value,
            required=field.required,
            options=field.options,
            sort_order=index,
        )
        for index, field in enumerate(data.custom_fields)
    ]


def _build_sport_items(data: SportsConfigIn) -> list[SportItem]:
    return [
        SportItem(name=item.name.strip(), sort_order=index)
        for index, item in enumerate(data.sport_items)
    ]


def _apply_event_config(announcement: Announcement, data: EventConfigIn | None) -> None:
    """Replace the RSVP configuration. None removes it."""
    if data is None:
        announcement.event_config = None
        return

    config = announcement.event_config
    if config is None:
        config = EventConfig()
        announcement.event_config = config
    config.meal_type = data.meal_type.value if data.meal_type else None
    config.rsvp_deadline = data.rsvp_deadline
    config.menu_items = _build_menu_items(data)
    config.custom_fields = _build_custom_fields(data)


def _apply_sports_config(announcement: Announcement, data: SportsConfigIn | None) -> None:
    """Replace the sports configuration. None removes it."""
    if data is None:
        announcement.sports_config = None
        return

    config = announcement.sports_config
    if config is None:
        config = SportsConfig()
        announcement.sports_config = config
    config.registration_deadline = data.registration_deadline
    config.sport_items = _build_sport_items(data)


# =============================================================================
# Mutations
# =============================================================================


def create_announcement(db: Session, data: AnnouncementCreate) -> Announcement:
    """Create an announcement; publishing notifies every approved resident."""
    announcement = Announcement(
        title=data.title.strip(),
        date=data.date or datetime.now(timezone.utc),
        category=data.category.value,
        priority=data.priority.value,
        summary=data.summary,
        body=data.body,
        author=data.author.strip(),
        link=clean_text(data.link),
        link_text=clean_text(data.link_text),
        published=data.published,
    )
    if data.event_config is not None:
        _apply_event_config(announcement, data.event_config)
    if data.sports_config is not None:
        _apply_sports_config(announcement, data.sports_config)

    db.add(announcement)
    db.flush()

    if announcement.published:
        notification_service.notify_announcement_published(db, announcement.id)

    db.commit()
    logger.info("Announcement created", extra={"event_id": str(announcement.id)})
    return get_announcement(db, announcement.id, include_drafts=True)


def update_announcement(
    db: Session, announcement_id: UUID, data: AnnouncementUpdate
) -> Announcement:
    """
    Apply a partial update.

    Fields absent from the request are left alone. Explicit nulls for
    event_config or sports_config remove that configuration. Publishing sends
    announcement notifications unless some were already sent.
    """
    announcement = get_announcement(db, announcement_id, include_drafts=True)
    if not announcement:
        raise AnnouncementNotFoundError("Announcement not found")

    provided = data.model_fields_set

    for field in ("title", "author"):
        if field in provided and getattr(data, field) is not None:
            setattr(announcement, field, getattr(data, field).strip())
    for field in ("summary", "body"):
        if field in provided and getattr(data, field) is not None:
            setattr(announcement, field, getattr(data, field))
    if "date" in provided and data.date is not None:
        announcement.date = data.date
    if "category" in provided and data.category is not None:
        announcement.category = data.category.value
    if "priority" in provided and data.priority is not None:
        announcement.priority = data.priority.value
    if "link" in provided:
        announcement.link = clean_text(data.link)
    if "link_text" in provided:
        announcement.link_text = clean_text(data.link_text)
    if "published" in provided and data.published is not None:
        announcement.published = data.published

    if "event_config" in provided:
        _apply_event_config(announcement, data.event_config)
    if "sports_config" in provided:
        _apply_sports_config(announcement, data.sports_config)

    db.flush()

    if data.published is True and not notification_service.has_announcement_notifications(
        db, announcement.id
    ):
        notification_service.notify_announcement_published(db, announcement.id)

    db.commit()
    logger.info("Announcement updated", extra={"event_id": str(announcement_id)})
    db.expire_all()
    return get_announcement(db, announcement_id, include_drafts=True)


def delete_announcement(db: Session, announcement_id: UUID) -> None:
    announcement = get_announcement(db, announcement_id, include_drafts=True)
    if not announcement:
        raise AnnouncementNotFoundError("Announcement not found")
    db.delete(announcement)
    db.commit()
    logger.info("Announcement deleted", extra={"event_id": str(announcement_id)})
