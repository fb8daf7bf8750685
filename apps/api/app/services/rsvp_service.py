"""RSVP service - resident and guest RSVPs with food orders and custom questions.

Every write is gated by the event's RSVP deadline. The gate runs before any
content validation, so a late request is always answered with the deadline
error.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from app.core.constants import BLOCKS
from app.db.enums import CustomFieldType
from app.db.models import (
    Announcement,
    CustomField,
    EventConfig,
    GuestRsvp,
    GuestRsvpFieldResponse,
    GuestRsvpItem,
    MenuItem,
    Rsvp,
    RsvpFieldResponse,
    RsvpItem,
)
from app.db.types import as_utc
from app.schemas.rsvp import (
    FieldResponseIn,
    GuestRsvpSubmit,
    ItemTotal,
    RsvpItemIn,
    RsvpSubmit,
    RsvpSummary,
)
from app.services import flat_service
from app.utils.normalization import clean_text, is_valid_email, normalize_email
from app.utils.validation import parse_payload

logger = logging.getLogger(__name__)


class RsvpServiceError(Exception):
    """Base exception for RSVP service errors."""

    pass


class EventNotFoundError(RsvpServiceError):
    """Announcement missing or has no RSVP configuration."""

    pass


class RsvpNotFoundError(RsvpServiceError):
    pass


class DeadlinePassedError(RsvpServiceError):
    pass


class RsvpValidationError(RsvpServiceError):
    pass


class DuplicateGuestRsvpError(RsvpServiceError):
    pass


EVENT_NOT_FOUND = "Event not found or RSVP not enabled"
DEADLINE_PASSED = "RSVP deadline has passed"


@dataclass
class _Line:
    menu_item: MenuItem
    plates: int


# =============================================================================
# Event lookup and deadline gate
# =============================================================================


def get_event_config(db: Session, announcement_id: UUID) -> EventConfig:
    """
    Event config with ordered menu and questions, or EventNotFoundError.

    Draft announcements are treated as missing.
    """
    config = (
        db.query(EventConfig)
        .options(
            selectinload(EventConfig.menu_items),
            selectinload(EventConfig.custom_fields),
            selectinload(EventConfig.announcement),
        )
        .join(EventConfig.announcement)
        .filter(
            EventConfig.announcement_id == announcement_id,
            Announcement.published.is_(True),
        )
        .first()
    )
    if not config:
        raise EventNotFoundError(EVENT_NOT_FOUND)
    return config


def check_deadline(config: EventConfig, now: datetime | None = None) -> None:
    now = now or datetime.now(timezone.utc)
    if now > as_utc(config.rsvp_deadline):
        raise DeadlinePassedError(DEADLINE_PASSED)


def _parse(model, payload):
    try:
        return parse_payload(model, payload)
    except ValueError as e:
        raise RsvpValidationError(str(e)) from e


def get_my_rsvp(db: Session, config: EventConfig, resident_id: UUID) -> Rsvp | None:
    return (
        db.query(Rsvp)
        .filter(Rsvp.event_config_id == config.id, Rsvp.resident_id == resident_id)
        .first()
    )


# =============================================================================
# Content validation
# =============================================================================


def _validate_items(config: EventConfig, items: list[RsvpItemIn]) -> list[_Line]:
    """
    Resolve requested plates against the event's menu.

    Events without a menu take no food order. Lines with zero plates are
    dropped; at least one plate must remain.
    """
    if not config.has_food:
        return []
    if not items:
        raise RsvpValidationError("At least one item is required")

    menu = {item.id: item for item in config.menu_items}
    lines: list[_Line] = []
    for item in items:
        if item.plates <= 0:
            continue
        menu_item = menu.get(item.menu_item_id)
        if menu_item is None:
            raise RsvpValidationError("Invalid menu item for this event")
        lines.append(_Line(menu_item=menu_item, plates=item.plates))

    if not lines:
        raise RsvpValidationError("Select at least one plate")
    return lines


def _validate_field_responses(
    config: EventConfig, responses: list[FieldResponseIn]
) -> list[tuple[CustomField, str]]:
    """Check required questions and select options. Blank answers are dropped."""
    answers: dict[UUID, str] = {}
    for response in responses:
        value = clean_text(response.value)
        if response.custom_field_id is not None and value:
            answers[response.custom_field_id] = value

    accepted: list[tuple[CustomField, str]] = []
    for field in config.custom_fields:
        value = answers.get(field.id)
        if value is None:
            if field.required:
                raise RsvpValidationError(f'"{field.label}" is required')
            continue
        if field.field_type == CustomFieldType.SELECT.value and value not in (
            field.options or []
        ):
            raise RsvpValidationError(f'Invalid option for "{field.label}"')
        accepted.append((field, value))
    return accepted


# =============================================================================
# Resident RSVPs
# =============================================================================


def submit_rsvp(
    db: Session,
    announcement_id: UUID,
    resident_id: UUID,
    data: RsvpSubmit | dict | None,
    now: datetime | None = None,
) -> tuple[Rsvp, bool]:
    """
    Create or replace the resident's RSVP.

    Returns (rsvp, created). An existing RSVP keeps its id (and pass code);
    its items and answers are replaced.

    `data` may be the raw request body; it is only validated once the
    deadline check has passed.
    """
    config = get_event_config(db, announcement_id)
    check_deadline(config, now)

    data = _parse(RsvpSubmit, data)
    lines = _validate_items(config, data.items)
    answers = _validate_field_responses(config, data.field_responses)

    rsvp = get_my_rsvp(db, config, resident_id)
    created = rsvp is None
    if created:
        rsvp = Rsvp(event_config_id=config.id, resident_id=resident_id)
        db.add(rsvp)

    rsvp.notes = clean_text(data.notes)
    rsvp.items = [RsvpItem(menu_item=line.menu_item, plates=line.plates) for line in lines]
    rsvp.field_responses = [
        RsvpFieldResponse(custom_field=field, value=value) for field, value in answers
    ]
    db.commit()
    db.refresh(rsvp)

    logger.info(
        "RSVP %s",
        "created" if created else "updated",
        extra={"event_id": str(announcement_id), "resident_id": str(resident_id)},
    )
    return rsvp, created


def cancel_rsvp(
    db: Session,
    announcement_id: UUID,
    resident_id: UUID,
    now: datetime | None = None,
) -> None:
    config = get_event_config(db, announcement_id)
    check_deadline(config, now)

    rsvp = get_my_rsvp(db, config, resident_id)
    if not rsvp:
        raise RsvpNotFoundError("No RSVP found to cancel")
    db.delete(rsvp)
    db.commit()
    logger.info(
        "RSVP cancelled",
        extra={"event_id": str(announcement_id), "resident_id": str(resident_id)},
    )


# =============================================================================
# Guest RSVPs
# =============================================================================


def create_guest_rsvp(
    db: Session,
    announcement_id: UUID,
    data: GuestRsvpSubmit | dict | None,
    now: datetime | None = None,
) -> GuestRsvp:
    """Create a guest RSVP. One per email per event."""
    config = get_event_config(db, announcement_id)
    check_deadline(config, now)
    data = _parse(GuestRsvpSubmit, data)

    name = clean_text(data.name)
    email = normalize_email(data.email)
    phone = clean_text(data.phone)
    if not name or not email or not phone:
        raise RsvpValidationError("Name, email, and phone are required")
    if not is_valid_email(email):
        raise RsvpValidationError("Please enter a valid email address")
    if data.block not in BLOCKS:
        raise RsvpValidationError("Please select a valid block (1-4)")
    flat_number = clean_text(data.flat_number)
    if not flat_number:
        raise RsvpValidationError("Please select a flat number")
    if not flat_service.flat_exists(db, data.block, flat_number):
        raise RsvpValidationError("Invalid flat number for the selected block")

    lines = _validate_items(config, data.items)
    answers = _validate_field_responses(config, data.field_responses)

    existing = (
        db.query(GuestRsvp.id)
        .filter(GuestRsvp.event_config_id == config.id, GuestRsvp.email == email)
        .first()
    )
    if existing:
        raise DuplicateGuestRsvpError(
            "An RSVP with this email already exists for this event"
        )

    guest_rsvp = GuestRsvp(
        event_config_id=config.id,
        name=name,
        email=email,
        phone=phone,
        block=data.block,
        flat_number=flat_number,
        notes=clean_text(data.notes),
        items=[GuestRsvpItem(menu_item=line.menu_item, plates=line.plates) for line in lines],
        field_responses=[
            GuestRsvpFieldResponse(custom_field=field, value=value) for field, value in answers
        ],
    )
    db.add(guest_rsvp)
    db.commit()
    db.refresh(guest_rsvp)

    logger.info("Guest RSVP created", extra={"event_id": str(announcement_id)})
    return guest_rsvp


# =============================================================================
# Admin
# =============================================================================


def get_event_with_rsvps(db: Session, announcement_id: UUID) -> EventConfig:
    """Event config with every resident and guest RSVP loaded."""
    config = (
        db.query(EventConfig)
        .options(
            selectinload(EventConfig.announcement),
            selectinload(EventConfig.menu_items),
            selectinload(EventConfig.custom_fields),
            selectinload(EventConfig.rsvps).selectinload(Rsvp.items),
            selectinload(EventConfig.rsvps).selectinload(Rsvp.field_responses),
            selectinload(EventConfig.rsvps).selectinload(Rsvp.resident),
            selectinload(EventConfig.guest_rsvps).selectinload(GuestRsvp.items),
            selectinload(EventConfig.guest_rsvps).selectinload(GuestRsvp.field_responses),
        )
        .filter(EventConfig.announcement_id == announcement_id)
        .first()
    )
    if not config:
        raise EventNotFoundError(EVENT_NOT_FOUND)
    return config


def summarize(config: EventConfig) -> RsvpSummary:
    """Totals across resident and guest RSVPs, recomputed from the rows."""
    total_plates = 0
    total_amount = 0.0
    paid_count = 0
    unpaid_count = 0
    item_totals: dict[UUID, ItemTotal] = {}

    for rsvp in [*config.rsvps, *config.guest_rsvps]:
        for item in rsvp.items:
            line_total = item.plates * item.menu_item.price_per_plate
            total_plates += item.plates
            total_amount += line_total
            entry = item_totals.setdefault(
                item.menu_item.id,
                ItemTotal(name=item.menu_item.name, plates=0, amount=0.0),
            )
            entry.plates += item.plates
            entry.amount += line_total
        if rsvp.paid:
            paid_count += 1
        else:
            unpaid_count += 1

    return RsvpSummary(
        total_rsvps=len(config.rsvps) + len(config.guest_rsvps),
        total_plates=total_plates,
        total_amount=round(total_amount, 2),
        paid_count=paid_count,
        unpaid_count=unpaid_count,
        item_totals=list(item_totals.values()),
    )


def set_rsvp_paid(db: Session, announcement_id: UUID, rsvp_id: UUID, paid: bool) -> Rsvp:
    rsvp = (
        db.query(Rsvp)
        .join(Rsvp.event_config)
        .filter(Rsvp.id == rsvp_id, EventConfig.announcement_id == announcement_id)
        .first()
    )
    if not rsvp:
        raise RsvpNotFoundError("RSVP not found")
    rsvp.paid = paid
    db.commit()
    db.refresh(rsvp)
    logger.info("RSVP payment updated", extra={"event_id": str(announcement_id), "paid": paid})
    return rsvp


def set_guest_rsvp_paid(
    db: Session, announcement_id: UUID, guest_rsvp_id: UUID, paid: bool
) -> GuestRsvp:
    guest_rsvp = (
        db.query(GuestRsvp)
        .join(GuestRsvp.event_config)
        .filter(
            GuestRsvp.id == guest_rsvp_id,
            EventConfig.announcement_id == announcement_id,
        )
        .first()
    )
    if not guest_rsvp:
        raise RsvpNotFoundError("RSVP not found")
    guest_rsvp.paid = paid
    db.commit()
    db.refresh(guest_rsvp)
    logger.info(
        "Guest RSVP payment updated", extra={"event_id": str(announcement_id), "paid": paid}
    )
    return guest_rsvp
