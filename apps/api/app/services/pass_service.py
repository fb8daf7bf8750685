"""Event passes - lookup by pass code and attendance marking at the entrance.

A pass code is "r-<rsvp id>" for residents and "g-<guest rsvp id>" for guests.
"""

import logging
import re
import uuid
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from app.core.constants import PASS_PREFIX_GUEST, PASS_PREFIX_RESIDENT
from app.db.models import EventConfig, GuestRsvp, Rsvp
from app.db.types import as_utc
from app.schemas.event_pass import AttendanceResult, PassFieldResponse, PassItem, PassRead

logger = logging.getLogger(__name__)

PASS_CODE_PATTERN = re.compile(rf"^({PASS_PREFIX_RESIDENT}|{PASS_PREFIX_GUEST})-(.+)$")


class PassServiceError(Exception):
    """Base exception for pass service errors."""

    pass


class InvalidPassCodeError(PassServiceError):
    pass


class PassNotFoundError(PassServiceError):
    pass


def parse_pass_code(code: str) -> tuple[str, uuid.UUID]:
    """
    Split a pass code into (prefix, id).

    Raises InvalidPassCodeError for a malformed code and PassNotFoundError
    when the id part cannot name any row.
    """
    match = PASS_CODE_PATTERN.match(code)
    if not match:
        raise InvalidPassCodeError("Invalid pass code")
    prefix, raw_id = match.groups()
    try:
        return prefix, uuid.UUID(raw_id)
    except ValueError:
        raise PassNotFoundError("Pass not found")


def _model_for(prefix: str):
    return Rsvp if prefix == PASS_PREFIX_RESIDENT else GuestRsvp


def _load(db: Session, code: str) -> Rsvp | GuestRsvp:
    prefix, pass_id = parse_pass_code(code)
    model = _model_for(prefix)
    options = [
        selectinload(model.items),
        selectinload(model.field_responses),
        selectinload(model.event_config).selectinload(EventConfig.announcement),
        selectinload(model.event_config).selectinload(EventConfig.menu_items),
    ]
    if model is Rsvp:
        options.append(selectinload(Rsvp.resident))
    row = db.query(model).options(*options).filter(model.id == pass_id).first()
    if not row:
        raise PassNotFoundError("Pass not found")
    return row


def get_pass(db: Session, code: str) -> PassRead:
    """Public pass view for a resident or guest RSVP."""
    row = _load(db, code)
    announcement = row.event_config.announcement

    if isinstance(row, Rsvp):
        holder = row.resident
        pass_type = "resident"
    else:
        holder = row
        pass_type = "guest"

    return PassRead(
        type=pass_type,
        pass_code=row.pass_code,
        event_title=announcement.title,
        event_date=announcement.date,
        announcement_id=announcement.id,
        name=holder.name,
        email=holder.email,
        block=holder.block,
        flat_number=holder.flat_number,
        has_food=row.event_config.has_food,
        items=[
            PassItem(
                name=item.menu_item.name,
                plates=item.plates,
                price_per_plate=item.menu_item.price_per_plate,
            )
            for item in row.items
        ],
        paid=row.paid,
        notes=row.notes,
        created_at=row.created_at,
        attended=row.attended,
        attended_at=row.attended_at,
        field_responses=[
            PassFieldResponse(label=response.label, value=response.value)
            for response in row.field_responses
        ],
    )


def mark_attended(db: Session, code: str) -> AttendanceResult:
    """
    Record entry for a pass.

    Idempotent: only the first scan flips `attended`; later scans report the
    original timestamp with already_attended=True.
    """
    prefix, pass_id = parse_pass_code(code)
    model = _model_for(prefix)
    row = db.query(model).filter(model.id == pass_id).first()
    if not row:
        raise PassNotFoundError("Pass not found")
    name = row.resident.name if isinstance(row, Rsvp) else row.name

    now = datetime.now(timezone.utc)
    result = db.execute(
        update(model)
        .where(model.id == pass_id, model.attended.is_(False))
        .values(attended=True, attended_at=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()

    if result.rowcount == 1:
        logger.info("Attendance marked", extra={"pass_code": code})
        return AttendanceResult(already_attended=False, attended_at=now, name=name)

    db.refresh(row)
    return AttendanceResult(
        already_attended=True,
        attended_at=as_utc(row.attended_at),
        name=name,
    )
