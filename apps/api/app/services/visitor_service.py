"""Visitor service - gate passes registered by security, decided by the flat."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from app.core.constants import (
    BLOCKS,
    VISITOR_LIST_LIMIT,
    VISITOR_SEARCH_LIMIT,
    VISITOR_SEARCH_MIN_LENGTH,
)
from app.db.enums import VisitorStatus
from app.db.models import Visitor
from app.schemas.visitor import VisitorCreate
from app.services import notification_service
from app.utils.normalization import clean_text, normalize_name

logger = logging.getLogger(__name__)


class VisitorServiceError(Exception):
    """Base exception for visitor service errors."""

    pass


class VisitorValidationError(VisitorServiceError):
    pass


class VisitorAlreadyProcessedError(VisitorServiceError):
    pass


DECISIONS = {VisitorStatus.APPROVED.value, VisitorStatus.REJECTED.value}


def get_visitor(db: Session, visitor_id: UUID) -> Visitor | None:
    return db.query(Visitor).filter(Visitor.id == visitor_id).first()


def list_visitors(
    db: Session,
    search: str | None = None,
    limit: int = VISITOR_LIST_LIMIT,
) -> list[Visitor]:
    """Recent visitors, optionally filtered by name, phone or email."""
    query = db.query(Visitor)
    search = clean_text(search)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Visitor.name.ilike(pattern),
                Visitor.phone.ilike(pattern),
                Visitor.email.ilike(pattern),
            )
        )
    return query.order_by(Visitor.created_at.desc()).limit(limit).all()


def list_for_flat(
    db: Session, block: int, flat_number: str, limit: int = VISITOR_LIST_LIMIT
) -> list[Visitor]:
    return (
        db.query(Visitor)
        .filter(Visitor.visiting_block == block, Visitor.visiting_flat == flat_number)
        .order_by(Visitor.created_at.desc())
        .limit(limit)
        .all()
    )


def search_previous(db: Session, q: str | None) -> list[Visitor]:
    """
    Past visitors matching a phone or email fragment, for autofill.

    At most one row per (phone, email) pair, newest first.
    """
    q = clean_text(q)
    if not q or len(q) < VISITOR_SEARCH_MIN_LENGTH:
        return []

    pattern = f"%{q}%"
    rows = (
        db.query(Visitor)
        .filter(or_(Visitor.phone.ilike(pattern), Visitor.email.ilike(pattern)))
        .order_by(Visitor.created_at.desc())
        .limit(VISITOR_LIST_LIMIT)
        .all()
    )
    seen: set[tuple[str | None, str | None]] = set()
    results: list[Visitor] = []
    for row in rows:
        key = (row.phone, row.email)
        if key in seen:
            continue
        seen.add(key)
        results.append(row)
        if len(results) >= VISITOR_SEARCH_LIMIT:
            break
    return results


def create_visitor(db: Session, data: VisitorCreate, created_by_id: UUID) -> Visitor:
    """Register a visitor and notify the residents of the visited flat."""
    name = normalize_name(data.name)
    if not name:
        raise VisitorValidationError("Visitor name is required")
    phone = clean_text(data.phone)
    email = clean_text(data.email)
    if not phone and not email:
        raise VisitorValidationError("Phone number or email is required")
    if data.visiting_block not in BLOCKS:
        raise VisitorValidationError("Valid block number (1-4) is required")
    visiting_flat = clean_text(data.visiting_flat)
    if not visiting_flat:
        raise VisitorValidationError("Flat number is required")

    visitor = Visitor(
        name=name,
        phone=phone,
        email=email.lower() if email else None,
        vehicle_number=clean_text(data.vehicle_number),
        visiting_block=data.visiting_block,
        visiting_flat=visiting_flat,
        status=VisitorStatus.PENDING.value,
        created_by_id=created_by_id,
    )
    db.add(visitor)
    db.flush()

    notified = notification_service.notify_visitor_registered(
        db, visitor.id, visitor.visiting_block, visitor.visiting_flat
    )
    db.commit()
    db.refresh(visitor)

    logger.info(
        "Visitor registered",
        extra={"visitor_id": str(visitor.id), "notified": notified},
    )
    return visitor


def validate_decision(status: str | None) -> str:
    if status not in DECISIONS:
        raise VisitorValidationError("Invalid status")
    return status


def decide(db: Session, visitor: Visitor, status: str, decided_by_id: UUID) -> Visitor:
    """
    Approve or reject a pending visitor.

    The PENDING check is part of the UPDATE, so two concurrent decisions
    cannot both succeed.
    """
    status = validate_decision(status)
    if visitor.status != VisitorStatus.PENDING.value:
        raise VisitorAlreadyProcessedError("Visitor has already been processed")

    result = db.execute(
        update(Visitor)
        .where(Visitor.id == visitor.id, Visitor.status == VisitorStatus.PENDING.value)
        .values(
            status=status,
            decided_by_id=decided_by_id,
            decided_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount != 1:
        raise VisitorAlreadyProcessedError("Visitor has already been processed")

    db.refresh(visitor)
    logger.info("Visitor %s", status.lower(), extra={"visitor_id": str(visitor.id)})
    return visitor
