"""Resident service - registration, directory search and admin management."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.constants import BLOCKS, RESIDENT_SEARCH_LIMIT
from app.db.enums import ROLES_ASSIGNABLE, ROLES_ASSIGNABLE_ON_CREATE, Role
from app.db.models import (
    Announcement,
    EventConfig,
    Flat,
    Participant,
    ParticipantSport,
    Resident,
    Rsvp,
    SportsConfig,
    SportsRegistration,
)
from app.db.models import Role as RoleRow
from app.schemas.resident import (
    AdminResidentCreate,
    MyRegistrationsResponse,
    MyRsvpItem,
    MySportsRegistrationItem,
    ResidentRegister,
)
from app.services import flat_service
from app.utils.normalization import is_valid_email, normalize_email, normalize_name

logger = logging.getLogger(__name__)


class ResidentServiceError(Exception):
    """Base exception for resident service errors."""

    pass


class ResidentNotFoundError(ResidentServiceError):
    pass


class AlreadyRegisteredError(ResidentServiceError):
    pass


class InvalidResidentError(ResidentServiceError):
    """Input failed a business rule (bad flat, role not assignable, ...)."""

    pass


class RoleMissingError(ResidentServiceError):
    """Role rows have not been seeded."""

    pass


# =============================================================================
# Lookups
# =============================================================================


def get_by_email(db: Session, email: str) -> Resident | None:
    return db.query(Resident).filter(Resident.email == email.lower()).first()


def get_resident(db: Session, resident_id: UUID) -> Resident | None:
    return db.query(Resident).filter(Resident.id == resident_id).first()


def get_role(db: Session, role: Role) -> RoleRow:
    row = db.query(RoleRow).filter(RoleRow.name == role.value).first()
    if not row:
        raise RoleMissingError(f"System error: role {role.value} not found")
    return row


# =============================================================================
# Registration
# =============================================================================


def register(
    db: Session,
    *,
    email: str,
    name: str,
    picture: str | None,
    data: ResidentRegister,
) -> Resident:
    """
    Register the signed-in Google user as a resident.

    New residents get the RESIDENT role and wait for admin approval.
    """
    if get_by_email(db, email):
        raise AlreadyRegisteredError("Already registered")

    flat_number = data.flat_number.strip()
    if not flat_service.flat_exists(db, data.block, flat_number):
        raise InvalidResidentError("Invalid flat number for the selected block")

    resident = Resident(
        email=email.lower(),
        name=normalize_name(name) or "",
        phone=data.phone.strip(),
        block=data.block,
        flat_number=flat_number,
        resident_type=data.resident_type.value,
        google_image=picture,
        is_approved=False,
        role=get_role(db, Role.RESIDENT),
    )
    db.add(resident)
    db.commit()
    db.refresh(resident)

    logger.info("Resident registered", extra={"resident_id": str(resident.id)})
    return resident


# =============================================================================
# Directory
# =============================================================================


def search_residents(db: Session, q: str, limit: int = RESIDENT_SEARCH_LIMIT) -> list[Resident]:
    """
    Search approved residents by name or flat number.

    A query that is a block number (1-4) also matches everyone in that block.
    """
    q = q.strip()
    if not q:
        return []

    pattern = f"%{q}%"
    conditions = [
        Resident.name.ilike(pattern),
        Resident.flat_number.ilike(pattern),
    ]
    if q.isdigit() and int(q) in BLOCKS:
        conditions.append(Resident.block == int(q))

    return (
        db.query(Resident)
        .filter(Resident.is_approved.is_(True), or_(*conditions))
        .order_by(Resident.block.asc(), Resident.flat_number.asc())
        .limit(limit)
        .all()
    )


def my_registrations(
    db: Session, resident_id: UUID, now: datetime | None = None
) -> MyRegistrationsResponse:
    """The resident's RSVPs and sports registrations for upcoming events."""
    now = now or datetime.now(timezone.utc)

    rsvps = (
        db.query(Rsvp)
        .join(Rsvp.event_config)
        .join(EventConfig.announcement)
        .options(joinedload(Rsvp.event_config).joinedload(EventConfig.announcement))
        .filter(Rsvp.resident_id == resident_id, Announcement.date >= now)
        .order_by(Rsvp.created_at.desc())
        .all()
    )
    registrations = (
        db.query(SportsRegistration)
        .join(SportsRegistration.sports_config)
        .join(SportsConfig.announcement)
        .options(
            joinedload(SportsRegistration.sports_config).joinedload(
                SportsConfig.announcement
            ),
            selectinload(SportsRegistration.participants)
            .selectinload(Participant.sports)
            .joinedload(ParticipantSport.sport_item),
        )
        .filter(SportsRegistration.resident_id == resident_id, Announcement.date >= now)
        .order_by(SportsRegistration.created_at.desc())
        .all()
    )

    rsvp_items = []
    for rsvp in rsvps:
        announcement = rsvp.event_config.announcement
        rsvp_items.append(
            MyRsvpItem(
                id=rsvp.id,
                pass_code=rsvp.pass_code,
                announcement_id=announcement.id,
                event_title=announcement.title,
                event_date=announcement.date,
                meal_type=rsvp.event_config.meal_type,
                total_plates=rsvp.total_plates,
                paid=rsvp.paid,
            )
        )

    sports_items = []
    for registration in registrations:
        announcement = registration.sports_config.announcement
        # Distinct sport names in first-seen order
        sports: dict[str, None] = {}
        for participant in registration.participants:
            for link in participant.sports:
                sports.setdefault(link.sport_item.name, None)
        sports_items.append(
            MySportsRegistrationItem(
                id=registration.id,
                announcement_id=announcement.id,
                event_title=announcement.title,
                event_date=announcement.date,
                participant_count=len(registration.participants),
                sports=list(sports),
            )
        )

    return MyRegistrationsResponse(rsvps=rsvp_items, sports_registrations=sports_items)


# =============================================================================
# Admin
# =============================================================================


def list_residents(db: Session, pending_only: bool = False) -> list[Resident]:
    """Pending registrations newest first, or everyone ordered by flat."""
    query = db.query(Resident)
    if pending_only:
        return (
            query.filter(Resident.is_approved.is_(False))
            .order_by(Resident.created_at.desc())
            .all()
        )
    return query.order_by(Resident.block.asc(), Resident.flat_number.asc()).all()


def create_resident(db: Session, data: AdminResidentCreate) -> Resident:
    """Create a pre-approved resident directly (superadmin)."""
    email = normalize_email(data.email)
    if not is_valid_email(email):
        raise InvalidResidentError("Invalid email format")
    if data.role not in ROLES_ASSIGNABLE_ON_CREATE:
        raise InvalidResidentError("Role must be RESIDENT, ADMIN, or SECURITY")
    if get_by_email(db, email):
        raise AlreadyRegisteredError("Email already registered")

    resident = Resident(
        email=email,
        name=normalize_name(data.name) or "",
        phone=data.phone.strip(),
        block=data.block,
        flat_number=data.flat_number.strip(),
        resident_type=data.resident_type.value,
        is_approved=True,
        role=get_role(db, data.role),
    )
    db.add(resident)
    db.commit()
    db.refresh(resident)

    logger.info(
        "Resident created by admin",
        extra={"resident_id": str(resident.id), "role": data.role.value},
    )
    return resident


def approve_resident(db: Session, resident_id: UUID) -> Resident:
    resident = get_resident(db, resident_id)
    if not resident:
        raise ResidentNotFoundError("Resident not found")
    resident.is_approved = True
    db.commit()
    db.refresh(resident)
    logger.info("Resident approved", extra={"resident_id": str(resident_id)})
    return resident


def reject_resident(db: Session, resident_id: UUID) -> None:
    """Delete the registration so the person can register again."""
    resident = get_resident(db, resident_id)
    if not resident:
        raise ResidentNotFoundError("Resident not found")
    db.delete(resident)
    db.commit()
    logger.info("Resident rejected", extra={"resident_id": str(resident_id)})


def set_role(db: Session, resident_id: UUID, role: Role) -> Resident:
    """Change a resident's role. SUPERADMIN is never assignable here."""
    if role not in ROLES_ASSIGNABLE:
        raise InvalidResidentError("Cannot assign SUPERADMIN role via UI")
    resident = get_resident(db, resident_id)
    if not resident:
        raise ResidentNotFoundError("Resident not found")
    resident.role = get_role(db, role)
    db.commit()
    db.refresh(resident)
    logger.info(
        "Resident role changed",
        extra={"resident_id": str(resident_id), "role": role.value},
    )
    return resident


def ensure_roles(db: Session) -> list[str]:
    """Create any missing Role rows. Returns the names created."""
    existing = {name for (name,) in db.query(RoleRow.name)}
    created = [role.value for role in Role if role.value not in existing]
    for name in created:
        db.add(RoleRow(name=name))
    db.commit()
    if created:
        logger.info("Roles seeded", extra={"roles": created})
    return created


def promote_superadmin(db: Session, email: str) -> Resident:
    """Make an already registered resident an approved SUPERADMIN."""
    resident = get_by_email(db, email)
    if not resident:
        raise ResidentNotFoundError(f"Resident not found: {email}")
    resident.role = get_role(db, Role.SUPERADMIN)
    resident.is_approved = True
    db.commit()
    db.refresh(resident)
    logger.info("Resident promoted to superadmin", extra={"resident_id": str(resident.id)})
    return resident
