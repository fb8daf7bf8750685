"""Sports registration service - household sign-ups for sports events."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from app.db.enums import AgeCategory
from app.db.models import (
    Announcement,
    Participant,
    ParticipantSport,
    SportsConfig,
    SportsRegistration,
)
from app.db.types import as_utc
from app.schemas.sports import (
    AgeCounts,
    SportCount,
    SportsRegistrationSubmit,
    SportsSummary,
)
from app.utils.normalization import clean_text, normalize_name
from app.utils.validation import parse_payload

logger = logging.getLogger(__name__)


class SportsServiceError(Exception):
    """Base exception for sports service errors."""

    pass


class SportsEventNotFoundError(SportsServiceError):
    pass


class RegistrationNotFoundError(SportsServiceError):
    pass


class RegistrationDeadlinePassedError(SportsServiceError):
    pass


class SportsValidationError(SportsServiceError):
    pass


EVENT_NOT_FOUND = "Event not found or sports registration not enabled"
DEADLINE_PASSED = "Registration deadline has passed"
_AGE_CATEGORIES = {category.value for category in AgeCategory}


def get_sports_config(db: Session, announcement_id: UUID) -> SportsConfig:
    config = (
        db.query(SportsConfig)
        .options(
            selectinload(SportsConfig.sport_items),
            selectinload(SportsConfig.announcement),
        )
        .join(SportsConfig.announcement)
        .filter(
            SportsConfig.announcement_id == announcement_id,
            Announcement.published.is_(True),
        )
        .first()
    )
    if not config:
        raise SportsEventNotFoundError(EVENT_NOT_FOUND)
    return config


def check_deadline(config: SportsConfig, now: datetime | None = None) -> None:
    now = now or datetime.now(timezone.utc)
    if now > as_utc(config.registration_deadline):
        raise RegistrationDeadlinePassedError(DEADLINE_PASSED)


def get_my_registration(
    db: Session, config: SportsConfig, resident_id: UUID
) -> SportsRegistration | None:
    return (
        db.query(SportsRegistration)
        .options(
            selectinload(SportsRegistration.participants).selectinload(Participant.sports)
        )
        .filter(
            SportsRegistration.sports_config_id == config.id,
            SportsRegistration.resident_id == resident_id,
        )
        .first()
    )


def _build_participants(
    config: SportsConfig, data: SportsRegistrationSubmit
) -> list[Participant]:
    if not data.participants:
        raise SportsValidationError("At least one participant is required")

    sports = {item.id: item for item in config.sport_items}
    participants: list[Participant] = []
    for entry in data.participants:
        name = normalize_name(entry.name)
        if not name:
            raise SportsValidationError("Each participant must have a name")
        if entry.age_category not in _AGE_CATEGORIES:
            raise SportsValidationError("Age category must be kid, teen, or adult")
        # Keep order, drop repeats
        sport_ids = list(dict.fromkeys(entry.sport_item_ids))
        if not sport_ids:
            raise SportsValidationError(
                f'Participant "{name}" must select at least one sport'
            )
        if any(sport_id not in sports for sport_id in sport_ids):
            raise SportsValidationError("Invalid sport for this event")

        participants.append(
            Participant(
                name=name,
                age_category=entry.age_category,
                sports=[ParticipantSport(sport_item=sports[sport_id]) for sport_id in sport_ids],
            )
        )
    return participants


def submit_registration(
    db: Session,
    announcement_id: UUID,
    resident_id: UUID,
    data: SportsRegistrationSubmit | dict | None,
    now: datetime | None = None,
) -> tuple[SportsRegistration, bool]:
    """
    Create or replace the household's registration. Returns (registration, created).

    The raw body is validated only after the deadline check.
    """
    config = get_sports_config(db, announcement_id)
    check_deadline(config, now)
    try:
        data = parse_payload(SportsRegistrationSubmit, data)
    except ValueError as e:
        raise SportsValidationError(str(e)) from e

    participants = _build_participants(config, data)

    registration = get_my_registration(db, config, resident_id)
    created = registration is None
    if created:
        registration = SportsRegistration(sports_config_id=config.id, resident_id=resident_id)
        db.add(registration)

    registration.notes = clean_text(data.notes)
    registration.participants = participants
    db.commit()
    db.refresh(registration)

    logger.info(
        "Sports registration %s",
        "created" if created else "replaced",
        extra={"event_id": str(announcement_id), "resident_id": str(resident_id)},
    )
    return registration, created


def cancel_registration(
    db: Session,
    announcement_id: UUID,
    resident_id: UUID,
    now: datetime | None = None,
) -> None:
    config = get_sports_config(db, announcement_id)
    check_deadline(config, now)

    registration = get_my_registration(db, config, resident_id)
    if not registration:
        raise RegistrationNotFoundError("No registration found to cancel")
    db.delete(registration)
    db.commit()
    logger.info(
        "Sports registration cancelled",
        extra={"event_id": str(announcement_id), "resident_id": str(resident_id)},
    )


# =============================================================================
# Admin
# =============================================================================


def get_config_with_registrations(db: Session, announcement_id: UUID) -> SportsConfig:
    config = (
        db.query(SportsConfig)
        .options(
            selectinload(SportsConfig.announcement),
            selectinload(SportsConfig.sport_items),
            selectinload(SportsConfig.registrations).selectinload(SportsRegistration.resident),
            selectinload(SportsConfig.registrations)
            .selectinload(SportsRegistration.participants)
            .selectinload(Participant.sports),
        )
        .filter(SportsConfig.announcement_id == announcement_id)
        .first()
    )
    if not config:
        raise SportsEventNotFoundError(EVENT_NOT_FOUND)
    return config


def summarize(config: SportsConfig) -> SportsSummary:
    """Registration totals, per-sport entries and per-age-bracket headcount."""
    sport_counts = {item.id: SportCount(name=item.name, count=0) for item in config.sport_items}
    age_counts = AgeCounts()
    total_participants = 0

    for registration in config.registrations:
        for participant in registration.participants:
            total_participants += 1
            if participant.age_category in _AGE_CATEGORIES:
                setattr(
                    age_counts,
                    participant.age_category,
                    getattr(age_counts, participant.age_category) + 1,
                )
            for link in participant.sports:
                if link.sport_item_id in sport_counts:
                    sport_counts[link.sport_item_id].count += 1

    return SportsSummary(
        total_registrations=len(config.registrations),
        total_participants=total_participants,
        sport_counts=list(sport_counts.values()),
        age_counts=age_counts,
    )
