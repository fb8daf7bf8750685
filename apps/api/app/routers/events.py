"""Event RSVP (resident and guest) and sports registration endpoints."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_approved, require_csrf_header
from app.core.rate_limit import PUBLIC_LIMIT, limiter
from app.schemas.announcement import EventConfigRead, EventInfo, SportsConfigRead
from app.schemas.auth import UserSession
from app.schemas.rsvp import (
    GuestEventResponse,
    GuestRsvpRead,
    GuestRsvpResult,
    RsvpEventResponse,
    RsvpRead,
    RsvpResult,
    SuccessResponse,
)
from app.schemas.sports import (
    SportsEventResponse,
    SportsRegistrationRead,
    SportsRegistrationResult,
)
from app.services import pass_delivery_service, pass_service, rsvp_service, sports_service
from app.services.rsvp_service import (
    DeadlinePassedError,
    DuplicateGuestRsvpError,
    EventNotFoundError,
    RsvpNotFoundError,
    RsvpValidationError,
)
from app.services.sports_service import (
    RegistrationDeadlinePassedError,
    RegistrationNotFoundError,
    SportsEventNotFoundError,
    SportsValidationError,
)

router = APIRouter()


def _rsvp_error(e: Exception) -> HTTPException:
    if isinstance(e, (EventNotFoundError, RsvpNotFoundError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, DuplicateGuestRsvpError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


def _sports_error(e: Exception) -> HTTPException:
    if isinstance(e, (SportsEventNotFoundError, RegistrationNotFoundError)):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


def _schedule_pass_email(background_tasks: BackgroundTasks, db: Session, pass_code: str) -> None:
    event_pass = pass_service.get_pass(db, pass_code)
    background_tasks.add_task(pass_delivery_service.send_pass_email_after_rsvp, event_pass)


# =============================================================================
# Resident RSVP
# =============================================================================


@router.get("/{announcement_id}/rsvp", response_model=RsvpEventResponse)
def get_rsvp(
    announcement_id: UUID,
    session: UserSession = Depends(require_approved),
    db: Session = Depends(get_db),
):
    """Event details, menu, questions and the caller's RSVP if any."""
    try:
        config = rsvp_service.get_event_config(db, announcement_id)
    except EventNotFoundError as e:
        raise _rsvp_error(e)

    my_rsvp = rsvp_service.get_my_rsvp(db, config, session.resident_id)
    return RsvpEventResponse(
        announcement=EventInfo.model_validate(config.announcement),
        event_config=EventConfigRead.model_validate(config),
        my_rsvp=RsvpRead.model_validate(my_rsvp) if my_rsvp else None,
    )


@router.post(
    "/{announcement_id}/rsvp",
    response_model=RsvpResult,
    dependencies=[Depends(require_csrf_header)],
)
def submit_rsvp(
    announcement_id: UUID,
    response: Response,
    background_tasks: BackgroundTasks,
    payload: Any = Body(None),
    session: UserSession = Depends(require_approved),
    db: Session = Depends(get_db),
):
    """Create (201) or replace (200) the caller's RSVP."""
    try:
        rsvp, created = rsvp_service.submit_rsvp(db, announcement_id, session.resident_id, payload)
    except (EventNotFoundError, DeadlinePassedError, RsvpValidationError) as e:
        raise _rsvp_error(e)

    if created:
        response.status_code = status.HTTP_201_CREATED
        _schedule_pass_email(background_tasks, db, rsvp.pass_code)
    return RsvpResult(rsvp=RsvpRead.model_validate(rsvp))


@router.delete(
    "/{announcement_id}/rsvp",
    response_model=SuccessResponse,
    dependencies=[Depends(require_csrf_header)],
)
def cancel_rsvp(
    announcement_id: UUID,
    session: UserSession = Depends(require_approved),
    db: Session = Depends(get_db),
):
    try:
        rsvp_service.cancel_rsvp(db, announcement_id, session.resident_id)
    except (EventNotFoundError, DeadlinePassedError, RsvpNotFoundError) as e:
        raise _rsvp_error(e)
    return SuccessResponse()


# =============================================================================
# Guest RSVP (public)
# =============================================================================


@router.get("/{announcement_id}/rsvp/guest", response_model=GuestEventResponse)
def get_guest_event(announcement_id: UUID, db: Session = Depends(get_db)):
    try:
        config = rsvp_service.get_event_config(db, announcement_id)
    except EventNotFoundError as e:
        raise _rsvp_error(e)
    return GuestEventResponse(
        announcement=EventInfo.model_validate(config.announcement),
        event_config=EventConfigRead.model_validate(config),
    )


@router.post(
    "/{announcement_id}/rsvp/guest",
    response_model=GuestRsvpResult,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(PUBLIC_LIMIT)
def create_guest_rsvp(
    request: Request,
    announcement_id: UUID,
    background_tasks: BackgroundTasks,
    payload: Any = Body(None),
    db: Session = Depends(get_db),
):
    """RSVP for a non-resident guest. One per email per event."""
    try:
        guest_rsvp = rsvp_service.create_guest_rsvp(db, announcement_id, payload)
    except (
        EventNotFoundError,
        DeadlinePassedError,
        RsvpValidationError,
        DuplicateGuestRsvpError,
    ) as e:
        raise _rsvp_error(e)

    _schedule_pass_email(background_tasks, db, guest_rsvp.pass_code)
    return GuestRsvpResult(guest_rsvp=GuestRsvpRead.model_validate(guest_rsvp))


# =============================================================================
# Sports registration
# =============================================================================


@router.get("/{announcement_id}/sports", response_model=SportsEventResponse)
def get_sports(
    announcement_id: UUID,
    session: UserSession = Depends(require_approved),
    db: Session = Depends(get_db),
):
    try:
        config = sports_service.get_sports_config(db, announcement_id)
    except SportsEventNotFoundError as e:
        raise _sports_error(e)

    registration = sports_service.get_my_registration(db, config, session.resident_id)
    return SportsEventResponse(
        announcement=EventInfo.model_validate(config.announcement),
        sports_config=SportsConfigRead.model_validate(config),
        my_registration=(
            SportsRegistrationRead.model_validate(registration) if registration else None
        ),
    )


@router.post(
    "/{announcement_id}/sports",
    response_model=SportsRegistrationResult,
    dependencies=[Depends(require_csrf_header)],
)
def submit_sports(
    announcement_id: UUID,
    response: Response,
    payload: Any = Body(None),
    session: UserSession = Depends(require_approved),
    db: Session = Depends(get_db),
):
    """Create (201) or replace (200) the household's sports registration."""
    try:
        registration, created = sports_service.submit_registration(
            db, announcement_id, session.resident_id, payload
        )
    except (
        SportsEventNotFoundError,
        RegistrationDeadlinePassedError,
        SportsValidationError,
    ) as e:
        raise _sports_error(e)

    if created:
        response.status_code = status.HTTP_201_CREATED
    return SportsRegistrationResult(
        registration=SportsRegistrationRead.model_validate(registration)
    )


@router.delete(
    "/{announcement_id}/sports",
    response_model=SuccessResponse,
    dependencies=[Depends(require_csrf_header)],
)
def cancel_sports(
    announcement_id: UUID,
    session: UserSession = Depends(require_approved),
    db: Session = Depends(get_db),
):
    try:
        sports_service.cancel_registration(db, announcement_id, session.resident_id)
    except (
        SportsEventNotFoundError,
        RegistrationDeadlinePassedError,
        RegistrationNotFoundError,
    ) as e:
        raise _sports_error(e)
    return SuccessResponse()
