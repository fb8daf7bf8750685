"""Admin endpoints: residents, roles, announcements and event reports."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, is_superadmin, require_csrf_header, require_roles
from app.db.enums import ROLES_ADMIN, ROLES_SUPERADMIN
from app.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementListResponse,
    AnnouncementRead,
    AnnouncementResult,
    AnnouncementUpdate,
    EventConfigRead,
    EventInfo,
    SportsConfigRead,
)
from app.schemas.auth import UserSession
from app.schemas.resident import (
    AdminResidentCreate,
    ResidentAction,
    ResidentActionResult,
    ResidentListResponse,
    ResidentRead,
    RoleUpdate,
)
from app.schemas.rsvp import (
    AdminGuestRsvpResult,
    AdminRsvpListResponse,
    AdminRsvpRead,
    AdminRsvpResult,
    GuestRsvpRead,
    PaidUpdate,
    SuccessResponse,
)
from app.schemas.sports import AdminSportsRegistrationRead, AdminSportsResponse
from app.services import announcement_service, resident_service, rsvp_service, sports_service
from app.services.announcement_service import AnnouncementNotFoundError
from app.services.resident_service import (
    AlreadyRegisteredError,
    InvalidResidentError,
    ResidentNotFoundError,
    RoleMissingError,
)
from app.services.rsvp_service import EventNotFoundError, RsvpNotFoundError
from app.services.sports_service import SportsEventNotFoundError

router = APIRouter()

require_admin = require_roles(ROLES_ADMIN)
require_superadmin = require_roles(ROLES_SUPERADMIN)


# =============================================================================
# Residents and roles
# =============================================================================


@router.get("/residents", response_model=ResidentListResponse)
def list_residents(
    pending: bool = False,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Pending registrations for admins; the full directory for superadmins."""
    if not pending and not is_superadmin(session):
        raise HTTPException(status_code=403, detail="Only superadmins can list all residents")
    residents = resident_service.list_residents(db, pending_only=pending)
    return ResidentListResponse(residents=[ResidentRead.model_validate(r) for r in residents])


@router.post(
    "/residents",
    response_model=ResidentActionResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_resident(
    data: AdminResidentCreate,
    session: UserSession = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    try:
        resident = resident_service.create_resident(db, data)
    except InvalidResidentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AlreadyRegisteredError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RoleMissingError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ResidentActionResult(resident=ResidentRead.model_validate(resident))


@router.patch(
    "/residents",
    response_model=ResidentActionResult,
    dependencies=[Depends(require_csrf_header)],
)
def approve_or_reject(
    data: ResidentAction,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Approve a registration, or reject it (which deletes the resident)."""
    try:
        if data.action == "approve":
            resident = resident_service.approve_resident(db, data.resident_id)
            return ResidentActionResult(resident=ResidentRead.model_validate(resident))
        resident_service.reject_resident(db, data.resident_id)
    except ResidentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ResidentActionResult()


@router.patch(
    "/roles",
    response_model=ResidentActionResult,
    dependencies=[Depends(require_csrf_header)],
)
def set_role(
    data: RoleUpdate,
    session: UserSession = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    try:
        resident = resident_service.set_role(db, data.resident_id, data.role)
    except InvalidResidentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ResidentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RoleMissingError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ResidentActionResult(resident=ResidentRead.model_validate(resident))


# =============================================================================
# Announcements
# =============================================================================


@router.get("/announcements", response_model=AnnouncementListResponse)
def list_announcements(
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    announcements = announcement_service.list_announcements(db, include_drafts=True)
    return AnnouncementListResponse(
        announcements=[AnnouncementRead.model_validate(a) for a in announcements]
    )


@router.post(
    "/announcements",
    response_model=AnnouncementResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_announcement(
    data: AnnouncementCreate,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    announcement = announcement_service.create_announcement(db, data)
    return AnnouncementResult(announcement=AnnouncementRead.model_validate(announcement))


@router.get("/announcements/{announcement_id}", response_model=AnnouncementRead)
def get_announcement(
    announcement_id: UUID,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    announcement = announcement_service.get_announcement(
        db, announcement_id, include_drafts=True
    )
    if not announcement:
        raise HTTPException(status_code=404, detail="Announcement not found")
    return announcement


@router.patch(
    "/announcements/{announcement_id}",
    response_model=AnnouncementResult,
    dependencies=[Depends(require_csrf_header)],
)
def update_announcement(
    announcement_id: UUID,
    data: AnnouncementUpdate,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        announcement = announcement_service.update_announcement(db, announcement_id, data)
    except AnnouncementNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AnnouncementResult(announcement=AnnouncementRead.model_validate(announcement))


@router.delete(
    "/announcements/{announcement_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_csrf_header)],
)
def delete_announcement(
    announcement_id: UUID,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        announcement_service.delete_announcement(db, announcement_id)
    except AnnouncementNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return SuccessResponse()


# =============================================================================
# Event reports
# =============================================================================


@router.get("/events/{announcement_id}/rsvps", response_model=AdminRsvpListResponse)
def list_rsvps(
    announcement_id: UUID,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Every resident and guest RSVP with totals computed from the rows."""
    try:
        config = rsvp_service.get_event_with_rsvps(db, announcement_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AdminRsvpListResponse(
        announcement=EventInfo.model_validate(config.announcement),
        event_config=EventConfigRead.model_validate(config),
        rsvps=[AdminRsvpRead.model_validate(r) for r in config.rsvps],
        guest_rsvps=[GuestRsvpRead.model_validate(g) for g in config.guest_rsvps],
        summary=rsvp_service.summarize(config),
    )


@router.patch(
    "/events/{announcement_id}/rsvps/guest/{guest_rsvp_id}",
    response_model=AdminGuestRsvpResult,
    dependencies=[Depends(require_csrf_header)],
)
def set_guest_rsvp_paid(
    announcement_id: UUID,
    guest_rsvp_id: UUID,
    data: PaidUpdate,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        guest_rsvp = rsvp_service.set_guest_rsvp_paid(
            db, announcement_id, guest_rsvp_id, data.paid
        )
    except RsvpNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AdminGuestRsvpResult(guest_rsvp=GuestRsvpRead.model_validate(guest_rsvp))


@router.patch(
    "/events/{announcement_id}/rsvps/{rsvp_id}",
    response_model=AdminRsvpResult,
    dependencies=[Depends(require_csrf_header)],
)
def set_rsvp_paid(
    announcement_id: UUID,
    rsvp_id: UUID,
    data: PaidUpdate,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        rsvp = rsvp_service.set_rsvp_paid(db, announcement_id, rsvp_id, data.paid)
    except RsvpNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AdminRsvpResult(rsvp=AdminRsvpRead.model_validate(rsvp))


@router.get(
    "/events/{announcement_id}/sports-registrations",
    response_model=AdminSportsResponse,
)
def list_sports_registrations(
    announcement_id: UUID,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        config = sports_service.get_config_with_registrations(db, announcement_id)
    except SportsEventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AdminSportsResponse(
        announcement=EventInfo.model_validate(config.announcement),
        sports_config=SportsConfigRead.model_validate(config),
        registrations=[AdminSportsRegistrationRead.model_validate(r) for r in config.registrations],
        summary=sports_service.summarize(config),
    )
