"""Resident registration, directory search and personal registrations."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.deps import get_current_session, get_db, get_token_payload, require_csrf_header
from app.schemas.auth import TokenPayload, UserSession
from app.schemas.resident import (
    MyRegistrationsResponse,
    RegistrationResult,
    ResidentRegister,
    ResidentSearchResponse,
    ResidentSearchResult,
)
from app.services import resident_service
from app.services.resident_service import (
    AlreadyRegisteredError,
    InvalidResidentError,
    RoleMissingError,
)

router = APIRouter()


@router.post(
    "",
    response_model=RegistrationResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def register(
    data: ResidentRegister,
    payload: TokenPayload = Depends(get_token_payload),
    db: Session = Depends(get_db),
):
    """Register the signed-in Google account as a resident (pending approval)."""
    try:
        resident = resident_service.register(
            db,
            email=payload.email,
            name=payload.name,
            picture=payload.picture,
            data=data,
        )
    except AlreadyRegisteredError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidResidentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RoleMissingError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return RegistrationResult(id=resident.id)


@router.get("/search", response_model=ResidentSearchResponse)
def search(
    q: str = "",
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    residents = resident_service.search_residents(db, q)
    return ResidentSearchResponse(
        residents=[ResidentSearchResult.model_validate(r) for r in residents]
    )


@router.get("/my-registrations", response_model=MyRegistrationsResponse)
def my_registrations(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """The caller's RSVPs and sports registrations for upcoming events."""
    return resident_service.my_registrations(db, session.resident_id)
