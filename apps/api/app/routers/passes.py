"""Event pass endpoints: public view, attendance scan, email and WhatsApp delivery."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_csrf_header, require_roles
from app.core.rate_limit import PUBLIC_LIMIT, limiter
from app.db.enums import ROLES_ADMIN
from app.schemas.auth import UserSession
from app.schemas.event_pass import (
    AttendanceResult,
    DeliveryResult,
    PassEmailRequest,
    PassRead,
    PassWhatsAppRequest,
)
from app.services import pass_delivery_service, pass_service
from app.services.pass_delivery_service import (
    DeliveryFailedError,
    DeliveryNotConfiguredError,
    DeliveryValidationError,
)
from app.services.pass_service import InvalidPassCodeError, PassNotFoundError

router = APIRouter()


def _load_pass(db: Session, code: str) -> PassRead:
    try:
        return pass_service.get_pass(db, code)
    except InvalidPassCodeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PassNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{code}", response_model=PassRead)
def get_pass(code: str, db: Session = Depends(get_db)):
    return _load_pass(db, code)


@router.post(
    "/{code}/attend",
    response_model=AttendanceResult,
    dependencies=[Depends(require_csrf_header)],
)
def mark_attended(
    code: str,
    session: UserSession = Depends(require_roles(ROLES_ADMIN)),
    db: Session = Depends(get_db),
):
    """Record entry. Repeated scans report the first scan's timestamp."""
    try:
        return pass_service.mark_attended(db, code)
    except InvalidPassCodeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PassNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{code}/email", response_model=DeliveryResult)
@limiter.limit(PUBLIC_LIMIT)
async def email_pass(
    request: Request,
    code: str,
    data: PassEmailRequest,
    db: Session = Depends(get_db),
):
    try:
        email, pass_url = pass_delivery_service.validate_email_request(data.email, data.pass_url)
    except DeliveryNotConfiguredError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except DeliveryValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    event_pass = _load_pass(db, code)
    try:
        await pass_delivery_service.send_pass_email(event_pass, email, pass_url)
    except DeliveryFailedError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return DeliveryResult()


@router.post("/{code}/whatsapp", response_model=DeliveryResult)
@limiter.limit(PUBLIC_LIMIT)
async def whatsapp_pass(
    request: Request,
    code: str,
    data: PassWhatsAppRequest,
    db: Session = Depends(get_db),
):
    try:
        phone, pass_url = pass_delivery_service.validate_whatsapp_request(
            data.phone, data.pass_url
        )
    except DeliveryNotConfiguredError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except DeliveryValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    event_pass = _load_pass(db, code)
    try:
        await pass_delivery_service.send_pass_whatsapp(event_pass, phone, pass_url)
    except DeliveryFailedError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return DeliveryResult()
