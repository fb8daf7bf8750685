"""Visitor gate-pass endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.deps import (
    can_manage_visitors,
    get_db,
    lives_in_flat,
    require_approved,
    require_csrf_header,
    require_roles,
)
from app.db.enums import ROLES_CAN_MANAGE_VISITORS
from app.schemas.auth import UserSession
from app.schemas.visitor import (
    VisitorCreate,
    VisitorListResponse,
    VisitorRead,
    VisitorResponse,
    VisitorSearchResponse,
    VisitorStatusUpdate,
    VisitorSuggestion,
)
from app.services import visitor_service
from app.services.visitor_service import (
    VisitorAlreadyProcessedError,
    VisitorValidationError,
)

router = APIRouter()


def _can_access(session: UserSession, visitor) -> bool:
    return can_manage_visitors(session) or lives_in_flat(
        session, visitor.visiting_block, visitor.visiting_flat
    )


@router.get("", response_model=VisitorListResponse)
def list_visitors(
    search: str | None = None,
    session: UserSession = Depends(require_approved),
    db: Session = Depends(get_db),
):
    """Staff see every visitor; residents see visitors to their own flat."""
    if can_manage_visitors(session):
        visitors = visitor_service.list_visitors(db, search)
    else:
        visitors = visitor_service.list_for_flat(db, session.block, session.flat_number)
    return VisitorListResponse(visitors=[VisitorRead.model_validate(v) for v in visitors])


@router.post(
    "",
    response_model=VisitorResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_visitor(
    data: VisitorCreate,
    session: UserSession = Depends(require_roles(ROLES_CAN_MANAGE_VISITORS)),
    db: Session = Depends(get_db),
):
    try:
        visitor = visitor_service.create_visitor(db, data, session.resident_id)
    except VisitorValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return VisitorResponse(visitor=VisitorRead.model_validate(visitor))


@router.get("/search", response_model=VisitorSearchResponse)
def search_previous_visitors(
    q: str | None = None,
    session: UserSession = Depends(require_roles(ROLES_CAN_MANAGE_VISITORS)),
    db: Session = Depends(get_db),
):
    """Autofill suggestions from earlier visits (phone or email fragment)."""
    visitors = visitor_service.search_previous(db, q)
    return VisitorSearchResponse(
        visitors=[VisitorSuggestion.model_validate(v) for v in visitors]
    )


@router.get("/{visitor_id}", response_model=VisitorResponse)
def get_visitor(
    visitor_id: UUID,
    session: UserSession = Depends(require_approved),
    db: Session = Depends(get_db),
):
    visitor = visitor_service.get_visitor(db, visitor_id)
    if not visitor:
        raise HTTPException(status_code=404, detail="Visitor not found")
    if not _can_access(session, visitor):
        raise HTTPException(status_code=403, detail="Forbidden")
    return VisitorResponse(visitor=VisitorRead.model_validate(visitor))


@router.patch(
    "/{visitor_id}",
    response_model=VisitorResponse,
    dependencies=[Depends(require_csrf_header)],
)
def decide_visitor(
    visitor_id: UUID,
    data: VisitorStatusUpdate,
    session: UserSession = Depends(require_approved),
    db: Session = Depends(get_db),
):
    """Approve or reject a pending visitor (flat residents and staff)."""
    try:
        decision = visitor_service.validate_decision(data.status)
    except VisitorValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    visitor = visitor_service.get_visitor(db, visitor_id)
    if not visitor:
        raise HTTPException(status_code=404, detail="Visitor not found")
    if not _can_access(session, visitor):
        raise HTTPException(status_code=403, detail="Forbidden")

    try:
        visitor = visitor_service.decide(db, visitor, decision, session.resident_id)
    except VisitorAlreadyProcessedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return VisitorResponse(visitor=VisitorRead.model_validate(visitor))
