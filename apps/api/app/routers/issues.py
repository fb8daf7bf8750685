"""Maintenance issue endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.deps import (
    can_manage_issues,
    get_current_session,
    get_db,
    require_approved,
    require_csrf_header,
    require_roles,
)
from app.db.enums import ROLES_CAN_MANAGE_ISSUES, Role
from app.schemas.auth import UserSession
from app.schemas.issue import IssueClose, IssueCreate, IssueListResponse, IssueRead, IssueResult
from app.services import issue_service
from app.services.issue_service import (
    IssueAlreadyClosedError,
    IssueNotFoundError,
    IssueValidationError,
)

router = APIRouter()


@router.get("", response_model=IssueListResponse)
def list_issues(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Managers see every issue; everyone else sees the issues they raised."""
    is_manager = can_manage_issues(session)
    issues = issue_service.list_issues(db, None if is_manager else session.resident_id)
    return IssueListResponse(
        issues=[IssueRead.model_validate(i) for i in issues],
        is_manager=is_manager,
        can_raise=session.role != Role.FACILITY_MANAGER,
    )


@router.post(
    "",
    response_model=IssueResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def raise_issue(
    data: IssueCreate,
    session: UserSession = Depends(require_approved),
    db: Session = Depends(get_db),
):
    if session.role == Role.FACILITY_MANAGER:
        raise HTTPException(status_code=403, detail="Facility managers cannot raise issues")
    try:
        issue = issue_service.create_issue(db, data, session.resident_id)
    except IssueValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return IssueResult(issue=IssueRead.model_validate(issue))


@router.patch(
    "/{issue_id}",
    response_model=IssueResult,
    dependencies=[Depends(require_csrf_header)],
)
def close_issue(
    issue_id: UUID,
    data: IssueClose,
    session: UserSession = Depends(require_roles(ROLES_CAN_MANAGE_ISSUES)),
    db: Session = Depends(get_db),
):
    """Close an issue with a mandatory comment."""
    try:
        issue = issue_service.close_issue(db, issue_id, data, session.resident_id)
    except IssueNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (IssueAlreadyClosedError, IssueValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return IssueResult(issue=IssueRead.model_validate(issue))
