"""Issue service - maintenance issues raised by residents, closed by managers."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from app.db.enums import IssueCategory, IssueStatus
from app.db.models import Issue
from app.schemas.issue import IssueClose, IssueCreate
from app.services import notification_service
from app.utils.normalization import clean_text

logger = logging.getLogger(__name__)


class IssueServiceError(Exception):
    """Base exception for issue service errors."""

    pass


class IssueNotFoundError(IssueServiceError):
    pass


class IssueValidationError(IssueServiceError):
    pass


class IssueAlreadyClosedError(IssueServiceError):
    pass


CATEGORIES = {category.value for category in IssueCategory}


def _query(db: Session):
    return db.query(Issue).options(
        joinedload(Issue.resident),
        joinedload(Issue.closed_by),
    )


def get_issue(db: Session, issue_id: UUID) -> Issue | None:
    return _query(db).filter(Issue.id == issue_id).first()


def list_issues(db: Session, resident_id: UUID | None = None) -> list[Issue]:
    """All issues, or only those raised by `resident_id`, newest first."""
    query = _query(db)
    if resident_id is not None:
        query = query.filter(Issue.resident_id == resident_id)
    return query.order_by(Issue.created_at.desc()).all()


def create_issue(db: Session, data: IssueCreate, resident_id: UUID) -> Issue:
    title = clean_text(data.title)
    description = clean_text(data.description)
    category = clean_text(data.category)
    if not title or not description or not category:
        raise IssueValidationError("Title, description, and category are required")
    if category not in CATEGORIES:
        raise IssueValidationError("Category must be ELECTRICAL, PLUMBING, or OTHER")

    issue = Issue(
        title=title,
        description=description,
        category=category,
        status=IssueStatus.OPEN.value,
        resident_id=resident_id,
    )
    db.add(issue)
    db.flush()

    notified = notification_service.notify_issue_raised(db, issue.id)
    db.commit()

    logger.info(
        "Issue raised",
        extra={"issue_id": str(issue.id), "category": category, "notified": notified},
    )
    return get_issue(db, issue.id)


def close_issue(db: Session, issue_id: UUID, data: IssueClose, closed_by_id: UUID) -> Issue:
    """Close an open issue with a comment and notify the reporter."""
    issue = get_issue(db, issue_id)
    if not issue:
        raise IssueNotFoundError("Issue not found")
    if issue.status == IssueStatus.CLOSED.value:
        raise IssueAlreadyClosedError("Issue is already closed")

    comment = clean_text(data.closure_comment)
    if not comment:
        raise IssueValidationError("Closure comment is required")

    issue.status = IssueStatus.CLOSED.value
    issue.closure_comment = comment
    issue.closed_by_id = closed_by_id
    issue.closed_at = datetime.now(timezone.utc)
    notification_service.notify_issue_closed(db, issue.id, issue.resident_id)
    db.commit()

    logger.info("Issue closed", extra={"issue_id": str(issue.id)})
    db.expire_all()
    return get_issue(db, issue.id)
