"""SQLAlchemy ORM models."""

from app.db.models.announcements import Announcement, CustomField, EventConfig, MenuItem
from app.db.models.issues import Issue
from app.db.models.notifications import Notification
from app.db.models.residents import Flat, Resident, Role
from app.db.models.rsvps import (
    GuestRsvp,
    GuestRsvpFieldResponse,
    GuestRsvpItem,
    Rsvp,
    RsvpFieldResponse,
    RsvpItem,
)
from app.db.models.sports import (
    Participant,
    ParticipantSport,
    SportItem,
    SportsConfig,
    SportsRegistration,
)
from app.db.models.tasks import Task, TaskComment
from app.db.models.visitors import Visitor

__all__ = [
    "Announcement",
    "CustomField",
    "EventConfig",
    "Flat",
    "GuestRsvp",
    "GuestRsvpFieldResponse",
    "GuestRsvpItem",
    "Issue",
    "MenuItem",
    "Notification",
    "Participant",
    "ParticipantSport",
    "Resident",
    "Role",
    "Rsvp",
    "RsvpFieldResponse",
    "RsvpItem",
    "SportItem",
    "SportsConfig",
    "SportsRegistration",
    "Task",
    "TaskComment",
    "Visitor",
]
