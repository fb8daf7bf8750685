"""Enum definitions for application constants."""

from app.db.enums.announcements import (
    AgeCategory,
    AnnouncementCategory,
    AnnouncementPriority,
    CustomFieldType,
    MealType,
)
from app.db.enums.auth import ResidentType, Role
from app.db.enums.issues import IssueCategory, IssueStatus
from app.db.enums.notifications import NotificationTarget
from app.db.enums.permissions import (
    ROLES_ADMIN,
    ROLES_ASSIGNABLE,
    ROLES_ASSIGNABLE_ON_CREATE,
    ROLES_CAN_ACCESS_TASKS,
    ROLES_CAN_MANAGE_ISSUES,
    ROLES_CAN_MANAGE_VISITORS,
    ROLES_SUPERADMIN,
)
from app.db.enums.tasks import TASK_TRANSITIONS, TaskCategory, TaskPriority, TaskStatus
from app.db.enums.visitors import VisitorStatus

__all__ = [
    "AgeCategory",
    "AnnouncementCategory",
    "AnnouncementPriority",
    "CustomFieldType",
    "IssueCategory",
    "IssueStatus",
    "MealType",
    "NotificationTarget",
    "ResidentType",
    "Role",
    "ROLES_ADMIN",
    "ROLES_ASSIGNABLE",
    "ROLES_ASSIGNABLE_ON_CREATE",
    "ROLES_CAN_ACCESS_TASKS",
    "ROLES_CAN_MANAGE_ISSUES",
    "ROLES_CAN_MANAGE_VISITORS",
    "ROLES_SUPERADMIN",
    "TASK_TRANSITIONS",
    "TaskCategory",
    "TaskPriority",
    "TaskStatus",
    "VisitorStatus",
]
