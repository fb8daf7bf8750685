"""Notification enums."""

from enum import Enum


class NotificationTarget(str, Enum):
    """Kind of entity a notification points at."""

    ANNOUNCEMENT = "announcement"
    VISITOR = "visitor"
    ISSUE = "issue"
    TASK = "task"
