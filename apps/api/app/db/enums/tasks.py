"""Task-related enums."""

from enum import Enum


class TaskStatus(str, Enum):
    """Facility task status."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    BLOCKED = "BLOCKED"
    CLOSED = "CLOSED"


class TaskCategory(str, Enum):
    MAINTENANCE = "MAINTENANCE"
    ELECTRICAL = "ELECTRICAL"
    PLUMBING = "PLUMBING"
    SECURITY = "SECURITY"
    GENERAL = "GENERAL"


class TaskPriority(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


# Allowed status moves. CLOSED -> OPEN (reopen) is additionally admin-only.
TASK_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.OPEN: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: frozenset(
        {TaskStatus.ON_HOLD, TaskStatus.BLOCKED, TaskStatus.CLOSED}
    ),
    TaskStatus.ON_HOLD: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.CLOSED}),
    TaskStatus.BLOCKED: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.CLOSED}),
    TaskStatus.CLOSED: frozenset({TaskStatus.OPEN}),
}
