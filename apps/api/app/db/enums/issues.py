"""Maintenance issue enums."""

from enum import Enum


class IssueCategory(str, Enum):
    ELECTRICAL = "ELECTRICAL"
    PLUMBING = "PLUMBING"
    OTHER = "OTHER"


class IssueStatus(str, Enum):
    """Issues only move OPEN -> CLOSED."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
