"""Visitor gate-pass enums."""

from enum import Enum


class VisitorStatus(str, Enum):
    """
    Visitor approval status.

    PENDING moves once to APPROVED or REJECTED.
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
