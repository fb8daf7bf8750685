"""Announcement and event enums."""

from enum import Enum


class AnnouncementCategory(str, Enum):
    MAINTENANCE = "maintenance"
    EVENT = "event"
    GENERAL = "general"
    URGENT = "urgent"
    SPORTS = "sports"


class AnnouncementPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class MealType(str, Enum):
    """Meal served at a food RSVP event."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class CustomFieldType(str, Enum):
    """Input type of an admin-defined RSVP question."""

    TEXT = "text"
    SELECT = "select"


class AgeCategory(str, Enum):
    """Sports participant age bracket."""

    KID = "kid"
    TEEN = "teen"
    ADULT = "adult"
