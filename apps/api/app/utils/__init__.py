"""Utility modules."""

from app.utils.formatting import format_amount, format_event_date
from app.utils.normalization import (
    clean_text,
    is_valid_email,
    normalize_email,
    normalize_name,
    normalize_whatsapp_phone,
    strip_phone_separators,
)

__all__ = [
    # Formatting
    "format_amount",
    "format_event_date",
    # Normalization
    "clean_text",
    "is_valid_email",
    "normalize_email",
    "normalize_name",
    "normalize_whatsapp_phone",
    "strip_phone_separators",
]
