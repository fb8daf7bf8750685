"""Data normalization utilities for consistent data quality."""

import re
from typing import Optional

from app.core.constants import DEFAULT_COUNTRY_CODE

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Normalize email to lowercase.

    Args:
        email: Raw email input

    Returns:
        Lowercased email or None if empty
    """
    if not email or not email.strip():
        return None
    return email.strip().lower()


def is_valid_email(email: Optional[str]) -> bool:
    """Loose shape check: something@domain.tld without whitespace."""
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def normalize_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize name by stripping whitespace and collapsing multiple spaces.

    Args:
        name: Raw name input

    Returns:
        Cleaned name or None if empty
    """
    if not name:
        return None
    collapsed = " ".join(name.split())
    return collapsed or None


def clean_text(value: Optional[str]) -> Optional[str]:
    """Strip a free-text field, mapping blank to None."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def strip_phone_separators(phone: str) -> str:
    """Remove spaces, dashes and parentheses."""
    return PHONE_SEPARATORS.sub("", phone)


def normalize_whatsapp_phone(phone: str) -> str:
    """
    Normalize an Indian phone number to E.164.

    Accepts:
    - Already E.164: +919876543210 -> +919876543210
    - Local with trunk prefix: 09876543210 -> +919876543210
    - Bare number: 98765 43210 -> +919876543210
    """
    cleaned = strip_phone_separators(phone.strip())
    if cleaned.startswith("+"):
        return cleaned
    if cleaned.startswith("0"):
        cleaned = cleaned[1:]
    return f"{DEFAULT_COUNTRY_CODE}{cleaned}"
