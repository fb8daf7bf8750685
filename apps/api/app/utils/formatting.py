"""Display formatting for dates shown to residents."""

from datetime import datetime
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.db.types import as_utc


def format_event_date(value: datetime, tz_name: str | None = None) -> str:
    """Long date in the community's timezone, e.g. "19 October 2026"."""
    local = as_utc(value).astimezone(ZoneInfo(tz_name or settings.DISPLAY_TIMEZONE))
    return f"{local.day} {local.strftime('%B %Y')}"


def format_amount(value: float) -> str:
    """Rupee amount with two decimals."""
    return f"{value:.2f}"
