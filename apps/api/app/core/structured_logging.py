"""Structured logging helpers (PII-safe)."""

from typing import Any


def build_log_context(
    *,
    resident_id: str | None = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
    event_id: str | None = None,
    pass_code: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict without names, emails or phone numbers."""
    context: dict[str, Any] = {}
    if resident_id:
        context["resident_id"] = resident_id
    if request_id:
        context["request_id"] = request_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    if event_id:
        context["event_id"] = event_id
    if pass_code:
        context["pass_code"] = pass_code
    return context
