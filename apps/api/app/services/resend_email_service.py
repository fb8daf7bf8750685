"""Resend Email Service.

Sends transactional email (event passes) through the Resend HTTP API with
retry/backoff.
"""

from __future__ import annotations

import html as html_module
import logging
import re

import httpx

from app.core.config import settings
from app.services.http_service import DEFAULT_RETRY_STATUSES, request_with_retries

logger = logging.getLogger(__name__)

RESEND_SEND_URL = "https://api.resend.com/emails"
RESEND_MAX_ATTEMPTS = 3
RESEND_RETRY_BASE_DELAY = 0.5
RESEND_RETRY_MAX_DELAY = 4.0
RESEND_TIMEOUT_SECONDS = 20.0

_SCRIPT_STYLE = re.compile(r"<(script|style)[^>]*>.*?</\1>", re.DOTALL | re.I)
_TAGS = re.compile(r"<[^>]+>")
_SPACES = re.compile(r"\s+")


def html_to_text(content: str) -> str:
    """Plain-text alternative for the HTML body (inbox previews)."""
    text = _SCRIPT_STYLE.sub("", content)
    text = _TAGS.sub(" ", text)
    text = _SPACES.sub(" ", text).strip()
    return html_module.unescape(text)


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    idempotency_key: str | None = None,
) -> tuple[bool, str | None, str | None]:
    """
    Send one HTML email from EMAIL_FROM.

    Args:
        to_email: Recipient email
        subject: Email subject
        body: Email body (HTML)
        idempotency_key: Idempotency key (optional)

    Returns:
        (success, error_message, message_id)
    """
    if not settings.email_configured:
        return False, "Email service not configured", None

    payload: dict[str, object] = {
        "from": settings.EMAIL_FROM,
        "to": [to_email],
        "subject": subject,
        "html": body,
    }
    text = html_to_text(body)
    if text:
        payload["text"] = text

    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }
    if idempotency_key:
        headers["Idempotency-Key"] = idempotency_key

    try:
        async with httpx.AsyncClient(timeout=RESEND_TIMEOUT_SECONDS) as client:

            async def request_fn() -> httpx.Response:
                return await client.post(RESEND_SEND_URL, headers=headers, json=payload)

            response = await request_with_retries(
                request_fn,
                provider="resend",
                max_attempts=RESEND_MAX_ATTEMPTS,
                base_delay=RESEND_RETRY_BASE_DELAY,
                max_delay=RESEND_RETRY_MAX_DELAY,
                retry_statuses=DEFAULT_RETRY_STATUSES,
            )
    except httpx.TimeoutException:
        logger.warning("Resend timeout")
        return False, "Connection timeout", None
    except httpx.HTTPError as e:
        logger.exception("Resend connection error")
        return False, f"Connection error: {e.__class__.__name__}", None

    if 200 <= response.status_code < 300:
        message_id = _message_id(response)
        logger.info("Email sent, message_id=%s", message_id)
        return True, None, message_id

    if response.status_code == 409:
        # Idempotency conflict = already sent
        return True, None, _message_id(response)

    error_msg = f"Resend API error: {response.status_code}"
    detail = _error_detail(response)
    if detail:
        error_msg = f"{error_msg} ({detail})"
    logger.warning("Resend error: %s", error_msg)
    return False, error_msg, None


def _json_body(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _message_id(response: httpx.Response) -> str | None:
    mid = _json_body(response).get("id")
    return mid if isinstance(mid, str) and mid else None


def _error_detail(response: httpx.Response) -> str | None:
    data = _json_body(response)
    return data.get("message") or data.get("error")
