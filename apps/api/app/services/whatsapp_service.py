"""WhatsApp messages through the Twilio Messages REST API."""

from __future__ import annotations

import logging

import httpx

from app.core.config import settings
from app.services.http_service import DEFAULT_RETRY_STATUSES, request_with_retries

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
TWILIO_MAX_ATTEMPTS = 3
TWILIO_TIMEOUT_SECONDS = 15.0


async def send_whatsapp(to_phone: str, body: str) -> tuple[bool, str | None]:
    """
    Send a WhatsApp message to an E.164 number.

    Returns:
        (success, error_message)
    """
    if not settings.whatsapp_configured:
        return False, "WhatsApp service not configured"

    url = TWILIO_MESSAGES_URL.format(sid=settings.TWILIO_ACCOUNT_SID)
    data = {
        "From": settings.TWILIO_WHATSAPP_NUMBER,
        "To": f"whatsapp:{to_phone}",
        "Body": body,
    }
    auth = (settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)

    try:
        async with httpx.AsyncClient(timeout=TWILIO_TIMEOUT_SECONDS, auth=auth) as client:

            async def request_fn() -> httpx.Response:
                return await client.post(url, data=data)

            response = await request_with_retries(
                request_fn,
                provider="twilio",
                max_attempts=TWILIO_MAX_ATTEMPTS,
                retry_statuses=DEFAULT_RETRY_STATUSES,
            )
    except httpx.HTTPError as e:
        logger.exception("Twilio connection error")
        return False, f"Connection error: {e.__class__.__name__}"

    if 200 <= response.status_code < 300:
        logger.info("WhatsApp message queued")
        return True, None

    error_msg = f"Twilio API error: {response.status_code}"
    try:
        detail = response.json().get("message")
    except ValueError:
        detail = None
    if detail:
        error_msg = f"{error_msg} ({detail})"
    logger.warning("Twilio error: %s", error_msg)
    return False, error_msg
