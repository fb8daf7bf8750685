"""Outbound HTTP to Google, Resend and Twilio with jittered backoff."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STATUSES = {429, 500, 502, 503, 504}


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential delay for `attempt` (0-based) plus up to 50% jitter."""
    delay = min(max_delay, base_delay * (2**attempt))
    return delay + random.uniform(0, delay / 2) if delay else 0.0


def retry_after_seconds(response: httpx.Response, max_delay: float) -> float | None:
    """Provider-requested wait from a numeric Retry-After header, capped."""
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return min(max_delay, max(0.0, float(value)))
    except ValueError:
        return None


async def request_with_retries(
    request_fn: Callable[[], Awaitable[httpx.Response]],
    *,
    provider: str = "http",
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 4.0,
    retry_statuses: set[int] | None = None,
) -> httpx.Response:
    """
    Call `request_fn` until it returns a non-retryable response.

    Transport errors on the last attempt propagate. A retryable status on the
    last attempt is returned to the caller as-is.
    """
    statuses = retry_statuses or DEFAULT_RETRY_STATUSES
    last_attempt = max_attempts - 1

    for attempt in range(max_attempts):
        try:
            response = await request_fn()
        except httpx.RequestError as exc:
            if attempt >= last_attempt:
                raise
            logger.warning(
                "%s request failed (attempt %d/%d)",
                provider,
                attempt + 1,
                max_attempts,
                exc_info=exc,
            )
            await asyncio.sleep(backoff_delay(attempt, base_delay, max_delay))
            continue

        if response.status_code not in statuses or attempt >= last_attempt:
            return response

        delay = retry_after_seconds(response, max_delay)
        if delay is None:
            delay = backoff_delay(attempt, base_delay, max_delay)
        logger.warning(
            "%s returned %s, retrying in %.1fs", provider, response.status_code, delay
        )
        await asyncio.sleep(delay)

    return response
