"""Tests for outbound request retries."""
import httpx
import pytest

from app.services import http_service

REQUEST = httpx.Request("POST", "https://api.resend.com/emails")


@pytest.fixture
def sleeps(monkeypatch):
    recorded: list[float] = []

    async def fake_sleep(seconds: float):
        recorded.append(seconds)

    monkeypatch.setattr(http_service.asyncio, "sleep", fake_sleep)
    return recorded


def _responses(*statuses, headers=None):
    queue = [httpx.Response(status, request=REQUEST, headers=headers or {}) for status in statuses]
    calls = []

    async def request_fn():
        calls.append(1)
        return queue.pop(0)

    return request_fn, calls


@pytest.mark.asyncio
async def test_retries_server_errors_then_succeeds(sleeps):
    request_fn, calls = _responses(503, 502, 200)
    response = await http_service.request_with_retries(request_fn, provider="resend")
    assert response.status_code == 200
    assert len(calls) == 3
    assert len(sleeps) == 2


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(sleeps):
    request_fn, calls = _responses(422)
    response = await http_service.request_with_retries(request_fn)
    assert response.status_code == 422
    assert len(calls) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_last_retryable_response_is_returned(sleeps):
    request_fn, calls = _responses(500, 500)
    response = await http_service.request_with_retries(request_fn, max_attempts=2)
    assert response.status_code == 500
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_retry_after_header_is_honoured(sleeps):
    request_fn, _ = _responses(429, 200, headers={"Retry-After": "2"})
    await http_service.request_with_retries(request_fn, provider="twilio")
    assert sleeps == [2.0]


@pytest.mark.asyncio
async def test_transport_error_on_last_attempt_propagates(sleeps):
    async def request_fn():
        raise httpx.ConnectError("refused", request=REQUEST)

    with pytest.raises(httpx.ConnectError):
        await http_service.request_with_retries(request_fn, max_attempts=2)
    assert len(sleeps) == 1


def test_backoff_delay_is_capped():
    for attempt in range(6):
        assert http_service.backoff_delay(attempt, 0.5, 4.0) <= 6.0
    assert http_service.backoff_delay(0, 0, 4.0) == 0.0
