"""Tests for announcements, their event configuration and notification fan-out."""
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from app.db.models import Notification


def _payload(**overrides) -> dict:
    deadline = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()
    payload = {
        "title": "Holi Brunch",
        "summary": "Colours and food",
        "body": "Meet at the clubhouse.",
        "author": "Committee",
        "category": "event",
        "event_config": {
            "meal_type": "lunch",
            "rsvp_deadline": deadline,
            "menu_items": [{"name": "Puri Bhaji", "price_per_plate": 90}],
            "custom_fields": [
                {"label": "Spice level", "field_type": "select", "options": ["Mild", " Hot ", ""]}
            ],
        },
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_announcement_with_event_config(client: AsyncClient, admin, login):
    login(client, admin)
    response = await client.post("/api/admin/announcements", json=_payload())
    assert response.status_code == 201

    announcement = response.json()["announcement"]
    config = announcement["event_config"]
    assert config["menu_items"][0]["price_per_plate"] == 90
    assert config["custom_fields"][0]["options"] == ["Mild", "Hot"]
    assert announcement["sports_config"] is None


@pytest.mark.asyncio
async def test_event_config_requires_deadline(client: AsyncClient, admin, login):
    login(client, admin)
    payload = _payload()
    payload["event_config"]["rsvp_deadline"] = None
    response = await client.post("/api/admin/announcements", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "RSVP deadline is required"


@pytest.mark.asyncio
async def test_select_field_needs_options(client: AsyncClient, admin, login):
    login(client, admin)
    payload = _payload()
    payload["event_config"]["custom_fields"] = [{"label": "Seat", "field_type": "select"}]
    response = await client.post("/api/admin/announcements", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == 'Select field "Seat" needs at least one option'


@pytest.mark.asyncio
async def test_sports_config_requires_a_sport(client: AsyncClient, admin, login):
    login(client, admin)
    deadline = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()
    response = await client.post(
        "/api/admin/announcements",
        json=_payload(sports_config={"registration_deadline": deadline, "sport_items": []}),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "At least one sport is required"


@pytest.mark.asyncio
async def test_publishing_notifies_approved_residents_once(
    client: AsyncClient, db, admin, resident, make_resident, login
):
    make_resident(approved=False)
    login(client, admin)

    response = await client.post("/api/admin/announcements", json=_payload(published=False))
    announcement_id = response.json()["announcement"]["id"]
    assert db.query(Notification).count() == 0

    await client.patch(f"/api/admin/announcements/{announcement_id}", json={"published": True})
    await client.patch(f"/api/admin/announcements/{announcement_id}", json={"published": True})

    recipients = {n.resident_id for n in db.query(Notification).all()}
    # Approved resident and the admin; the pending registration is skipped
    assert recipients == {resident.id, admin.id}


@pytest.mark.asyncio
async def test_public_feed_hides_drafts(client: AsyncClient, make_event):
    published = make_event()
    draft = make_event(published=False)

    feed = await client.get("/api/announcements")
    ids = [a["id"] for a in feed.json()["announcements"]]
    assert str(published.id) in ids
    assert str(draft.id) not in ids

    response = await client.get(f"/api/announcements/{draft.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_partial_update_keeps_untouched_fields(client: AsyncClient, admin, make_event, login):
    event = make_event()
    login(client, admin)
    response = await client.patch(
        f"/api/admin/announcements/{event.id}", json={"title": "  Diwali Night  "}
    )
    assert response.status_code == 200
    updated = response.json()["announcement"]
    assert updated["title"] == "Diwali Night"
    assert updated["event_config"] is not None
    assert updated["body"] == "Join us on the lawn."


@pytest.mark.asyncio
async def test_null_event_config_removes_rsvp(client: AsyncClient, admin, make_event, login):
    event = make_event()
    login(client, admin)
    response = await client.patch(
        f"/api/admin/announcements/{event.id}", json={"event_config": None}
    )
    assert response.status_code == 200
    assert response.json()["announcement"]["event_config"] is None


@pytest.mark.asyncio
async def test_delete_announcement(client: AsyncClient, admin, make_event, login):
    event = make_event()
    login(client, admin)
    response = await client.delete(f"/api/admin/announcements/{event.id}")
    assert response.status_code == 200

    missing = await client.delete(f"/api/admin/announcements/{event.id}")
    assert missing.status_code == 404
