"""Tests for resident and guest RSVPs, the deadline gate and admin totals."""
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from app.core.config import settings
from app.core.deps import CSRF_HEADER
from app.db.models import Rsvp
from app.schemas.announcement import CustomFieldIn
from app.services import resend_email_service, rsvp_service


def _items(event, plates=(2, 1)) -> list[dict]:
    return [
        {"menu_item_id": str(item.id), "plates": count}
        for item, count in zip(event.event_config.menu_items, plates)
    ]


def _guest(event, **overrides) -> dict:
    payload = {
        "name": "Visiting Cousin",
        "email": "Cousin@Example.com",
        "phone": "9811111111",
        "block": 1,
        "flat_number": "102",
        "items": _items(event, plates=(1, 0)),
    }
    payload.update(overrides)
    return payload


# =============================================================================
# Resident RSVP
# =============================================================================

@pytest.mark.asyncio
async def test_create_then_replace_keeps_pass_code(client: AsyncClient, resident, make_event, login):
    event = make_event()
    login(client, resident)

    created = await client.post(f"/api/events/{event.id}/rsvp", json={"items": _items(event)})
    assert created.status_code == 201
    rsvp = created.json()["rsvp"]
    assert rsvp["total_plates"] == 3

    replaced = await client.post(
        f"/api/events/{event.id}/rsvp",
        json={"items": _items(event, plates=(4, 0)), "notes": "  no onions  "},
    )
    assert replaced.status_code == 200
    again = replaced.json()["rsvp"]
    assert again["pass_code"] == rsvp["pass_code"]
    assert again["total_plates"] == 4
    assert again["notes"] == "no onions"
    assert len(again["items"]) == 1


@pytest.mark.asyncio
async def test_deadline_checked_before_payload(client: AsyncClient, resident, make_event, login):
    event = make_event(deadline=datetime.now(timezone.utc) - timedelta(minutes=1))
    login(client, resident)

    # Empty, malformed and mistyped orders still get the deadline error
    bodies = (
        {},
        {"items": []},
        {"items": [{"menu_item_id": None, "plates": -3}]},
        {"items": "lots"},
        {"items": [{"menu_item_id": "not-a-uuid", "plates": "two"}], "notes": ["x"]},
        [1, 2],
    )
    for body in bodies:
        response = await client.post(f"/api/events/{event.id}/rsvp", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == "RSVP deadline has passed"


@pytest.mark.asyncio
async def test_food_event_needs_a_plate(client: AsyncClient, resident, make_event, login):
    event = make_event()
    login(client, resident)

    empty = await client.post(f"/api/events/{event.id}/rsvp", json={"items": []})
    assert empty.json()["detail"] == "At least one item is required"

    zero = await client.post(
        f"/api/events/{event.id}/rsvp", json={"items": _items(event, plates=(0, 0))}
    )
    assert zero.json()["detail"] == "Select at least one plate"


@pytest.mark.asyncio
async def test_unknown_menu_item_rejected(client: AsyncClient, resident, make_event, login):
    event = make_event()
    other = make_event()
    login(client, resident)
    response = await client.post(f"/api/events/{event.id}/rsvp", json={"items": _items(other)})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid menu item for this event"


@pytest.mark.asyncio
async def test_mistyped_order_is_rejected_before_deadline(
    client: AsyncClient, resident, make_event, login
):
    event = make_event()
    login(client, resident)
    response = await client.post(f"/api/events/{event.id}/rsvp", json={"items": "lots"})
    assert response.status_code == 400
    assert response.json()["detail"] == "items: Input should be a valid list"

    page = await client.get(f"/api/events/{event.id}/rsvp")
    assert page.json()["my_rsvp"] is None


@pytest.mark.asyncio
async def test_rsvp_only_event_takes_no_order(client: AsyncClient, resident, make_event, login):
    event = make_event(with_menu=False)
    login(client, resident)
    response = await client.post(f"/api/events/{event.id}/rsvp", json={})
    assert response.status_code == 201
    assert response.json()["rsvp"]["total_plates"] == 0


@pytest.mark.asyncio
async def test_required_and_select_questions(client: AsyncClient, resident, make_event, login):
    event = make_event(
        custom_fields=[
            CustomFieldIn(label="Allergies", required=True),
            CustomFieldIn(label="Seating", field_type="select", options=["Indoor", "Lawn"]),
        ]
    )
    allergies, seating = event.event_config.custom_fields
    login(client, resident)

    missing = await client.post(
        f"/api/events/{event.id}/rsvp",
        json={"items": _items(event), "field_responses": [
            {"custom_field_id": str(allergies.id), "value": "   "}
        ]},
    )
    assert missing.json()["detail"] == '"Allergies" is required'

    bad_option = await client.post(
        f"/api/events/{event.id}/rsvp",
        json={"items": _items(event), "field_responses": [
            {"custom_field_id": str(allergies.id), "value": "None"},
            {"custom_field_id": str(seating.id), "value": "Roof"},
        ]},
    )
    assert bad_option.json()["detail"] == 'Invalid option for "Seating"'

    ok = await client.post(
        f"/api/events/{event.id}/rsvp",
        json={"items": _items(event), "field_responses": [
            {"custom_field_id": str(allergies.id), "value": "Peanuts"},
            {"custom_field_id": str(seating.id), "value": "Lawn"},
        ]},
    )
    assert ok.status_code == 201
    answers = {r["label"]: r["value"] for r in ok.json()["rsvp"]["field_responses"]}
    assert answers == {"Allergies": "Peanuts", "Seating": "Lawn"}


@pytest.mark.asyncio
async def test_pending_resident_cannot_rsvp(client: AsyncClient, make_resident, make_event, login):
    event = make_event()
    login(client, make_resident(approved=False))
    response = await client.post(f"/api/events/{event.id}/rsvp", json={"items": _items(event)})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_rsvp_for_unknown_event(client: AsyncClient, resident, login):
    login(client, resident)
    response = await client.get("/api/events/00000000-0000-0000-0000-000000000000/rsvp")
    assert response.status_code == 404
    assert response.json()["detail"] == "Event not found or RSVP not enabled"


@pytest.mark.asyncio
async def test_draft_event_takes_no_rsvps(client: AsyncClient, resident, make_event, login):
    draft = make_event(published=False)

    guest = await client.post(f"/api/events/{draft.id}/rsvp/guest", json=_guest(draft))
    assert guest.status_code == 404

    login(client, resident)
    response = await client.post(f"/api/events/{draft.id}/rsvp", json={"items": _items(draft)})
    assert response.status_code == 404
    assert response.json()["detail"] == "Event not found or RSVP not enabled"


@pytest.mark.asyncio
async def test_lost_insert_race_maps_to_conflict(
    client: AsyncClient, db, resident, make_event, login, monkeypatch
):
    event = make_event()
    login(client, resident)
    first = await client.post(f"/api/events/{event.id}/rsvp", json={"items": _items(event)})
    assert first.status_code == 201

    # Second writer never sees the first row, so its insert hits the unique constraint
    monkeypatch.setattr(rsvp_service, "get_my_rsvp", lambda *args, **kwargs: None)
    second = await client.post(f"/api/events/{event.id}/rsvp", json={"items": _items(event)})
    assert second.status_code == 409
    assert second.json()["detail"] == "Conflict with existing data"

    db.rollback()
    assert db.query(Rsvp).count() == 1


@pytest.mark.asyncio
async def test_cancel_rsvp(client: AsyncClient, resident, make_event, login):
    event = make_event()
    login(client, resident)

    missing = await client.delete(f"/api/events/{event.id}/rsvp")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "No RSVP found to cancel"

    await client.post(f"/api/events/{event.id}/rsvp", json={"items": _items(event)})
    cancelled = await client.delete(f"/api/events/{event.id}/rsvp")
    assert cancelled.status_code == 200

    page = await client.get(f"/api/events/{event.id}/rsvp")
    assert page.json()["my_rsvp"] is None


@pytest.mark.asyncio
async def test_new_rsvp_emails_pass_when_configured(
    client: AsyncClient, resident, make_event, login, monkeypatch
):
    sent = []

    async def fake_send_email(to_email, subject, body, idempotency_key=None):
        sent.append((to_email, subject))
        return True, None, "msg_1"

    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(resend_email_service, "send_email", fake_send_email)
    event = make_event()
    login(client, resident)

    await client.post(f"/api/events/{event.id}/rsvp", json={"items": _items(event)})
    # Replacing an RSVP does not resend
    await client.post(f"/api/events/{event.id}/rsvp", json={"items": _items(event)})

    assert sent == [(resident.email, "Your Event Pass: Diwali Dinner")]


# =============================================================================
# Guest RSVP
# =============================================================================

@pytest.mark.asyncio
async def test_guest_rsvp_without_account_or_csrf(client: AsyncClient, make_event):
    event = make_event()
    response = await client.post(
        f"/api/events/{event.id}/rsvp/guest",
        json=_guest(event),
        headers={CSRF_HEADER: ""},
    )
    assert response.status_code == 201
    guest = response.json()["guest_rsvp"]
    assert guest["email"] == "cousin@example.com"
    assert guest["pass_code"].startswith("g-")
    assert guest["total_plates"] == 1


@pytest.mark.asyncio
async def test_duplicate_guest_email_conflicts(client: AsyncClient, make_event):
    event = make_event()
    await client.post(f"/api/events/{event.id}/rsvp/guest", json=_guest(event))
    response = await client.post(
        f"/api/events/{event.id}/rsvp/guest", json=_guest(event, email="cousin@example.COM")
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "An RSVP with this email already exists for this event"


@pytest.mark.asyncio
async def test_guest_rsvp_validation(client: AsyncClient, make_event):
    event = make_event()
    cases = [
        (_guest(event, phone=""), "Name, email, and phone are required"),
        (_guest(event, email="not-an-email"), "Please enter a valid email address"),
        (_guest(event, block=9), "Please select a valid block (1-4)"),
        (_guest(event, flat_number="999"), "Invalid flat number for the selected block"),
    ]
    for body, detail in cases:
        response = await client.post(f"/api/events/{event.id}/rsvp/guest", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == detail


@pytest.mark.asyncio
async def test_guest_deadline_gate(client: AsyncClient, make_event):
    event = make_event(deadline=datetime.now(timezone.utc) - timedelta(hours=1))
    response = await client.post(f"/api/events/{event.id}/rsvp/guest", json={"name": ""})
    assert response.status_code == 400
    assert response.json()["detail"] == "RSVP deadline has passed"

    mistyped = await client.post(
        f"/api/events/{event.id}/rsvp/guest", json={"block": "north", "items": "lots"}
    )
    assert mistyped.json()["detail"] == "RSVP deadline has passed"


@pytest.mark.asyncio
async def test_guest_event_page_is_public(client: AsyncClient, make_event):
    event = make_event()
    response = await client.get(f"/api/events/{event.id}/rsvp/guest")
    assert response.status_code == 200
    assert response.json()["announcement"]["title"] == "Diwali Dinner"


# =============================================================================
# Admin report
# =============================================================================

@pytest.mark.asyncio
async def test_admin_summary_totals(client: AsyncClient, admin, resident, make_event, login):
    event = make_event()
    login(client, resident)
    created = await client.post(f"/api/events/{event.id}/rsvp", json={"items": _items(event)})
    rsvp_id = created.json()["rsvp"]["id"]
    await client.post(f"/api/events/{event.id}/rsvp/guest", json=_guest(event))

    login(client, admin)
    paid = await client.patch(
        f"/api/admin/events/{event.id}/rsvps/{rsvp_id}", json={"paid": True}
    )
    assert paid.json()["rsvp"]["paid"] is True

    report = await client.get(f"/api/admin/events/{event.id}/rsvps")
    assert report.status_code == 200
    summary = report.json()["summary"]
    assert summary["total_rsvps"] == 2
    assert summary["total_plates"] == 4
    # 3 x 150 + 1 x 80.5
    assert summary["total_amount"] == 530.5
    assert summary["paid_count"] == 1
    assert summary["unpaid_count"] == 1
    totals = {t["name"]: t["plates"] for t in summary["item_totals"]}
    assert totals == {"Veg Thali": 3, "Sweet Box": 1}


@pytest.mark.asyncio
async def test_mark_guest_paid_checks_event(client: AsyncClient, admin, make_event, login):
    event = make_event()
    other = make_event()
    guest = await client.post(f"/api/events/{event.id}/rsvp/guest", json=_guest(event))
    guest_id = guest.json()["guest_rsvp"]["id"]

    login(client, admin)
    wrong_event = await client.patch(
        f"/api/admin/events/{other.id}/rsvps/guest/{guest_id}", json={"paid": True}
    )
    assert wrong_event.status_code == 404

    response = await client.patch(
        f"/api/admin/events/{event.id}/rsvps/guest/{guest_id}", json={"paid": True}
    )
    assert response.status_code == 200
    assert response.json()["guest_rsvp"]["paid"] is True


@pytest.mark.asyncio
async def test_menu_change_resets_plate_totals(
    client: AsyncClient, admin, resident, make_event, login
):
    event = make_event()
    await client.post(f"/api/events/{event.id}/rsvp/guest", json=_guest(event))
    login(client, resident)
    created = await client.post(
        f"/api/events/{event.id}/rsvp", json={"items": _items(event, plates=(2, 2))}
    )
    assert created.json()["rsvp"]["total_plates"] == 4

    login(client, admin)
    deadline = datetime.now(timezone.utc) + timedelta(days=1)
    edited = await client.patch(
        f"/api/admin/announcements/{event.id}",
        json={"event_config": {
            "rsvp_deadline": deadline.isoformat(),
            "menu_items": [{"name": "Paneer Tikka", "price_per_plate": 200}],
        }},
    )
    assert edited.status_code == 200

    report = (await client.get(f"/api/admin/events/{event.id}/rsvps")).json()
    assert report["summary"]["total_plates"] == 0
    assert [row["total_plates"] for row in report["rsvps"]] == [0]
    assert [row["total_plates"] for row in report["guest_rsvps"]] == [0]

    login(client, resident)
    page = (await client.get(f"/api/events/{event.id}/rsvp")).json()
    assert page["my_rsvp"]["items"] == []
    assert page["my_rsvp"]["total_plates"] == 0
