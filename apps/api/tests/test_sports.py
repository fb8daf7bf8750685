"""Tests for household sports registration."""
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient


def _sport_ids(event) -> dict[str, str]:
    return {item.name: str(item.id) for item in event.sports_config.sport_items}


@pytest.mark.asyncio
async def test_register_then_replace(client: AsyncClient, resident, make_event, login):
    event = make_event(sports=["Cricket", "Badminton", "Chess"])
    sports = _sport_ids(event)
    login(client, resident)

    created = await client.post(
        f"/api/events/{event.id}/sports",
        json={
            "participants": [
                {
                    "name": " Kabir ",
                    "age_category": "kid",
                    "sport_item_ids": [sports["Chess"], sports["Chess"]],
                },
                {
                    "name": "Asha Rao",
                    "age_category": "adult",
                    "sport_item_ids": [sports["Cricket"], sports["Badminton"]],
                },
            ],
            "notes": "  ",
        },
    )
    assert created.status_code == 201
    registration = created.json()["registration"]
    assert [p["name"] for p in registration["participants"]] == ["Kabir", "Asha Rao"]
    # Repeated sport ids collapse to one entry
    assert len(registration["participants"][0]["sports"]) == 1
    assert registration["notes"] is None

    replaced = await client.post(
        f"/api/events/{event.id}/sports",
        json={"participants": [
            {"name": "Kabir", "age_category": "teen", "sport_item_ids": [sports["Cricket"]]}
        ]},
    )
    assert replaced.status_code == 200
    assert replaced.json()["registration"]["id"] == registration["id"]
    assert len(replaced.json()["registration"]["participants"]) == 1

    page = await client.get(f"/api/events/{event.id}/sports")
    assert page.status_code == 200
    assert page.json()["my_registration"]["participants"][0]["age_category"] == "teen"


@pytest.mark.asyncio
async def test_participant_validation(client: AsyncClient, resident, make_event, login):
    event = make_event(sports=["Cricket"])
    cricket = _sport_ids(event)["Cricket"]
    other_sport = _sport_ids(make_event(sports=["Carrom"]))["Carrom"]
    login(client, resident)

    cases = [
        ([], "At least one participant is required"),
        (
            [{"name": "  ", "age_category": "kid", "sport_item_ids": [cricket]}],
            "Each participant must have a name",
        ),
        (
            [{"name": "Ravi", "age_category": "senior", "sport_item_ids": [cricket]}],
            "Age category must be kid, teen, or adult",
        ),
        (
            [{"name": "Ravi", "age_category": "adult", "sport_item_ids": []}],
            'Participant "Ravi" must select at least one sport',
        ),
        (
            [{"name": "Ravi", "age_category": "adult", "sport_item_ids": [other_sport]}],
            "Invalid sport for this event",
        ),
    ]
    for participants, detail in cases:
        response = await client.post(
            f"/api/events/{event.id}/sports", json={"participants": participants}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == detail


@pytest.mark.asyncio
async def test_deadline_blocks_register_and_cancel(client: AsyncClient, resident, make_event, login):
    event = make_event(
        sports=["Cricket"], deadline=datetime.now(timezone.utc) - timedelta(minutes=5)
    )
    login(client, resident)

    response = await client.post(f"/api/events/{event.id}/sports", json={"participants": []})
    assert response.status_code == 400
    assert response.json()["detail"] == "Registration deadline has passed"

    for body in ({"participants": "everyone"}, {"participants": [{"sport_item_ids": ["x"]}]}):
        mistyped = await client.post(f"/api/events/{event.id}/sports", json=body)
        assert mistyped.status_code == 400
        assert mistyped.json()["detail"] == "Registration deadline has passed"

    cancel = await client.delete(f"/api/events/{event.id}/sports")
    assert cancel.status_code == 400


@pytest.mark.asyncio
async def test_event_without_sports(client: AsyncClient, resident, make_event, login):
    event = make_event()
    login(client, resident)
    response = await client.get(f"/api/events/{event.id}/sports")
    assert response.status_code == 404
    assert response.json()["detail"] == "Event not found or sports registration not enabled"


@pytest.mark.asyncio
async def test_draft_event_takes_no_registrations(client: AsyncClient, resident, make_event, login):
    draft = make_event(sports=["Cricket"], published=False)
    cricket = _sport_ids(draft)["Cricket"]
    login(client, resident)
    response = await client.post(
        f"/api/events/{draft.id}/sports",
        json={"participants": [
            {"name": "Kabir", "age_category": "kid", "sport_item_ids": [cricket]}
        ]},
    )
    assert response.status_code == 404

    page = await client.get(f"/api/events/{draft.id}/sports")
    assert page.status_code == 404


@pytest.mark.asyncio
async def test_cancel_registration(client: AsyncClient, resident, make_event, login):
    event = make_event(sports=["Cricket"])
    cricket = _sport_ids(event)["Cricket"]
    login(client, resident)

    missing = await client.delete(f"/api/events/{event.id}/sports")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "No registration found to cancel"

    await client.post(
        f"/api/events/{event.id}/sports",
        json={"participants": [{"name": "Ravi", "age_category": "adult", "sport_item_ids": [cricket]}]},
    )
    response = await client.delete(f"/api/events/{event.id}/sports")
    assert response.status_code == 200

    page = await client.get(f"/api/events/{event.id}/sports")
    assert page.json()["my_registration"] is None


@pytest.mark.asyncio
async def test_admin_summary(client: AsyncClient, admin, resident, make_resident, make_event, login):
    event = make_event(sports=["Cricket", "Chess"])
    sports = _sport_ids(event)

    login(client, resident)
    await client.post(
        f"/api/events/{event.id}/sports",
        json={"participants": [
            {"name": "Kabir", "age_category": "kid", "sport_item_ids": [sports["Chess"]]},
            {"name": "Asha", "age_category": "adult", "sport_item_ids": [sports["Cricket"], sports["Chess"]]},
        ]},
    )
    neighbour = make_resident(block=1, flat_number="102")
    login(client, neighbour)
    await client.post(
        f"/api/events/{event.id}/sports",
        json={"participants": [
            {"name": "Meera", "age_category": "teen", "sport_item_ids": [sports["Cricket"]]}
        ]},
    )

    login(client, admin)
    response = await client.get(f"/api/admin/events/{event.id}/sports-registrations")
    assert response.status_code == 200
    data = response.json()
    assert len(data["registrations"]) == 2

    summary = data["summary"]
    assert summary["total_registrations"] == 2
    assert summary["total_participants"] == 3
    assert {s["name"]: s["count"] for s in summary["sport_counts"]} == {"Cricket": 2, "Chess": 2}
    assert summary["age_counts"] == {"kid": 1, "teen": 1, "adult": 1}


@pytest.mark.asyncio
async def test_admin_summary_requires_admin(client: AsyncClient, resident, make_event, login):
    event = make_event(sports=["Cricket"])
    login(client, resident)
    response = await client.get(f"/api/admin/events/{event.id}/sports-registrations")
    assert response.status_code == 403
