"""Tests for visitor gate passes."""
import pytest
from httpx import AsyncClient

from app.db.models import Notification


def _visitor(**overrides) -> dict:
    payload = {
        "name": "  Courier   Ramesh ",
        "phone": "9812345678",
        "email": "Ramesh@Courier.in",
        "vehicle_number": " KA01AB1234 ",
        "visiting_block": 1,
        "visiting_flat": "101",
    }
    payload.update(overrides)
    return payload


async def _register(client: AsyncClient, guard, login, **overrides) -> dict:
    login(client, guard)
    response = await client.post("/api/visitors", json=_visitor(**overrides))
    assert response.status_code == 201
    return response.json()["visitor"]


@pytest.mark.asyncio
async def test_guard_registers_visitor_and_flat_is_notified(
    client: AsyncClient, db, security_guard, resident, make_resident, login
):
    elsewhere = make_resident(block=3, flat_number="301")
    visitor = await _register(client, security_guard, login)

    assert visitor["name"] == "Courier Ramesh"
    assert visitor["email"] == "ramesh@courier.in"
    assert visitor["vehicle_number"] == "KA01AB1234"
    assert visitor["status"] == "PENDING"

    recipients = {n.resident_id for n in db.query(Notification).all()}
    assert resident.id in recipients
    assert elsewhere.id not in recipients


@pytest.mark.asyncio
async def test_residents_cannot_register_visitors(client: AsyncClient, resident, login):
    login(client, resident)
    response = await client.post("/api/visitors", json=_visitor())
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_visitor_validation(client: AsyncClient, security_guard, login):
    login(client, security_guard)
    cases = [
        (_visitor(name=" "), "Visitor name is required"),
        (_visitor(phone="", email=None), "Phone number or email is required"),
        (_visitor(visiting_block=5), "Valid block number (1-4) is required"),
        (_visitor(visiting_flat="  "), "Flat number is required"),
    ]
    for body, detail in cases:
        response = await client.post("/api/visitors", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == detail


@pytest.mark.asyncio
async def test_resident_sees_only_own_flat(
    client: AsyncClient, security_guard, resident, login
):
    own = await _register(client, security_guard, login)
    await _register(client, security_guard, login, visiting_block=3, visiting_flat="301")

    login(client, resident)
    response = await client.get("/api/visitors")
    assert [v["id"] for v in response.json()["visitors"]] == [own["id"]]

    login(client, security_guard)
    response = await client.get("/api/visitors")
    assert len(response.json()["visitors"]) == 2


@pytest.mark.asyncio
async def test_staff_search_filters_list(client: AsyncClient, security_guard, login):
    await _register(client, security_guard, login)
    await _register(client, security_guard, login, name="Plumber Joseph", phone="9900000000", email=None)

    response = await client.get("/api/visitors", params={"search": "joseph"})
    assert [v["name"] for v in response.json()["visitors"]] == ["Plumber Joseph"]


@pytest.mark.asyncio
async def test_flat_resident_approves_once(client: AsyncClient, security_guard, resident, login):
    visitor = await _register(client, security_guard, login)

    login(client, resident)
    approved = await client.patch(f"/api/visitors/{visitor['id']}", json={"status": "APPROVED"})
    assert approved.status_code == 200
    assert approved.json()["visitor"]["status"] == "APPROVED"
    assert approved.json()["visitor"]["decided_at"] is not None

    again = await client.patch(f"/api/visitors/{visitor['id']}", json={"status": "REJECTED"})
    assert again.status_code == 400
    assert again.json()["detail"] == "Visitor has already been processed"


@pytest.mark.asyncio
async def test_other_flat_cannot_decide(client: AsyncClient, security_guard, make_resident, login):
    visitor = await _register(client, security_guard, login)

    login(client, make_resident(block=3, flat_number="301"))
    response = await client.patch(f"/api/visitors/{visitor['id']}", json={"status": "APPROVED"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Forbidden"

    detail = await client.get(f"/api/visitors/{visitor['id']}")
    assert detail.status_code == 403


@pytest.mark.asyncio
async def test_invalid_decision(client: AsyncClient, security_guard, login):
    visitor = await _register(client, security_guard, login)
    response = await client.patch(f"/api/visitors/{visitor['id']}", json={"status": "PENDING"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid status"


@pytest.mark.asyncio
async def test_unknown_visitor(client: AsyncClient, security_guard, login):
    login(client, security_guard)
    response = await client.get("/api/visitors/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
    assert response.json()["detail"] == "Visitor not found"


@pytest.mark.asyncio
async def test_previous_visitor_search(client: AsyncClient, security_guard, login):
    await _register(client, security_guard, login)
    await _register(client, security_guard, login)
    await _register(client, security_guard, login, name="Someone Else", phone="9000011111", email=None)

    short = await client.get("/api/visitors/search", params={"q": "98"})
    assert short.json()["visitors"] == []

    # Same phone and email collapse to a single suggestion
    response = await client.get("/api/visitors/search", params={"q": "98123"})
    suggestions = response.json()["visitors"]
    assert len(suggestions) == 1
    assert suggestions[0]["vehicle_number"] == "KA01AB1234"
