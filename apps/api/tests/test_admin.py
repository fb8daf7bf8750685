"""Tests for admin resident management and role changes."""
import pytest
from httpx import AsyncClient

from app.db.enums import Role
from app.db.models import Resident


@pytest.mark.asyncio
async def test_admin_lists_pending(client: AsyncClient, admin, make_resident, login):
    pending = make_resident(approved=False, name="Waiting Person")
    login(client, admin)
    response = await client.get("/api/admin/residents", params={"pending": "true"})
    assert response.status_code == 200
    assert [r["id"] for r in response.json()["residents"]] == [str(pending.id)]


@pytest.mark.asyncio
async def test_full_directory_is_superadmin_only(client: AsyncClient, admin, superadmin, login):
    login(client, admin)
    assert (await client.get("/api/admin/residents")).status_code == 403

    login(client, superadmin)
    response = await client.get("/api/admin/residents")
    assert response.status_code == 200
    assert len(response.json()["residents"]) == 2


@pytest.mark.asyncio
async def test_resident_cannot_use_admin_endpoints(client: AsyncClient, resident, login):
    login(client, resident)
    response = await client.get("/api/admin/residents", params={"pending": "true"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_approve_pending_resident(client: AsyncClient, admin, make_resident, login):
    pending = make_resident(approved=False)
    login(client, admin)
    response = await client.patch(
        "/api/admin/residents",
        json={"resident_id": str(pending.id), "action": "approve"},
    )
    assert response.status_code == 200
    assert response.json()["resident"]["is_approved"] is True


@pytest.mark.asyncio
async def test_reject_deletes_registration(client: AsyncClient, db, admin, make_resident, login):
    pending = make_resident(approved=False)
    pending_id = pending.id
    login(client, admin)
    response = await client.patch(
        "/api/admin/residents",
        json={"resident_id": str(pending_id), "action": "reject"},
    )
    assert response.status_code == 200
    db.expire_all()
    assert db.query(Resident).filter(Resident.id == pending_id).first() is None


@pytest.mark.asyncio
async def test_pending_admin_has_no_admin_powers(client: AsyncClient, make_resident, login):
    unapproved_admin = make_resident(role=Role.ADMIN, approved=False)
    login(client, unapproved_admin)
    response = await client.get("/api/admin/residents", params={"pending": "true"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_superadmin_creates_approved_resident(client: AsyncClient, superadmin, login):
    login(client, superadmin)
    response = await client.post(
        "/api/admin/residents",
        json={
            "email": "Guard.Two@Example.com",
            "name": "Guard Two",
            "phone": "9000000000",
            "block": 2,
            "flat_number": "201",
            "role": "SECURITY",
        },
    )
    assert response.status_code == 201
    created = response.json()["resident"]
    assert created["email"] == "guard.two@example.com"
    assert created["is_approved"] is True
    assert created["role"] == "SECURITY"


@pytest.mark.asyncio
async def test_create_resident_rejects_facility_manager_role(
    client: AsyncClient, superadmin, login
):
    login(client, superadmin)
    response = await client.post(
        "/api/admin/residents",
        json={
            "email": "fm@example.com",
            "name": "FM",
            "phone": "9000000000",
            "block": 1,
            "flat_number": "101",
            "role": "FACILITY_MANAGER",
        },
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Role must be RESIDENT, ADMIN, or SECURITY"


@pytest.mark.asyncio
async def test_set_role(client: AsyncClient, superadmin, resident, login):
    login(client, superadmin)
    response = await client.patch(
        "/api/admin/roles",
        json={"resident_id": str(resident.id), "role": "FACILITY_MANAGER"},
    )
    assert response.status_code == 200
    assert response.json()["resident"]["role"] == "FACILITY_MANAGER"


@pytest.mark.asyncio
async def test_superadmin_role_not_assignable(client: AsyncClient, superadmin, resident, login):
    login(client, superadmin)
    response = await client.patch(
        "/api/admin/roles",
        json={"resident_id": str(resident.id), "role": "SUPERADMIN"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot assign SUPERADMIN role via UI"


@pytest.mark.asyncio
async def test_role_change_applies_on_next_request(
    client: AsyncClient, superadmin, resident, login
):
    login(client, superadmin)
    await client.patch(
        "/api/admin/roles",
        json={"resident_id": str(resident.id), "role": "ADMIN"},
    )

    # Authorization reads the role from the resident row
    login(client, resident)
    response = await client.get("/api/admin/residents", params={"pending": "true"})
    assert response.status_code == 200
