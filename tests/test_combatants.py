"""Tests for combatant routes: CRUD, merge-patch updates and health changes."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.conftest import auth_header, create_combatant


@pytest.mark.asyncio
async def test_create_combatant(client: AsyncClient, user: dict):
    data = await create_combatant(
        client, user,
        name="Bugbear", initiative=14, currentHp=27, maxHp=27,
        size="Medium", type="humanoid", alignment="chaotic evil",
        isPlayersCharacter=False, notes="Surprise attack",
    )
    assert data["id"]
    assert data["name"] == "Bugbear"
    assert data["currentHp"] == 27
    assert data["temporaryHp"] == 0
    assert data["isActive"] is False
    assert data["combatOrder"] is None
    assert data["createdAt"]
    assert data["updatedAt"]


@pytest.mark.asyncio
async def test_create_ignores_active_flag(client: AsyncClient, user: dict):
    data = await create_combatant(client, user, isActive=True, combatOrder=3)
    assert data["isActive"] is False
    assert data["combatOrder"] is None


@pytest.mark.asyncio
async def test_create_accepts_snake_case(client: AsyncClient, user: dict):
    resp = await client.post(
        "/combatants",
        json={"name": "Wolf", "initiative": 12, "current_hp": 11, "max_hp": 11},
        headers=auth_header(user),
    )
    assert resp.status_code == 201
    assert resp.json()["maxHp"] == 11


@pytest.mark.asyncio
@pytest.mark.parametrize("body,field", [
    ({"name": "  ", "initiative": 1, "currentHp": 1, "maxHp": 1}, "name"),
    ({"name": "X", "initiative": 101, "currentHp": 1, "maxHp": 1}, "initiative"),
    ({"name": "X", "initiative": -11, "currentHp": 1, "maxHp": 1}, "initiative"),
    ({"name": "X", "initiative": 1, "currentHp": -1, "maxHp": 1}, "currentHp"),
    ({"name": "X", "initiative": 1, "currentHp": 1, "maxHp": 0}, "maxHp"),
    ({"name": "X", "initiative": 1, "currentHp": 1, "maxHp": 1, "temporaryHp": -2}, "temporaryHp"),
    ({"name": "X", "currentHp": 1, "maxHp": 1}, "initiative"),
])
async def test_create_validation(client: AsyncClient, user: dict, body: dict, field: str):
    resp = await client.post("/combatants", json=body, headers=auth_header(user))
    assert resp.status_code == 422
    fields = [e["field"] for e in resp.json()["detail"]]
    assert any(field in f for f in fields)


@pytest.mark.asyncio
async def test_requires_auth(client: AsyncClient):
    resp = await client.get("/combatants")
    assert resp.status_code == 401
    resp = await client.get("/combatants", headers={"Authorization": "Bearer dmd-bogus"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_list_and_get(client: AsyncClient, user: dict):
    first = await create_combatant(client, user, name="A")
    await create_combatant(client, user, name="B")

    resp = await client.get("/combatants", headers=auth_header(user))
    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()] == ["A", "B"]

    resp = await client.get(f"/combatants/{first['id']}", headers=auth_header(user))
    assert resp.status_code == 200
    assert resp.json()["name"] == "A"


@pytest.mark.asyncio
async def test_get_missing(client: AsyncClient, user: dict):
    resp = await client.get("/combatants/nope", headers=auth_header(user))
    assert resp.status_code == 404
    assert "not found" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_partial_update_only_changes_given_fields(client: AsyncClient, user: dict):
    original = await create_combatant(
        client, user, name="Ogre", initiative=8, currentHp=59, maxHp=59, temporaryHp=4,
    )
    resp = await client.put(
        f"/combatants/{original['id']}", json={"notes": "x"}, headers=auth_header(user),
    )
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["notes"] == "x"
    for key in ("name", "initiative", "currentHp", "maxHp", "temporaryHp",
                "isActive", "combatOrder", "encounterId", "createdAt"):
        assert updated[key] == original[key]


@pytest.mark.asyncio
async def test_update_null_fields_are_ignored(client: AsyncClient, user: dict):
    original = await create_combatant(client, user, name="Ogre", notes="big")
    resp = await client.put(
        f"/combatants/{original['id']}",
        json={"name": None, "notes": None, "initiative": 3},
        headers=auth_header(user),
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Ogre"
    assert resp.json()["notes"] == "big"
    assert resp.json()["initiative"] == 3


@pytest.mark.asyncio
async def test_update_clamps_current_hp_to_new_max(client: AsyncClient, user: dict):
    c = await create_combatant(client, user, currentHp=20, maxHp=20)
    resp = await client.put(f"/combatants/{c['id']}", json={"maxHp": 12}, headers=auth_header(user))
    assert resp.json()["currentHp"] == 12


@pytest.mark.asyncio
async def test_update_missing(client: AsyncClient, user: dict):
    resp = await client.put("/combatants/nope", json={"notes": "x"}, headers=auth_header(user))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_activating_one_clears_others(client: AsyncClient, user: dict):
    a = await create_combatant(client, user, name="A", encounterId="enc-1")
    b = await create_combatant(client, user, name="B", encounterId="enc-1")
    other = await create_combatant(client, user, name="C", encounterId="enc-2")

    for c in (a, other):
        resp = await client.put(f"/combatants/{c['id']}", json={"isActive": True}, headers=auth_header(user))
        assert resp.json()["isActive"] is True
    resp = await client.put(f"/combatants/{b['id']}", json={"isActive": True}, headers=auth_header(user))
    assert resp.json()["isActive"] is True

    resp = await client.get("/combatants/encounter/enc-1", headers=auth_header(user))
    assert {c["name"]: c["isActive"] for c in resp.json()} == {"A": False, "B": True}
    resp = await client.get(f"/combatants/{other['id']}", headers=auth_header(user))
    assert resp.json()["isActive"] is True


@pytest.mark.asyncio
async def test_moving_active_combatant_keeps_one_active(client: AsyncClient, user: dict):
    a = await create_combatant(client, user, name="A", encounterId="enc-1")
    b = await create_combatant(client, user, name="B", encounterId="enc-2")
    await client.post("/combatants/encounter/enc-1/sort", headers=auth_header(user))
    await client.put(f"/combatants/{a['id']}", json={"isActive": True}, headers=auth_header(user))
    await client.put(f"/combatants/{b['id']}", json={"isActive": True}, headers=auth_header(user))

    resp = await client.put(f"/combatants/{a['id']}", json={"encounterId": "enc-2"}, headers=auth_header(user))
    assert resp.status_code == 200
    assert resp.json()["encounterId"] == "enc-2"
    assert resp.json()["combatOrder"] is None

    listing = (await client.get("/combatants/encounter/enc-2", headers=auth_header(user))).json()
    assert sum(c["isActive"] for c in listing) == 1
    assert {c["name"]: c["isActive"] for c in listing} == {"A": True, "B": False}


@pytest.mark.asyncio
async def test_moving_inactive_combatant_keeps_target_turn(client: AsyncClient, user: dict):
    a = await create_combatant(client, user, name="A", encounterId="enc-1")
    b = await create_combatant(client, user, name="B", encounterId="enc-2")
    await client.put(f"/combatants/{b['id']}", json={"isActive": True}, headers=auth_header(user))

    await client.put(f"/combatants/{a['id']}", json={"encounterId": "enc-2"}, headers=auth_header(user))

    listing = (await client.get("/combatants/encounter/enc-2", headers=auth_header(user))).json()
    assert {c["name"]: c["isActive"] for c in listing} == {"A": False, "B": True}


@pytest.mark.asyncio
async def test_delete(client: AsyncClient, user: dict):
    c = await create_combatant(client, user)
    resp = await client.delete(f"/combatants/{c['id']}", headers=auth_header(user))
    assert resp.status_code == 204
    resp = await client.get(f"/combatants/{c['id']}", headers=auth_header(user))
    assert resp.status_code == 404
    resp = await client.delete(f"/combatants/{c['id']}", headers=auth_header(user))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_heal_caps_at_max(client: AsyncClient, user: dict):
    c = await create_combatant(client, user, currentHp=10, maxHp=30)
    resp = await client.post(f"/combatants/{c['id']}/health?amount=999", headers=auth_header(user))
    assert resp.status_code == 200
    assert resp.json()["currentHp"] == 30


@pytest.mark.asyncio
async def test_damage_uses_temporary_hp_first(client: AsyncClient, user: dict):
    c = await create_combatant(client, user, currentHp=10, maxHp=10, temporaryHp=5)
    resp = await client.post(f"/combatants/{c['id']}/health", params={"amount": -8}, headers=auth_header(user))
    data = resp.json()
    assert data["temporaryHp"] == 0
    assert data["currentHp"] == 7

    resp = await client.get(f"/combatants/{c['id']}", headers=auth_header(user))
    assert resp.json()["currentHp"] == 7


@pytest.mark.asyncio
async def test_damage_floors_at_zero(client: AsyncClient, user: dict):
    c = await create_combatant(client, user, currentHp=3, maxHp=10)
    resp = await client.post(f"/combatants/{c['id']}/health", params={"amount": -10}, headers=auth_header(user))
    assert resp.json()["currentHp"] == 0


@pytest.mark.asyncio
async def test_health_missing_combatant(client: AsyncClient, user: dict):
    resp = await client.post("/combatants/nope/health", params={"amount": 5}, headers=auth_header(user))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_health_requires_amount(client: AsyncClient, user: dict):
    c = await create_combatant(client, user)
    resp = await client.post(f"/combatants/{c['id']}/health", headers=auth_header(user))
    assert resp.status_code == 422
