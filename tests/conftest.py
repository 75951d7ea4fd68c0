"""Shared test fixtures for the DM dashboard server."""

from __future__ import annotations

import pytest_asyncio
from httpx import ASGITransport, AsyncClient


@pytest_asyncio.fixture
async def client():
    """Create a test client with a fresh in-memory database."""
    from server.config import settings

    # Use in-memory SQLite and cheap password hashing for tests
    settings.db_path = ":memory:"
    settings.password_hash_method = "pbkdf2:sha256:1000"

    from server.app import app
    from server.db import close_db, init_db

    await init_db(":memory:")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    await close_db()


@pytest_asyncio.fixture
async def user(client: AsyncClient) -> dict:
    """Register a user and return its info, including a bearer token."""
    resp = await client.post(
        "/auth/register",
        json={"email": "dm@example.com", "password": "correct-horse"},
    )
    assert resp.status_code == 200
    return resp.json()


def auth_header(user: dict) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}


async def create_combatant(client: AsyncClient, user: dict, **fields) -> dict:
    """Create a combatant through the API, filling in required fields."""
    body = {"name": "Goblin", "initiative": 10, "currentHp": 7, "maxHp": 7}
    body.update(fields)
    resp = await client.post("/combatants", json=body, headers=auth_header(user))
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest_asyncio.fixture
async def encounter(client: AsyncClient, user: dict) -> dict:
    """Create an encounter record and return it."""
    resp = await client.post(
        "/encounters",
        json={"name": "Goblin Ambush", "description": "On the road to Phandalin"},
        headers=auth_header(user),
    )
    assert resp.status_code == 201
    return resp.json()
