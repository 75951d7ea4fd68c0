"""SQLite database layer using aiosqlite."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

_db: aiosqlite.Connection | None = None
_write_lock: asyncio.Lock | None = None

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS tokens (
    token_hash TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id),
    created_at TEXT NOT NULL,
    expires_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS encounters (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    campaign_id TEXT,
    is_completed INTEGER NOT NULL DEFAULT 0,
    current_round INTEGER NOT NULL DEFAULT 1,
    current_turn_index INTEGER,
    started_at TEXT,
    ended_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS combatants (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    statblock_id TEXT,
    initiative INTEGER NOT NULL,
    current_hp INTEGER NOT NULL,
    max_hp INTEGER NOT NULL,
    temporary_hp INTEGER NOT NULL DEFAULT 0,
    size TEXT,
    type TEXT,
    alignment TEXT,
    encounter_id TEXT,
    combat_order INTEGER,
    is_active INTEGER NOT NULL DEFAULT 0,
    is_players_character INTEGER NOT NULL DEFAULT 0,
    notes TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_combatants_encounter
    ON combatants(encounter_id, combat_order);
CREATE INDEX IF NOT EXISTS idx_encounters_campaign ON encounters(campaign_id);
CREATE INDEX IF NOT EXISTS idx_tokens_user ON tokens(user_id);
"""


async def init_db(db_path: str = "dashboard.db") -> aiosqlite.Connection:
    global _db, _write_lock
    _db = await aiosqlite.connect(db_path)
    _db.row_factory = aiosqlite.Row
    await _db.executescript(SCHEMA)
    await _db.commit()
    # Locks bind to the running loop, so each connection gets a fresh one
    _write_lock = asyncio.Lock()
    return _db


async def get_db() -> aiosqlite.Connection:
    if _db is None:
        raise RuntimeError("Database not initialized")
    return _db


async def close_db() -> None:
    global _db, _write_lock
    if _db:
        await _db.close()
        _db = None
    _write_lock = None


@asynccontextmanager
async def transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Run a block of writes as one unit: commit on success, roll back on error.

    All writers share one connection, so units are serialized on a
    connection-wide lock.
    """
    db = await get_db()
    assert _write_lock is not None
    async with _write_lock:
        try:
            yield db
        except BaseException:
            await db.rollback()
            raise
        else:
            await db.commit()


def encounter_scope(encounter_id: str):
    """Atomic unit for a read-modify-write over one encounter's combatants.

    The connection-wide lock in ``transaction`` already serializes every
    unit, which covers mutual exclusion per encounter.
    """
    return transaction()


def combatant_scope(combatant_id: str):
    return transaction()
