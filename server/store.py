"""Record stores for combatants and encounters.

Store functions never commit. Callers that write wrap them in
``server.db.transaction`` or one of the locked scopes.
"""

from __future__ import annotations

from server.db import get_db
from tracker.models import Combatant, Encounter

_COMBATANT_COLUMNS = tuple(Combatant.model_fields)
_ENCOUNTER_COLUMNS = tuple(Encounter.model_fields)

# Unsorted combatants go last; rowid keeps ties in insertion order.
_TURN_ORDER = "ORDER BY combat_order IS NULL, combat_order, rowid"


def _upsert_sql(table: str, columns: tuple[str, ...]) -> str:
    placeholders = ", ".join("?" for _ in columns)
    updates = ", ".join(f"{c} = excluded.{c}" for c in columns if c != "id")
    # ON CONFLICT keeps the rowid stable, unlike INSERT OR REPLACE
    return (
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) "
        f"ON CONFLICT(id) DO UPDATE SET {updates}"
    )


_SAVE_COMBATANT = _upsert_sql("combatants", _COMBATANT_COLUMNS)
_SAVE_ENCOUNTER = _upsert_sql("encounters", _ENCOUNTER_COLUMNS)


# --- Combatants ---

async def save_combatant(combatant: Combatant) -> Combatant:
    db = await get_db()
    await db.execute(
        _SAVE_COMBATANT,
        tuple(getattr(combatant, c) for c in _COMBATANT_COLUMNS),
    )
    return combatant


async def save_combatants(combatants: list[Combatant]) -> list[Combatant]:
    db = await get_db()
    await db.executemany(
        _SAVE_COMBATANT,
        [tuple(getattr(c, col) for col in _COMBATANT_COLUMNS) for c in combatants],
    )
    return combatants


async def find_combatant(combatant_id: str) -> Combatant | None:
    db = await get_db()
    cursor = await db.execute("SELECT * FROM combatants WHERE id = ?", (combatant_id,))
    row = await cursor.fetchone()
    return Combatant.model_validate(dict(row)) if row else None


async def find_all_combatants() -> list[Combatant]:
    db = await get_db()
    cursor = await db.execute("SELECT * FROM combatants ORDER BY rowid")
    return [Combatant.model_validate(dict(r)) for r in await cursor.fetchall()]


async def find_combatants_by_encounter(encounter_id: str) -> list[Combatant]:
    db = await get_db()
    cursor = await db.execute(
        f"SELECT * FROM combatants WHERE encounter_id = ? {_TURN_ORDER}",
        (encounter_id,),
    )
    return [Combatant.model_validate(dict(r)) for r in await cursor.fetchall()]


async def combatant_exists(combatant_id: str) -> bool:
    db = await get_db()
    cursor = await db.execute("SELECT 1 FROM combatants WHERE id = ?", (combatant_id,))
    return await cursor.fetchone() is not None


async def delete_combatant(combatant_id: str) -> None:
    db = await get_db()
    await db.execute("DELETE FROM combatants WHERE id = ?", (combatant_id,))


# --- Encounters ---

async def save_encounter(encounter: Encounter) -> Encounter:
    db = await get_db()
    await db.execute(
        _SAVE_ENCOUNTER,
        tuple(getattr(encounter, c) for c in _ENCOUNTER_COLUMNS),
    )
    return encounter


async def find_encounter(encounter_id: str) -> Encounter | None:
    db = await get_db()
    cursor = await db.execute("SELECT * FROM encounters WHERE id = ?", (encounter_id,))
    row = await cursor.fetchone()
    return Encounter.model_validate(dict(row)) if row else None


async def find_all_encounters(campaign_id: str | None = None) -> list[Encounter]:
    """All encounters, newest first, optionally limited to one campaign."""
    db = await get_db()
    if campaign_id is None:
        cursor = await db.execute(
            "SELECT * FROM encounters ORDER BY created_at DESC, rowid DESC"
        )
    else:
        cursor = await db.execute(
            "SELECT * FROM encounters WHERE campaign_id = ? ORDER BY created_at DESC, rowid DESC",
            (campaign_id,),
        )
    return [Encounter.model_validate(dict(r)) for r in await cursor.fetchall()]


async def find_active_encounters() -> list[Encounter]:
    """Encounters not yet completed, most recently started first."""
    db = await get_db()
    cursor = await db.execute(
        """SELECT * FROM encounters WHERE is_completed = 0
           ORDER BY started_at IS NULL, started_at DESC, rowid DESC"""
    )
    return [Encounter.model_validate(dict(r)) for r in await cursor.fetchall()]


async def encounter_exists(encounter_id: str) -> bool:
    db = await get_db()
    cursor = await db.execute("SELECT 1 FROM encounters WHERE id = ?", (encounter_id,))
    return await cursor.fetchone() is not None


async def delete_encounter(encounter_id: str) -> None:
    db = await get_db()
    await db.execute("DELETE FROM encounters WHERE id = ?", (encounter_id,))
