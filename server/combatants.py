"""Combatant service: CRUD, merge-patch updates and the damage/heal rule."""

from __future__ import annotations

import logging

from server import store
from server.db import combatant_scope, transaction
from server.errors import NotFoundError
from server.models import CreateCombatantRequest, UpdateCombatantRequest
from tracker.health import apply_health_delta as _apply_delta
from tracker.health import clamp_hp
from tracker.models import Combatant

logger = logging.getLogger(__name__)


async def _require(combatant_id: str) -> Combatant:
    combatant = await store.find_combatant(combatant_id)
    if combatant is None:
        raise NotFoundError("Combatant", combatant_id)
    return combatant


async def find_all() -> list[Combatant]:
    return await store.find_all_combatants()


async def find_by_id(combatant_id: str) -> Combatant:
    return await _require(combatant_id)


async def find_by_encounter(encounter_id: str) -> list[Combatant]:
    """Combatants of an encounter in turn order, unsorted ones last."""
    return await store.find_combatants_by_encounter(encounter_id)


async def create(req: CreateCombatantRequest) -> Combatant:
    combatant = Combatant(
        name=req.name,
        statblock_id=req.statblock_id,
        initiative=req.initiative,
        current_hp=req.current_hp,
        max_hp=req.max_hp,
        temporary_hp=req.temporary_hp or 0,
        size=req.size,
        type=req.type,
        alignment=req.alignment,
        encounter_id=req.encounter_id,
        is_players_character=bool(req.is_players_character),
        notes=req.notes,
    )
    async with transaction():
        await store.save_combatant(combatant)
    logger.info("Created combatant %s (%s)", combatant.id, combatant.name)
    return combatant


async def update(combatant_id: str, req: UpdateCombatantRequest) -> Combatant:
    """Apply every non-null field of *req* to the combatant.

    Moving a combatant to another encounter drops its turn-order rank. An
    active combatant, whether activated or moved, takes the active flag from
    every other combatant of its encounter.
    """
    changes = req.model_dump(exclude_none=True)

    async with combatant_scope(combatant_id):
        combatant = await _require(combatant_id)
        moved = changes.get("encounter_id", combatant.encounter_id) != combatant.encounter_id

        for field, value in changes.items():
            setattr(combatant, field, value)
        if moved:
            combatant.combat_order = None
        combatant.current_hp = clamp_hp(combatant.current_hp, combatant.max_hp)
        combatant.touch()

        if combatant.is_active and combatant.encounter_id is not None and (
            moved or changes.get("is_active")
        ):
            others = [
                c for c in await store.find_combatants_by_encounter(combatant.encounter_id)
                if c.is_active and c.id != combatant_id
            ]
            for other in others:
                other.is_active = False
                other.touch()
            await store.save_combatants(others)

        await store.save_combatant(combatant)
    if moved:
        logger.info("Moved combatant %s to encounter %s", combatant_id, combatant.encounter_id)
    return combatant


async def delete(combatant_id: str) -> None:
    async with combatant_scope(combatant_id):
        if not await store.combatant_exists(combatant_id):
            raise NotFoundError("Combatant", combatant_id)
        await store.delete_combatant(combatant_id)
    logger.info("Deleted combatant %s", combatant_id)


async def apply_health_delta(combatant_id: str, amount: int) -> Combatant:
    """Heal (positive *amount*) or damage (negative) a combatant."""
    async with combatant_scope(combatant_id):
        combatant = await _require(combatant_id)
        _apply_delta(combatant, amount)
        combatant.touch()
        await store.save_combatant(combatant)
    logger.info(
        "Combatant %s health %+d -> HP %d/%d (temp %d)",
        combatant_id, amount, combatant.current_hp, combatant.max_hp, combatant.temporary_hp,
    )
    return combatant
