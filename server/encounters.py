"""Encounter service: CRUD plus start/end lifecycle."""

from __future__ import annotations

import logging

from server import store
from server.db import encounter_scope, transaction
from server.errors import NotFoundError
from server.models import CreateEncounterRequest, UpdateEncounterRequest
from tracker import initiative
from tracker.models import Encounter, utcnow

logger = logging.getLogger(__name__)


async def _require(encounter_id: str) -> Encounter:
    encounter = await store.find_encounter(encounter_id)
    if encounter is None:
        raise NotFoundError("Encounter", encounter_id)
    return encounter


async def list_encounters(campaign_id: str | None = None) -> list[Encounter]:
    return await store.find_all_encounters(campaign_id)


async def find_active() -> list[Encounter]:
    return await store.find_active_encounters()


async def find_by_id(encounter_id: str) -> Encounter:
    return await _require(encounter_id)


async def create(req: CreateEncounterRequest) -> Encounter:
    encounter = Encounter(
        name=req.name,
        description=req.description,
        campaign_id=req.campaign_id,
    )
    async with transaction():
        await store.save_encounter(encounter)
    logger.info("Created encounter %s (%s)", encounter.id, encounter.name)
    return encounter


async def update(encounter_id: str, req: UpdateEncounterRequest) -> Encounter:
    async with encounter_scope(encounter_id):
        encounter = await _require(encounter_id)
        for field, value in req.model_dump(exclude_none=True).items():
            setattr(encounter, field, value)
        encounter.touch()
        await store.save_encounter(encounter)
    return encounter


async def start(encounter_id: str) -> Encounter:
    async with encounter_scope(encounter_id):
        encounter = await _require(encounter_id)
        if encounter.started_at is None:
            encounter.started_at = utcnow()
        encounter.is_completed = False
        encounter.ended_at = None
        encounter.touch()
        await store.save_encounter(encounter)
    logger.info("Started encounter %s", encounter_id)
    return encounter


async def end(encounter_id: str) -> Encounter:
    """Mark the encounter completed and reset its combatants' turn state."""
    async with encounter_scope(encounter_id):
        encounter = await _require(encounter_id)
        encounter.is_completed = True
        encounter.ended_at = utcnow()
        encounter.current_turn_index = None
        encounter.touch()
        await store.save_encounter(encounter)

        combatants = initiative.clear(await store.find_combatants_by_encounter(encounter_id))
        for combatant in combatants:
            combatant.touch()
        await store.save_combatants(combatants)
    logger.info("Ended encounter %s after %d round(s)", encounter_id, encounter.current_round)
    return encounter


async def delete(encounter_id: str) -> None:
    """Delete the encounter and detach its combatants.

    Combatants survive as unassigned records with no turn state.
    """
    async with encounter_scope(encounter_id):
        if not await store.encounter_exists(encounter_id):
            raise NotFoundError("Encounter", encounter_id)
        combatants = initiative.clear(await store.find_combatants_by_encounter(encounter_id))
        for combatant in combatants:
            combatant.encounter_id = None
            combatant.touch()
        await store.save_combatants(combatants)
        await store.delete_encounter(encounter_id)
    logger.info("Deleted encounter %s, detached %d combatant(s)", encounter_id, len(combatants))
