"""Initiative tracker service: sort, advance and reset turns for an encounter.

Each operation reads the encounter's full combatant set, mutates it and
writes it back inside ``encounter_scope`` so that concurrent requests
against the same encounter see a consistent active flag.
"""

from __future__ import annotations

import logging

from server import store
from server.db import encounter_scope
from server.errors import NotFoundError
from tracker import initiative
from tracker.models import Combatant, utcnow

logger = logging.getLogger(__name__)


async def sort_by_initiative(encounter_id: str) -> list[Combatant]:
    async with encounter_scope(encounter_id):
        combatants = await store.find_combatants_by_encounter(encounter_id)
        ranked = initiative.sort_by_initiative(combatants)
        for combatant in ranked:
            combatant.touch()
        await store.save_combatants(ranked)
    logger.info(
        "Sorted encounter %s: %s",
        encounter_id, ", ".join(f"{c.name} ({c.initiative})" for c in ranked),
    )
    return ranked


async def next_turn(encounter_id: str) -> Combatant:
    """Activate the combatant after the current one, wrapping to the top."""
    async with encounter_scope(encounter_id):
        combatants = await store.find_combatants_by_encounter(encounter_id)
        if not combatants:
            raise NotFoundError("No combatants found in encounter", encounter_id)

        advance = initiative.next_turn(combatants)
        for combatant in advance.changed:
            combatant.touch()
        await store.save_combatants(advance.changed)

        encounter = await store.find_encounter(encounter_id)
        if encounter is not None:
            if advance.wrapped:
                encounter.current_round += 1
                logger.info("Encounter %s: round %d", encounter_id, encounter.current_round)
            encounter.current_turn_index = advance.index
            if encounter.started_at is None:
                encounter.started_at = utcnow()
            encounter.touch()
            await store.save_encounter(encounter)

    logger.info("Encounter %s: %s's turn", encounter_id, advance.current.name)
    return advance.current


async def clear_encounter(encounter_id: str) -> None:
    """Drop active flags and turn order without deleting any combatant."""
    async with encounter_scope(encounter_id):
        combatants = initiative.clear(await store.find_combatants_by_encounter(encounter_id))
        for combatant in combatants:
            combatant.touch()
        await store.save_combatants(combatants)

        encounter = await store.find_encounter(encounter_id)
        if encounter is not None:
            encounter.current_round = 1
            encounter.current_turn_index = None
            encounter.touch()
            await store.save_encounter(encounter)
    logger.info("Cleared encounter %s (%d combatants)", encounter_id, len(combatants))
