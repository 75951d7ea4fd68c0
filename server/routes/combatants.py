"""Combatant routes: CRUD, health changes and initiative tracking."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from server import combatants, initiative
from server.auth import get_current_user
from server.models import CombatantResponse, CreateCombatantRequest, UpdateCombatantRequest
from tracker.models import Combatant

router = APIRouter(prefix="/combatants", dependencies=[Depends(get_current_user)])


def _to_response(combatant: Combatant) -> CombatantResponse:
    return CombatantResponse.model_validate(combatant.model_dump())


@router.get("", response_model=list[CombatantResponse])
async def list_combatants():
    return [_to_response(c) for c in await combatants.find_all()]


@router.get("/encounter/{encounter_id}", response_model=list[CombatantResponse])
async def list_encounter_combatants(encounter_id: str):
    return [_to_response(c) for c in await combatants.find_by_encounter(encounter_id)]


@router.get("/{combatant_id}", response_model=CombatantResponse)
async def get_combatant(combatant_id: str):
    return _to_response(await combatants.find_by_id(combatant_id))


@router.post("", response_model=CombatantResponse, status_code=201)
async def create_combatant(req: CreateCombatantRequest):
    return _to_response(await combatants.create(req))


@router.put("/{combatant_id}", response_model=CombatantResponse)
async def update_combatant(combatant_id: str, req: UpdateCombatantRequest):
    return _to_response(await combatants.update(combatant_id, req))


@router.delete("/{combatant_id}", status_code=204)
async def delete_combatant(combatant_id: str):
    await combatants.delete(combatant_id)
    return Response(status_code=204)


@router.post("/{combatant_id}/health", response_model=CombatantResponse)
async def update_health(combatant_id: str, amount: int = Query(...)):
    """Apply damage (negative *amount*) or healing (positive)."""
    return _to_response(await combatants.apply_health_delta(combatant_id, amount))


@router.post("/encounter/{encounter_id}/sort", response_model=list[CombatantResponse])
async def sort_encounter(encounter_id: str):
    return [_to_response(c) for c in await initiative.sort_by_initiative(encounter_id)]


@router.post("/encounter/{encounter_id}/next-turn", response_model=CombatantResponse)
async def next_turn(encounter_id: str):
    return _to_response(await initiative.next_turn(encounter_id))


@router.post("/encounter/{encounter_id}/clear", status_code=204)
async def clear_encounter(encounter_id: str):
    await initiative.clear_encounter(encounter_id)
    return Response(status_code=204)
