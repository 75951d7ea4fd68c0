"""Encounter routes: CRUD and start/end lifecycle."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from server import encounters
from server.auth import get_current_user
from server.models import CreateEncounterRequest, EncounterResponse, UpdateEncounterRequest
from tracker.models import Encounter

router = APIRouter(prefix="/encounters", dependencies=[Depends(get_current_user)])


def _to_response(encounter: Encounter) -> EncounterResponse:
    return EncounterResponse.model_validate(encounter.model_dump())


@router.get("", response_model=list[EncounterResponse])
async def list_encounters(campaign_id: str | None = Query(default=None, alias="campaignId")):
    return [_to_response(e) for e in await encounters.list_encounters(campaign_id)]


@router.get("/active", response_model=list[EncounterResponse])
async def list_active_encounters():
    return [_to_response(e) for e in await encounters.find_active()]


@router.get("/{encounter_id}", response_model=EncounterResponse)
async def get_encounter(encounter_id: str):
    return _to_response(await encounters.find_by_id(encounter_id))


@router.post("", response_model=EncounterResponse, status_code=201)
async def create_encounter(req: CreateEncounterRequest):
    return _to_response(await encounters.create(req))


@router.put("/{encounter_id}", response_model=EncounterResponse)
async def update_encounter(encounter_id: str, req: UpdateEncounterRequest):
    return _to_response(await encounters.update(encounter_id, req))


@router.delete("/{encounter_id}", status_code=204)
async def delete_encounter(encounter_id: str):
    await encounters.delete(encounter_id)
    return Response(status_code=204)


@router.post("/{encounter_id}/start", response_model=EncounterResponse)
async def start_encounter(encounter_id: str):
    return _to_response(await encounters.start(encounter_id))


@router.post("/{encounter_id}/end", response_model=EncounterResponse)
async def end_encounter(encounter_id: str):
    return _to_response(await encounters.end(encounter_id))
