"""Pydantic v2 records for combatants and encounters."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


class Combatant(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    statblock_id: str | None = None
    initiative: int
    current_hp: int
    max_hp: int
    temporary_hp: int = 0
    size: str | None = None
    type: str | None = None
    alignment: str | None = None
    encounter_id: str | None = None
    combat_order: int | None = None
    """Zero-based rank assigned by an initiative sort; None until sorted."""
    is_active: bool = False
    is_players_character: bool = False
    notes: str | None = None
    created_at: str = Field(default_factory=utcnow)
    updated_at: str = Field(default_factory=utcnow)

    def touch(self) -> None:
        self.updated_at = utcnow()


class Encounter(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    description: str | None = None
    campaign_id: str | None = None
    is_completed: bool = False
    current_round: int = 1
    current_turn_index: int | None = None
    started_at: str | None = None
    ended_at: str | None = None
    created_at: str = Field(default_factory=utcnow)
    updated_at: str = Field(default_factory=utcnow)

    def touch(self) -> None:
        self.updated_at = utcnow()
