"""Pydantic request/response models for the API.

Wire names are camelCase (``currentHp``); snake_case is accepted on input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _strip_null_bytes(v: str) -> str:
    """Remove null bytes from user-supplied strings."""
    return v.replace("\x00", "")


def _not_blank(v: str | None) -> str | None:
    if v is None:
        return v
    v = _strip_null_bytes(v)
    if not v.strip():
        raise ValueError("Name is required")
    return v


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Auth ---

class RegisterRequest(ApiModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        v = _strip_null_bytes(v).strip().lower()
        if "@" not in v:
            raise ValueError("Email must contain '@'")
        return v


class LoginRequest(ApiModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AuthResponse(ApiModel):
    token: str | None = None
    message: str | None = None
    id: str | None = None
    email: str | None = None


class UserResponse(ApiModel):
    id: str
    email: str


# --- Combatants ---

class CreateCombatantRequest(ApiModel):
    name: str = Field(max_length=128)
    statblock_id: str | None = None
    initiative: int = Field(ge=-10, le=100)
    current_hp: int = Field(ge=0)
    max_hp: int = Field(ge=1)
    temporary_hp: int | None = Field(default=None, ge=0)
    size: str | None = Field(default=None, max_length=50)
    type: str | None = Field(default=None, max_length=20)
    alignment: str | None = Field(default=None, max_length=50)
    encounter_id: str | None = None
    is_players_character: bool | None = None
    notes: str | None = Field(default=None, max_length=10000)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str | None) -> str | None:
        return _not_blank(v)


class UpdateCombatantRequest(ApiModel):
    """Merge-patch body: null or missing fields leave the record untouched."""

    name: str | None = Field(default=None, max_length=128)
    statblock_id: str | None = None
    initiative: int | None = Field(default=None, ge=-10, le=100)
    current_hp: int | None = Field(default=None, ge=0)
    max_hp: int | None = Field(default=None, ge=1)
    temporary_hp: int | None = Field(default=None, ge=0)
    size: str | None = Field(default=None, max_length=50)
    type: str | None = Field(default=None, max_length=20)
    alignment: str | None = Field(default=None, max_length=50)
    encounter_id: str | None = None
    is_active: bool | None = None
    is_players_character: bool | None = None
    notes: str | None = Field(default=None, max_length=10000)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str | None) -> str | None:
        return _not_blank(v)


class CombatantResponse(ApiModel):
    id: str
    name: str
    statblock_id: str | None
    initiative: int
    current_hp: int
    max_hp: int
    temporary_hp: int
    size: str | None
    type: str | None
    alignment: str | None
    encounter_id: str | None
    combat_order: int | None
    is_active: bool
    is_players_character: bool
    notes: str | None
    created_at: str
    updated_at: str


# --- Encounters ---

class CreateEncounterRequest(ApiModel):
    name: str = Field(max_length=128)
    description: str | None = Field(default=None, max_length=500)
    campaign_id: str | None = None

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str | None) -> str | None:
        return _not_blank(v)


class UpdateEncounterRequest(ApiModel):
    name: str | None = Field(default=None, max_length=128)
    description: str | None = Field(default=None, max_length=500)
    campaign_id: str | None = None
    is_completed: bool | None = None
    current_round: int | None = Field(default=None, ge=1)
    current_turn_index: int | None = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str | None) -> str | None:
        return _not_blank(v)


class EncounterResponse(ApiModel):
    id: str
    name: str
    description: str | None
    campaign_id: str | None
    is_completed: bool
    current_round: int
    current_turn_index: int | None
    started_at: str | None
    ended_at: str | None
    created_at: str
    updated_at: str
