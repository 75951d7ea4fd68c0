"""Hit point rules: healing, damage and temporary HP absorption."""

from __future__ import annotations

from tracker.models import Combatant


def clamp_hp(current_hp: int, max_hp: int) -> int:
    """Clamp *current_hp* into ``[0, max_hp]``."""
    return max(0, min(max_hp, current_hp))


def apply_health_delta(combatant: Combatant, amount: int) -> Combatant:
    """Apply healing (positive) or damage (negative) to *combatant* in place.

    Temporary HP soaks damage before current HP. Healing never restores
    temporary HP and never lifts current HP above max HP.
    """
    if amount >= 0:
        combatant.current_hp = min(combatant.max_hp, combatant.current_hp + amount)
        return combatant

    damage = -amount
    temp = combatant.temporary_hp or 0
    absorbed = min(damage, temp)
    remaining = damage - absorbed
    combatant.temporary_hp = max(0, temp - absorbed)
    combatant.current_hp = max(0, combatant.current_hp - remaining)
    return combatant
