"""Initiative ordering and turn progression for one encounter's combatants.

Every function here works on an in-memory list and mutates the records it
is given; persisting the result is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tracker.models import Combatant


class TrackerError(Exception):
    pass


def order_key(combatant: Combatant) -> tuple[bool, int]:
    """Sort key for turn order: assigned orders ascending, unset ones last."""
    unset = combatant.combat_order is None
    return (unset, 0 if unset else combatant.combat_order)


def in_turn_order(combatants: list[Combatant]) -> list[Combatant]:
    # sorted() is stable, so unsorted combatants keep their incoming order
    return sorted(combatants, key=order_key)


def sort_by_initiative(combatants: list[Combatant]) -> list[Combatant]:
    """Order by initiative descending and assign ``combat_order`` 0..n-1.

    Ties keep their relative input order.
    """
    ranked = sorted(combatants, key=lambda c: c.initiative, reverse=True)
    for index, combatant in enumerate(ranked):
        combatant.combat_order = index
    return ranked


@dataclass
class TurnAdvance:
    current: Combatant
    index: int
    previous: Combatant | None = None
    wrapped: bool = False
    changed: list[Combatant] = field(default_factory=list)
    """Every combatant whose active flag flipped."""


def next_turn(combatants: list[Combatant]) -> TurnAdvance:
    """Hand the turn to the combatant after the active one.

    When several combatants are flagged active, the earliest in turn order
    counts as current and the rest are cleared too.
    """
    if not combatants:
        raise TrackerError("No combatants to take a turn")

    combatants = in_turn_order(combatants)

    active_positions = [i for i, c in enumerate(combatants) if c.is_active]
    active = [combatants[i] for i in active_positions]
    previous = active[0] if active else None
    current_index = active_positions[0] if active_positions else -1
    next_index = (current_index + 1) % len(combatants)
    upcoming = combatants[next_index]

    changed: list[Combatant] = []
    for combatant in active:
        if combatant is not upcoming:
            combatant.is_active = False
            changed.append(combatant)
    if not upcoming.is_active:
        upcoming.is_active = True
        changed.append(upcoming)

    return TurnAdvance(
        current=upcoming,
        index=next_index,
        previous=previous,
        wrapped=previous is not None and current_index + 1 >= len(combatants),
        changed=changed,
    )


def clear(combatants: list[Combatant]) -> list[Combatant]:
    """Drop every active flag and turn-order rank."""
    for combatant in combatants:
        combatant.is_active = False
        combatant.combat_order = None
    return combatants
