"""Catalog of named conditions players can put on characters.

Character conditions are free-text labels; the catalog only documents the
standard ones and is never enforced.
"""

from __future__ import annotations

from models.conditions import Condition, ConditionType

NEG = ConditionType.NEGATIVE
POS = ConditionType.POSITIVE

_CATALOG: list[tuple[str, str, ConditionType]] = [
    ("Stunned", "The character loses 1 action on its next turn.", NEG),
    ("Bleeding", "At the end of its turn, the character takes 1 damage per Bleed token; "
     "a heal removes 1 Bleed instead of restoring HP.", NEG),
    ("Blinded", "The next time this character deals damage, that damage is halved "
     "(round down), then Blinded ends.", NEG),
    ("Silenced", "The character cannot play Special cards on its next turn.", NEG),
    ("Immobilized", "The character cannot move of its own accord until the end of its "
     "next turn (it may still be pushed/pulled).", NEG),
    ("Vulnerable", "All damage this character takes is increased by +2 (once per attack) "
     "until its next turn ends.", NEG),
    ("Cursed", "The character cannot be healed until the end of its next turn.", NEG),
    ("Armor", "Reduce the next incoming damage by 3, then discard this token.", POS),
    ("Fortified", "Reduce the next incoming damage by 2, then discard this token.", POS),
    ("Hasted", "Each move action this turn gains +2 squares of movement.", POS),
    ("Focused", "The character's next attack this turn deals +2 damage.", POS),
    ("Stealthed", "Until it attacks or takes damage, this character cannot be chosen as "
     "a target for enemy combat-card attacks.", POS),
    ("Regenerating", "At the end of its turn, the character heals 2 HP (duration 1 round).", POS),
    ("Empowered", "Until turn end, all attacks by this character deal +1 damage.", POS),
    ("Phase-Shifted", "The character ignores terrain and may move through figures until "
     "its next turn starts.", POS),
]

CONDITIONS: list[Condition] = [
    Condition(name=name, effect=effect, type=kind) for name, effect, kind in _CATALOG
]


def get_condition(name: str) -> Condition | None:
    """Look up a catalog condition by name, ignoring case."""
    for condition in CONDITIONS:
        if condition.name.lower() == name.lower():
            return condition
    return None


def list_conditions(kind: ConditionType | None = None) -> list[Condition]:
    """Return catalog conditions, optionally only those of one type."""
    if kind is None:
        return list(CONDITIONS)
    return [c for c in CONDITIONS if c.type == kind]
