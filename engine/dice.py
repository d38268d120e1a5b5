"""Movement die for Skirmish Server."""

import random

from pydantic import BaseModel

# The six faces of the movement die. "ALL n" moves every figure n squares,
# "ONE n" moves a single figure n squares.
MOVEMENT_DIE_FACES: tuple[str, ...] = (
    "ALL 2",
    "ALL 3",
    "ALL 4",
    "ONE 3",
    "ONE 4",
    "ONE 5",
)


class DieRoll(BaseModel):
    """Result of a movement die roll."""
    face: str
    index: int


def roll_movement_die(sides: int = 6, rng: random.Random | None = None) -> DieRoll:
    """Roll the movement die.

    Args:
        sides: Accepted for interface symmetry with numeric dice. The outcome
            space is always the fixed face table.
        rng: Optional Random instance for seeded/testing rolls.

    Returns:
        DieRoll with the face text and its index in the face table.
    """
    rng = rng or random.Random()
    index = rng.randrange(len(MOVEMENT_DIE_FACES))
    return DieRoll(face=MOVEMENT_DIE_FACES[index], index=index)
