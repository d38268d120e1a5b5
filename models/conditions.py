"""Named character condition models for Skirmish Server."""

from enum import Enum

from pydantic import BaseModel


class ConditionType(str, Enum):
    """Whether a condition helps or hinders the character carrying it."""
    POSITIVE = "Positive"
    NEGATIVE = "Negative"


class Condition(BaseModel):
    """A named condition from the rules reference."""
    name: str
    effect: str
    type: ConditionType
