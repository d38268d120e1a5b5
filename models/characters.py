"""Character and board position models for Skirmish Server."""

from enum import Enum

from pydantic import AliasChoices, BaseModel, Field


class CharacterSize(str, Enum):
    """Footprint classes. Affects rendering and snapping, not movement rules."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"                   # 2x2 cells
    GIANT = "giant"                 # 4x4 cells


class Position(BaseModel):
    """A pixel-space board position, already snapped by the caller."""
    x: float
    y: float


class Character(BaseModel):
    """A figure on the board."""
    id: str                         # "{player_id}-{template_id}[-{n}]" or "token-..."
    player_id: str = Field(validation_alias=AliasChoices("player_id", "playerId"))
    name: str
    image_url: str | None = Field(
        default=None, validation_alias=AliasChoices("image_url", "imageUrl")
    )
    position: Position
    health: int
    max_health: int = Field(validation_alias=AliasChoices("max_health", "maxHealth"))
    size: CharacterSize = CharacterSize.MEDIUM
    conditions: list[str] = []      # Free-text labels, e.g. ["Stunned", "Armor"]
    ranged: bool = False


class TokenTemplate(BaseModel):
    """A character without an id, used to create ad hoc tokens."""
    player_id: str = Field(validation_alias=AliasChoices("player_id", "playerId"))
    name: str = "Token"
    image_url: str | None = Field(
        default=None, validation_alias=AliasChoices("image_url", "imageUrl")
    )
    position: Position = Position(x=50, y=50)
    health: int = 1
    max_health: int | None = Field(  # Defaults to health
        default=None, validation_alias=AliasChoices("max_health", "maxHealth")
    )
    size: CharacterSize = CharacterSize.MEDIUM
    conditions: list[str] = []
    ranged: bool = False
