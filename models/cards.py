"""Card data models for Skirmish Server."""

from typing import Annotated, Literal, Union

from pydantic import AliasChoices, BaseModel, Field


class BaseCard(BaseModel):
    """Fields shared by every card."""
    id: int                         # Unique within one deck definition (1..30)
    image_url: str | None = Field(
        default=None, validation_alias=AliasChoices("image_url", "imageUrl")
    )
    owner: str | None = None        # Character id, set when drawn for a character


class CombatCard(BaseCard):
    """A card with attack and defense values, used in combat."""
    type: Literal["combat"] = "combat"
    attack: int
    defense: int


class SpecialCard(BaseCard):
    """A card carrying free-form rules text."""
    type: Literal["special"] = "special"
    name: str
    rules_text: str = Field(validation_alias=AliasChoices("rules_text", "rulesText"))


Card = Annotated[Union[CombatCard, SpecialCard], Field(discriminator="type")]


def card_label(card: CombatCard | SpecialCard) -> str:
    """Short human-readable label used in log messages."""
    if isinstance(card, SpecialCard):
        return card.name
    return "Combat Card"
