"""Deck definition models for Skirmish Server."""

import re

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from config import DECK_SIZE
from models.cards import Card
from models.characters import CharacterSize

_BASE64_IMAGE = re.compile(r"^data:image/[a-zA-Z]+;base64,")


class CharacterTemplate(BaseModel):
    """A character as declared in a deck file."""
    id: str
    name: str
    image_url: str | None = Field(
        default=None, validation_alias=AliasChoices("image_url", "imageUrl")
    )
    hp: int = Field(default=20, ge=1)
    size: CharacterSize = CharacterSize.MEDIUM
    traits: list[str] = []
    minion_count: int = Field(
        default=1, ge=1, validation_alias=AliasChoices("minion_count", "minionCount")
    )
    ranged: bool = False


class ArtAsset(BaseModel):
    """Artwork for a single card."""
    card_art: str = Field(validation_alias=AliasChoices("card_art", "cardArt"))
    thumbnail: str | None = None


class DeckConfig(BaseModel):
    """A validated deck definition: characters plus exactly 30 cards."""
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    author: str = Field(min_length=1)
    version: str = Field(min_length=1)
    description: str | None = None
    characters: list[CharacterTemplate]
    cards: list[Card]
    art_assets: dict[str, ArtAsset] = Field(
        default={}, validation_alias=AliasChoices("art_assets", "artAssets")
    )

    @field_validator("cards")
    @classmethod
    def _check_cards(cls, cards: list[Card]) -> list[Card]:
        if len(cards) != DECK_SIZE:
            raise ValueError(f"A deck must contain exactly {DECK_SIZE} cards, got {len(cards)}")
        seen: set[int] = set()
        for card in cards:
            if card.id < 1 or card.id > DECK_SIZE:
                raise ValueError(f"Card id {card.id} is outside 1..{DECK_SIZE}")
            if card.id in seen:
                raise ValueError(f"Duplicate card id {card.id}")
            seen.add(card.id)
            if card.type == "combat" and (card.attack < 0 or card.defense < 0):
                raise ValueError(f"Card {card.id} has negative attack or defense")
            if card.type == "special" and (not card.name or not card.rules_text):
                raise ValueError(f"Card {card.id} needs a name and rules text")
        return cards

    @model_validator(mode="after")
    def _check_art_assets(self) -> "DeckConfig":
        card_ids = {card.id for card in self.cards}
        for key, asset in self.art_assets.items():
            if not key.isdigit():
                raise ValueError(f"Invalid card ID in art assets: {key}")
            if int(key) not in card_ids:
                raise ValueError(f"Art asset found for non-existent card: {key}")
            if asset.card_art.startswith("data:") and not _BASE64_IMAGE.match(asset.card_art):
                raise ValueError(f"Invalid base64 image data for card {key}")
        return self


class DeckMetadata(BaseModel):
    """Summary of a registered deck."""
    id: str
    name: str
    description: str
    author: str
    version: str
    card_count: int


class DeckLoadResult(BaseModel):
    """Outcome of loading a deck into the registry."""
    success: bool
    deck: DeckConfig | None = None
    error: str | None = None
