"""Replicated game state and log models for Skirmish Server."""

from datetime import datetime, timezone

from pydantic import AliasChoices, BaseModel, Field

from config import DEFAULT_MAP_ID, GRID_HEIGHT, GRID_WIDTH
from models.cards import Card, CombatCard
from models.characters import Character


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Player(BaseModel):
    """A participant and their card piles."""
    id: str
    name: str
    hand: list[Card] = []
    deck: list[Card] = []           # Top of the deck is index 0
    discard_pile: list[Card] = Field(
        default=[], validation_alias=AliasChoices("discard_pile", "discardPile")
    )


class GridSize(BaseModel):
    """Board dimensions in cells."""
    width: int = GRID_WIDTH
    height: int = GRID_HEIGHT


class LogEntry(BaseModel):
    """An entry in the shared play log."""
    player_id: str = Field(validation_alias=AliasChoices("player_id", "playerId"))
    player_name: str = Field(validation_alias=AliasChoices("player_name", "playerName"))
    card: Card | None = None        # Snapshot of the card involved, if any
    message: str | None = None
    timestamp: datetime = Field(default_factory=_now)


class AttackInProgress(BaseModel):
    """A declared attack waiting for the defender's response."""
    attacker_id: str
    defender_id: str
    card: CombatCard                # Held face down until resolution


class CombatResult(BaseModel):
    """The two cards revealed by a resolved attack."""
    attacker_id: str
    defender_id: str
    attacking_card: CombatCard
    defending_card: CombatCard | None = None


class DeckInspection(BaseModel):
    """A pending peek at the top of another player's deck."""
    is_open: bool = False
    inspector_id: str | None = None
    target_player_id: str | None = None
    cards: list[Card] = []


class GameState(BaseModel):
    """The full replicated state of one match."""
    players: list[Player] = []
    characters: list[Character] = []
    grid_size: GridSize = GridSize()
    map_id: str = DEFAULT_MAP_ID
    log: list[LogEntry] = []
    attack_in_progress: AttackInProgress | None = None
    last_attack: CombatResult | None = None
    deck_inspection: DeckInspection = DeckInspection()
    revision: int = 0               # Bumped by the publishing session

    def find_player(self, player_id: str) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def find_character(self, character_id: str) -> Character | None:
        for character in self.characters:
            if character.id == character_id:
                return character
        return None
