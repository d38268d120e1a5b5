"""Transition request and result models for Skirmish Server."""

from enum import Enum

from pydantic import BaseModel

from models.cards import Card, CombatCard
from models.characters import Position, TokenTemplate


class TransitionType(str, Enum):
    """Every state transition a session can perform."""
    DRAW_CARD = "draw_card"
    PLAY_CARD = "play_card"
    DISCARD_CARD = "discard_card"
    SHUFFLE_DECK = "shuffle_deck"
    MOVE_CHARACTER = "move_character"
    UPDATE_HEALTH = "update_character_health"
    UPDATE_CONDITIONS = "update_character_conditions"
    ADD_TOKEN = "add_token_character"
    INSPECT_DECK = "inspect_deck"
    RESOLVE_INSPECTION = "resolve_deck_inspection"
    ROLL_DICE = "roll_dice"
    CHANGE_MAP = "change_map"
    BEGIN_ATTACK = "begin_attack"
    RESOLVE_ATTACK = "resolve_attack"
    CLEAR_LAST_ATTACK = "clear_last_attack"
    START_GAME = "start_game"


class PublishResult(BaseModel):
    """Outcome of persisting and broadcasting one snapshot."""
    persisted: bool
    broadcast_status: str           # "ok" on success, anything else is a failure
    errors: list[str] = []

    @property
    def ok(self) -> bool:
        return self.persisted and self.broadcast_status == "ok"


class TransitionResult(BaseModel):
    """What a session reports after attempting a transition."""
    success: bool
    transition: TransitionType
    description: str                # Human-readable summary
    published: PublishResult | None = None  # None when nothing was published
    error: str | None = None        # If the transition was rejected


# --- HTTP request bodies ---

class DrawCardRequest(BaseModel):
    player_id: str
    character_id: str | None = None


class CardRequest(BaseModel):
    player_id: str
    card_id: int


class ShuffleRequest(BaseModel):
    player_id: str


class MoveRequest(BaseModel):
    character_id: str
    position: Position
    snap: bool = False              # Snap the pixel position to the grid first


class HealthRequest(BaseModel):
    character_id: str
    health: int


class ConditionsRequest(BaseModel):
    character_id: str
    conditions: list[str]


class TokenRequest(BaseModel):
    token: TokenTemplate


class InspectDeckRequest(BaseModel):
    inspector_id: str
    target_player_id: str
    count: int


class ResolveInspectionRequest(BaseModel):
    cards_to_top: list[Card] = []
    cards_to_bottom: list[Card] = []


class RollDiceRequest(BaseModel):
    player_id: str
    sides: int = 6


class ChangeMapRequest(BaseModel):
    map_id: str


class BeginAttackRequest(BaseModel):
    attacker_id: str
    defender_id: str
    card: CombatCard


class ResolveAttackRequest(BaseModel):
    defending_card: CombatCard | None = None


class RosterEntry(BaseModel):
    """A player handed over by the external lobby at game start."""
    id: str
    name: str
    selected_deck: str | None = None


class StartGameRequest(BaseModel):
    players: list[RosterEntry]
    map_id: str | None = None
