"""Board transitions: movement, health, conditions, tokens, dice and maps."""

from __future__ import annotations

import random
import time
from uuid import uuid4

from engine.cards import append_log
from engine.dice import roll_movement_die
from engine.maps import get_map
from models.characters import Character, Position, TokenTemplate
from models.game_state import GameState


def _require_character(state: GameState, character_id: str) -> Character:
    character = state.find_character(character_id)
    if character is None:
        raise ValueError(f"Character '{character_id}' not found")
    return character


def move_character(state: GameState, character_id: str, position: Position) -> GameState:
    """Place a character at an already snapped position.

    No bounds checking happens here; callers clamp against the grid first.

    Raises:
        ValueError: If the character does not exist.
    """
    nxt = state.model_copy(deep=True)
    character = _require_character(nxt, character_id)
    character.position = position.model_copy()
    return nxt


def update_character_health(state: GameState, character_id: str, health: int) -> GameState:
    """Set a character's health, destroying it at 0 or below.

    A destroyed character is removed from the board and a single
    destruction entry is logged. There is no way back.

    Raises:
        ValueError: If the character does not exist.
    """
    nxt = state.model_copy(deep=True)
    character = _require_character(nxt, character_id)

    if health <= 0:
        nxt.characters = [c for c in nxt.characters if c.id != character_id]
        append_log(
            nxt,
            character.player_id,
            character.name,
            message=f"{character.name} was destroyed!",
        )
    else:
        character.health = health
    return nxt


def update_character_conditions(
    state: GameState,
    character_id: str,
    conditions: list[str],
) -> GameState:
    """Replace a character's condition list wholesale.

    Raises:
        ValueError: If the character does not exist.
    """
    nxt = state.model_copy(deep=True)
    character = _require_character(nxt, character_id)
    character.conditions = list(conditions)
    return nxt


def new_token_id(existing_ids: set[str]) -> str:
    """Generate a token id not already used on the board."""
    while True:
        token_id = f"token-{int(time.time() * 1000)}-{uuid4().hex[:8]}"
        if token_id not in existing_ids:
            return token_id


def add_token_character(state: GameState, template: TokenTemplate) -> GameState:
    """Add an ad hoc token character to the board.

    No owner or capacity limits are enforced.
    """
    nxt = state.model_copy(deep=True)
    token_id = new_token_id({c.id for c in nxt.characters})
    nxt.characters.append(
        Character(
            id=token_id,
            player_id=template.player_id,
            name=template.name,
            image_url=template.image_url,
            position=template.position.model_copy(),
            health=template.health,
            max_health=template.max_health if template.max_health is not None else template.health,
            size=template.size,
            conditions=list(template.conditions),
            ranged=template.ranged,
        )
    )
    return nxt


def roll_dice(
    state: GameState,
    player_id: str,
    sides: int = 6,
    rng: random.Random | None = None,
) -> GameState:
    """Roll the movement die for a player and log the face.

    Raises:
        ValueError: If the player does not exist.
    """
    player = state.find_player(player_id)
    if player is None:
        raise ValueError(f"Player '{player_id}' not found")

    result = roll_movement_die(sides, rng=rng)
    nxt = state.model_copy(deep=True)
    append_log(nxt, player.id, player.name, message=f"{player.name} rolled: {result.face}")
    return nxt


def change_map(state: GameState, map_id: str) -> GameState:
    """Switch the active terrain map. Unknown ids fall back to the default map."""
    nxt = state.model_copy(deep=True)
    nxt.map_id = get_map(map_id).id
    return nxt
