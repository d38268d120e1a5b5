"""Initial game state construction from a lobby roster and decks."""

from __future__ import annotations

import logging
import random

from config import DECK_COPIES, INITIAL_HAND_SIZE
from engine.cards import shuffle
from engine.decks import DeckRegistry
from engine.maps import get_map
from models.actions import RosterEntry
from models.characters import Character, Position
from models.decks import CharacterTemplate, DeckConfig
from models.game_state import GameState, Player

logger = logging.getLogger(__name__)

POSITION_SPACING_PX = 30


def create_characters(
    player_id: str,
    player_index: int,
    template: CharacterTemplate,
) -> list[Character]:
    """Create one character per instance of a deck template.

    Templates with more than one instance become minions: their ids get a
    "-n" suffix and their names a " n" suffix, starting at 1.
    """
    count = template.minion_count
    characters = []
    for i in range(count):
        suffix = count > 1
        characters.append(
            Character(
                id=f"{player_id}-{template.id}" + (f"-{i + 1}" if suffix else ""),
                player_id=player_id,
                name=f"{template.name} {i + 1}" if suffix else template.name,
                image_url=template.image_url,
                position=Position(
                    x=2 + (player_index + i) * POSITION_SPACING_PX,
                    y=2 + player_index * POSITION_SPACING_PX,
                ),
                health=template.hp,
                max_health=template.hp,
                size=template.size,
                conditions=[],
                ranged=template.ranged,
            )
        )
    return characters


def create_player(
    entry: RosterEntry,
    deck: DeckConfig,
    rng: random.Random | None = None,
) -> Player:
    """Build a player with a shuffled draw pile and an opening hand."""
    pile = [card.model_copy() for _ in range(DECK_COPIES) for card in deck.cards]
    pile = shuffle(pile, rng)
    hand = pile[:INITIAL_HAND_SIZE]
    return Player(
        id=entry.id,
        name=entry.name,
        hand=hand,
        deck=pile[INITIAL_HAND_SIZE:],
        discard_pile=[],
    )


def create_initial_state(
    roster: list[RosterEntry],
    decks: DeckRegistry,
    map_id: str | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Build the opening snapshot of a match.

    Players without a resolvable deck are skipped. A player who picked no
    deck gets the first registered one.

    Args:
        roster: Players handed over by the lobby, in seating order.
        decks: Registry used to resolve each player's selected deck.
        map_id: Terrain map to start on.
        rng: Optional Random instance for seeded/testing setups.

    Returns:
        A fresh GameState with hands dealt and characters placed.
    """
    players: list[Player] = []
    characters: list[Character] = []

    for index, entry in enumerate(roster):
        deck = decks.get(entry.selected_deck) if entry.selected_deck else decks.first()
        if deck is None:
            logger.error(
                "No deck data found for player %s with deck ID %s",
                entry.name,
                entry.selected_deck,
            )
            continue

        players.append(create_player(entry, deck, rng))
        for template in deck.characters:
            characters.extend(create_characters(entry.id, index, template))

    return GameState(
        players=players,
        characters=characters,
        map_id=get_map(map_id).id,
    )
