"""Card pile transitions: draw, play, discard, shuffle, deck inspection.

Every transition takes the current GameState and returns a new one. The
input state is never mutated. Precondition failures raise ValueError and
leave the caller's state untouched.
"""

from __future__ import annotations

import random
from typing import TypeVar

from models.cards import Card, CombatCard, card_label
from models.game_state import DeckInspection, GameState, LogEntry, Player

T = TypeVar("T")


def shuffle(items: list[T], rng: random.Random | None = None) -> list[T]:
    """Fisher-Yates shuffle into a new list. Uniform and O(n).

    Args:
        items: The items to shuffle. Not modified.
        rng: Optional Random instance for seeded/testing shuffles.

    Returns:
        A shuffled copy of items.
    """
    rng = rng or random.Random()
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def append_log(
    state: GameState,
    player_id: str,
    player_name: str,
    message: str | None = None,
    card: Card | None = None,
) -> None:
    """Append an entry to the play log of a state being built."""
    state.log.append(
        LogEntry(player_id=player_id, player_name=player_name, message=message, card=card)
    )


def find_card(cards: list[Card], card_id: int) -> Card | None:
    """Return the first card with the given id."""
    for card in cards:
        if card.id == card_id:
            return card
    return None


def remove_card(cards: list[Card], card: Card) -> bool:
    """Remove one occurrence of a card from a pile, in place.

    An identical card (same id, type, values and owner) is preferred;
    otherwise the first card with the same id is taken. Draw piles hold
    several copies of each card, so only one is ever removed.

    Returns:
        True if a card was removed.
    """
    for i, candidate in enumerate(cards):
        if candidate == card:
            del cards[i]
            return True
    for i, candidate in enumerate(cards):
        if candidate.id == card.id and candidate.type == card.type:
            del cards[i]
            return True
    return False


def _require_player(state: GameState, player_id: str) -> Player:
    player = state.find_player(player_id)
    if player is None:
        raise ValueError(f"Player '{player_id}' not found")
    return player


def draw_card(
    state: GameState,
    player_id: str,
    character_id: str | None = None,
    rng: random.Random | None = None,
) -> GameState | None:
    """Move the top card of a player's deck into their hand.

    An empty deck is refilled by shuffling the discard pile into it first.
    A drawn combat card is bound to character_id when one is given.

    Returns:
        The next state, or None if deck and discard pile are both empty.

    Raises:
        ValueError: If the player does not exist.
    """
    _require_player(state, player_id)
    nxt = state.model_copy(deep=True)
    player = _require_player(nxt, player_id)

    if not player.deck and player.discard_pile:
        player.deck = shuffle(player.discard_pile, rng)
        player.discard_pile = []
    if not player.deck:
        return None

    card = player.deck.pop(0)
    if isinstance(card, CombatCard) and character_id:
        card = card.model_copy(update={"owner": character_id})
    player.hand.append(card)

    append_log(nxt, player.id, player.name, message=f"{player.name} drew a card.")
    return nxt


def play_card(state: GameState, player_id: str, card_id: int) -> GameState:
    """Move a card from hand to discard and log it with a card snapshot.

    Raises:
        ValueError: If the player or the card in their hand is missing.
    """
    nxt = state.model_copy(deep=True)
    player = _require_player(nxt, player_id)
    card = find_card(player.hand, card_id)
    if card is None:
        raise ValueError(f"Card {card_id} is not in {player.name}'s hand")

    remove_card(player.hand, card)
    player.discard_pile.append(card)
    append_log(nxt, player.id, player.name, card=card)
    return nxt


def discard_card(state: GameState, player_id: str, card_id: int) -> GameState:
    """Move a card from hand to discard with a descriptive log message.

    Raises:
        ValueError: If the player or the card in their hand is missing.
    """
    nxt = state.model_copy(deep=True)
    player = _require_player(nxt, player_id)
    card = find_card(player.hand, card_id)
    if card is None:
        raise ValueError(f"Card {card_id} is not in {player.name}'s hand")

    remove_card(player.hand, card)
    player.discard_pile.append(card)
    append_log(
        nxt,
        player.id,
        player.name,
        message=f"{player.name} discarded {card_label(card)}.",
        card=card,
    )
    return nxt


def shuffle_deck(
    state: GameState,
    player_id: str,
    rng: random.Random | None = None,
) -> GameState:
    """Shuffle a player's deck in place of the old order.

    Raises:
        ValueError: If the player does not exist.
    """
    nxt = state.model_copy(deep=True)
    player = _require_player(nxt, player_id)
    player.deck = shuffle(player.deck, rng)
    return nxt


def inspect_deck(
    state: GameState,
    inspector_id: str,
    target_player_id: str,
    count: int,
) -> GameState:
    """Reveal the top cards of a player's deck to the inspector.

    The cards stay in the deck until the inspection is resolved. A count
    larger than the deck reveals the whole deck.

    Raises:
        ValueError: If either player is missing, count is negative, or
            another inspection is still open.
    """
    if count < 0:
        raise ValueError("Inspection count cannot be negative")
    if state.deck_inspection.is_open:
        raise ValueError("A deck inspection is already in progress")

    nxt = state.model_copy(deep=True)
    inspector = _require_player(nxt, inspector_id)
    target = _require_player(nxt, target_player_id)

    nxt.deck_inspection = DeckInspection(
        is_open=True,
        inspector_id=inspector_id,
        target_player_id=target_player_id,
        cards=[card.model_copy() for card in target.deck[:count]],
    )
    append_log(
        nxt,
        inspector_id,
        inspector.name,
        message=(
            f"{inspector.name} is inspecting the top {count} cards "
            f"of {target.name}'s deck."
        ),
    )
    return nxt


def resolve_deck_inspection(
    state: GameState,
    cards_to_top: list[Card],
    cards_to_bottom: list[Card],
) -> GameState:
    """Put inspected cards back on top and bottom of the target's deck.

    The caller guarantees that cards_to_top and cards_to_bottom together are
    a permutation of the inspected cards; this is not re-checked.

    Raises:
        ValueError: If no inspection is open or its target is gone.
    """
    inspection = state.deck_inspection
    if not inspection.is_open or inspection.target_player_id is None:
        raise ValueError("No deck inspection in progress to resolve")

    nxt = state.model_copy(deep=True)
    target = _require_player(nxt, inspection.target_player_id)

    remaining = list(target.deck)
    for card in inspection.cards:
        remove_card(remaining, card)
    target.deck = [*cards_to_top, *remaining, *cards_to_bottom]
    nxt.deck_inspection = DeckInspection()
    return nxt
