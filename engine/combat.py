"""Combat protocol: declare an attack, answer it, acknowledge the result.

    Idle --begin_attack--> AttackDeclared --resolve_attack--> Resolved
    Resolved --clear_last_attack--> Idle

Combat only reveals and discards the two cards. Damage is applied by the
players afterwards through update_character_health.
"""

from __future__ import annotations

from engine.cards import append_log
from models.cards import Card, CombatCard
from models.characters import Character
from models.game_state import AttackInProgress, CombatResult, GameState, Player


def card_belongs_to(character_id: str, owner: str | None) -> bool:
    """Check whether a card bound to `owner` may be used by a character.

    Unbound cards can be used by anyone. Otherwise the owner must be a
    suffix of either the full character id or the id without its trailing
    minion index, so that "p1-hero-2" and "p1-hero" both accept a card
    bound to "hero".
    """
    if not owner:
        return True
    base_id = "-".join(character_id.split("-")[:-1])
    return base_id.endswith(owner) or character_id.endswith(owner)


def _require_character(state: GameState, character_id: str, role: str) -> Character:
    character = state.find_character(character_id)
    if character is None:
        raise ValueError(f"{role} character '{character_id}' not found")
    return character


def take_combat_card(
    player: Player,
    card: Card,
    character_id: str,
    role: str,
) -> CombatCard:
    """Remove the hand's copy of a combat card for a character and return it.

    The card in hand is authoritative: its owner is checked and its values
    are what the caller gets back. An identical copy is preferred, then any
    copy with the same id that the character may use.

    Raises:
        ValueError: If no combat card with that id is in the hand, or every
            copy is bound to another character.
    """
    matches = [
        i for i, held in enumerate(player.hand)
        if held.id == card.id and isinstance(held, CombatCard)
    ]
    if not matches:
        raise ValueError(f"Card {card.id} is not in {player.name}'s hand")

    exact = [i for i in matches if player.hand[i] == card]
    ordered = exact + [i for i in matches if i not in exact]
    for i in ordered:
        if card_belongs_to(character_id, player.hand[i].owner):
            return player.hand.pop(i)

    owner = player.hand[ordered[0]].owner
    raise ValueError(
        f"Card {card.id} belongs to '{owner}', not to {role} '{character_id}'"
    )


def begin_attack(
    state: GameState,
    attacker_id: str,
    defender_id: str,
    card: CombatCard,
) -> GameState:
    """Declare an attack with a face-down combat card.

    The hand's copy of the card leaves the attacking player's hand and is
    held in attack_in_progress until the defender answers.

    Raises:
        ValueError: If an attack is already pending, a character or the
            attacker's player is missing, or no usable copy of the card is in
            the attacker's hand.
    """
    if state.attack_in_progress is not None:
        raise ValueError("Another attack is already in progress")

    nxt = state.model_copy(deep=True)
    attacker = _require_character(nxt, attacker_id, "Attacker")
    _require_character(nxt, defender_id, "Defender")
    player = nxt.find_player(attacker.player_id)
    if player is None:
        raise ValueError(f"Attacker player '{attacker.player_id}' not found")

    taken = take_combat_card(player, card, attacker_id, "attacker")
    nxt.attack_in_progress = AttackInProgress(
        attacker_id=attacker_id,
        defender_id=defender_id,
        card=taken,
    )
    return nxt


def resolve_attack(state: GameState, defending_card: CombatCard | None = None) -> GameState:
    """Reveal the attack and the optional defense, and discard both cards.

    Sets last_attack to the revealed pair and clears attack_in_progress.
    Health is not touched.

    Raises:
        ValueError: If no attack is pending, a character is missing, or no
            usable copy of the defending card is in the defending player's
            hand.
    """
    pending = state.attack_in_progress
    if pending is None:
        raise ValueError("No attack in progress to resolve")

    nxt = state.model_copy(deep=True)
    attacker = _require_character(nxt, pending.attacker_id, "Attacker")
    defender = _require_character(nxt, pending.defender_id, "Defender")
    attacking_card = nxt.attack_in_progress.card

    defended_with = None
    if defending_card is not None:
        defending_player = nxt.find_player(defender.player_id)
        if defending_player is None:
            raise ValueError(f"Defender player '{defender.player_id}' not found")
        defended_with = take_combat_card(defending_player, defending_card, defender.id, "defender")
        defending_player.discard_pile.append(defended_with)

    attacking_player = nxt.find_player(attacker.player_id)
    if attacking_player is not None:
        attacking_player.discard_pile.append(attacking_card.model_copy())

    message = (
        f"{attacker.name} attacked {defender.name} "
        f"with a {attacking_card.attack} ATK card."
    )
    if defended_with is not None:
        message += f" {defender.name} defended with a {defended_with.defense} DEF card."
    else:
        message += f" {defender.name} did not block."
    append_log(nxt, attacker.id, attacker.name, message=message, card=attacking_card.model_copy())

    nxt.attack_in_progress = None
    nxt.last_attack = CombatResult(
        attacker_id=attacker.id,
        defender_id=defender.id,
        attacking_card=attacking_card.model_copy(),
        defending_card=defended_with.model_copy() if defended_with else None,
    )
    return nxt


def clear_last_attack(state: GameState) -> GameState:
    """Acknowledge the last combat result."""
    return state.model_copy(update={"last_attack": None})
