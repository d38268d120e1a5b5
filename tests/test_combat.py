"""Tests for the combat protocol: declare, resolve, acknowledge."""

import pytest

from engine.combat import begin_attack, card_belongs_to, clear_last_attack, resolve_attack
from models.cards import CombatCard
from models.characters import Character, Position
from models.game_state import GameState, Player


def _make_character(char_id: str, player_id: str, name: str) -> Character:
    """Helper to create a test character."""
    return Character(
        id=char_id,
        player_id=player_id,
        name=name,
        position=Position(x=2, y=2),
        health=20,
        max_health=20,
    )


def _make_state() -> GameState:
    """Two players, each with one character and a bound combat card in hand."""
    return GameState(
        players=[
            Player(
                id="p1",
                name="Alice",
                hand=[CombatCard(id=3, attack=5, defense=1, owner="p1-hero")],
            ),
            Player(
                id="p2",
                name="Bob",
                hand=[CombatCard(id=8, attack=1, defense=4, owner="p2-villain")],
            ),
        ],
        characters=[
            _make_character("p1-hero", "p1", "Hero"),
            _make_character("p2-villain", "p2", "Villain"),
        ],
    )


class TestCardBelongsTo:
    """Tests for card_belongs_to()."""

    def test_unbound_card(self):
        assert card_belongs_to("p1-hero", None)
        assert card_belongs_to("p1-hero", "")

    def test_exact_owner(self):
        assert card_belongs_to("p1-hero", "p1-hero")

    def test_minion_suffix(self):
        assert card_belongs_to("p1-hero-2", "hero")
        assert card_belongs_to("p1-hero-2", "p1-hero")

    def test_other_character(self):
        assert not card_belongs_to("p1-hero-2", "villain")
        assert not card_belongs_to("p1-hero", "p2-villain")


class TestBeginAttack:
    """Tests for begin_attack()."""

    def test_sets_attack_in_progress(self):
        state = _make_state()
        card = state.players[0].hand[0]
        nxt = begin_attack(state, "p1-hero", "p2-villain", card)
        pending = nxt.attack_in_progress
        assert pending.attacker_id == "p1-hero"
        assert pending.defender_id == "p2-villain"
        assert pending.card.id == 3
        assert nxt.find_player("p1").hand == []
        assert state.find_player("p1").hand[0].id == 3

    def test_card_of_other_character_rejected(self):
        state = _make_state()
        card = CombatCard(id=3, attack=5, defense=1, owner="villain")
        state.players[0].hand = [card]
        with pytest.raises(ValueError, match="belongs to"):
            begin_attack(state, "p1-hero", "p2-villain", card)
        assert state.attack_in_progress is None
        assert len(state.players[0].hand) == 1

    def test_minion_can_use_template_card(self):
        state = _make_state()
        state.characters.append(_make_character("p1-hero-2", "p1", "Hero 2"))
        card = CombatCard(id=4, attack=2, defense=2, owner="hero")
        state.players[0].hand.append(card)
        nxt = begin_attack(state, "p1-hero-2", "p2-villain", card)
        assert nxt.attack_in_progress.attacker_id == "p1-hero-2"

    def test_card_not_in_hand(self):
        state = _make_state()
        card = CombatCard(id=20, attack=9, defense=9)
        with pytest.raises(ValueError, match="not in Alice's hand"):
            begin_attack(state, "p1-hero", "p2-villain", card)

    def test_missing_defender(self):
        state = _make_state()
        with pytest.raises(ValueError, match="Defender"):
            begin_attack(state, "p1-hero", "nobody", state.players[0].hand[0])

    def test_second_attack_rejected(self):
        state = _make_state()
        nxt = begin_attack(state, "p1-hero", "p2-villain", state.players[0].hand[0])
        with pytest.raises(ValueError, match="already in progress"):
            begin_attack(nxt, "p2-villain", "p1-hero", nxt.players[1].hand[0])

    def test_unbound_request_cannot_take_minion_card(self):
        state = _make_state()
        hound_card = CombatCard(id=3, attack=1, defense=1, owner="p1-hound-1")
        state.players[0].hand = [hound_card]
        with pytest.raises(ValueError, match="belongs to 'p1-hound-1'"):
            begin_attack(state, "p1-hero", "p2-villain", CombatCard(id=3, attack=99, defense=1))
        assert state.players[0].hand == [hound_card]

    def test_hand_copy_is_held_and_discarded(self):
        state = _make_state()
        forged = CombatCard(id=3, attack=99, defense=1)
        state = begin_attack(state, "p1-hero", "p2-villain", forged)
        held = CombatCard(id=3, attack=5, defense=1, owner="p1-hero")
        assert state.attack_in_progress.card == held

        nxt = resolve_attack(state)
        assert nxt.find_player("p1").discard_pile == [held]
        assert nxt.last_attack.attacking_card == held
        assert "with a 5 ATK card" in nxt.log[-1].message

    def test_picks_copy_the_attacker_may_use(self):
        state = _make_state()
        state.players[0].hand = [
            CombatCard(id=3, attack=5, defense=1, owner="p1-hound-1"),
            CombatCard(id=3, attack=5, defense=1, owner="p1-hero"),
        ]
        nxt = begin_attack(state, "p1-hero", "p2-villain", CombatCard(id=3, attack=5, defense=1))
        assert nxt.attack_in_progress.card.owner == "p1-hero"
        assert [c.owner for c in nxt.find_player("p1").hand] == ["p1-hound-1"]


class TestResolveAttack:
    """Tests for resolve_attack()."""

    def test_round_trip_with_defense(self):
        state = _make_state()
        state = begin_attack(state, "p1-hero", "p2-villain", state.players[0].hand[0])
        defending = state.find_player("p2").hand[0]
        nxt = resolve_attack(state, defending)

        assert nxt.attack_in_progress is None
        assert nxt.last_attack.attacking_card.id == 3
        assert nxt.last_attack.defending_card.id == 8
        assert [c.id for c in nxt.find_player("p1").discard_pile] == [3]
        assert [c.id for c in nxt.find_player("p2").discard_pile] == [8]
        assert nxt.find_player("p2").hand == []
        assert nxt.log[-1].message == (
            "Hero attacked Villain with a 5 ATK card. Villain defended with a 4 DEF card."
        )
        assert nxt.log[-1].player_id == "p1-hero"

    def test_no_block(self):
        state = _make_state()
        state = begin_attack(state, "p1-hero", "p2-villain", state.players[0].hand[0])
        nxt = resolve_attack(state)
        assert nxt.last_attack.defending_card is None
        assert nxt.log[-1].message == "Hero attacked Villain with a 5 ATK card. Villain did not block."
        assert nxt.find_player("p2").discard_pile == []

    def test_health_untouched(self):
        state = _make_state()
        state = begin_attack(state, "p1-hero", "p2-villain", state.players[0].hand[0])
        nxt = resolve_attack(state)
        assert all(c.health == 20 for c in nxt.characters)

    def test_defending_card_of_other_character(self):
        state = _make_state()
        state.players[1].hand = [CombatCard(id=8, attack=1, defense=4, owner="p2-wolf-1")]
        state = begin_attack(state, "p1-hero", "p2-villain", state.players[0].hand[0])
        with pytest.raises(ValueError, match="belongs to 'p2-wolf-1'"):
            resolve_attack(state, CombatCard(id=8, attack=1, defense=4))
        assert state.attack_in_progress is not None
        assert len(state.find_player("p2").hand) == 1

    def test_hand_copy_of_defending_card_is_used(self):
        state = _make_state()
        state = begin_attack(state, "p1-hero", "p2-villain", state.players[0].hand[0])
        forged = CombatCard(id=8, attack=0, defense=99)
        nxt = resolve_attack(state, forged)
        held = CombatCard(id=8, attack=1, defense=4, owner="p2-villain")
        assert nxt.last_attack.defending_card == held
        assert nxt.find_player("p2").discard_pile == [held]
        assert nxt.log[-1].message.endswith("Villain defended with a 4 DEF card.")

    def test_without_pending_attack(self):
        with pytest.raises(ValueError, match="No attack in progress"):
            resolve_attack(_make_state())


class TestClearLastAttack:
    """Tests for clear_last_attack()."""

    def test_clears_result(self):
        state = _make_state()
        state = begin_attack(state, "p1-hero", "p2-villain", state.players[0].hand[0])
        state = resolve_attack(state)
        assert clear_last_attack(state).last_attack is None
