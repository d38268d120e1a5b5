"""Tests for building the opening state of a match."""

import random
from collections import Counter

from config import DECK_COPIES, INITIAL_HAND_SIZE
from engine.decks import DeckRegistry
from engine.setup import create_characters, create_initial_state, create_player
from models.actions import RosterEntry
from models.cards import CombatCard
from models.decks import CharacterTemplate, DeckConfig


def _make_deck(deck_id: str = "alpha") -> DeckConfig:
    """Helper to create a 30-card deck with a hero and two wolves."""
    return DeckConfig(
        id=deck_id,
        name=deck_id.title(),
        author="Tester",
        version="1.0",
        characters=[
            CharacterTemplate(id="hero", name="Hero", hp=18),
            CharacterTemplate(id="wolf", name="Wolf", hp=4, minion_count=2),
        ],
        cards=[CombatCard(id=i, attack=2, defense=1) for i in range(1, 31)],
    )


def _make_registry(*deck_ids: str) -> DeckRegistry:
    registry = DeckRegistry()
    for deck_id in deck_ids:
        registry.decks[deck_id] = _make_deck(deck_id)
    return registry


class TestCreateCharacters:
    """Tests for create_characters()."""

    def test_single_instance(self):
        template = CharacterTemplate(id="hero", name="Hero", hp=18)
        [hero] = create_characters("p1", 0, template)
        assert hero.id == "p1-hero"
        assert hero.name == "Hero"
        assert hero.health == hero.max_health == 18
        assert hero.position.x == 2
        assert hero.position.y == 2

    def test_minions_get_suffixes(self):
        template = CharacterTemplate(id="wolf", name="Wolf", minion_count=3)
        wolves = create_characters("p2", 1, template)
        assert [w.id for w in wolves] == ["p2-wolf-1", "p2-wolf-2", "p2-wolf-3"]
        assert [w.name for w in wolves] == ["Wolf 1", "Wolf 2", "Wolf 3"]
        assert [w.position.x for w in wolves] == [32, 62, 92]
        assert all(w.position.y == 32 for w in wolves)


class TestCreatePlayer:
    """Tests for create_player()."""

    def test_deals_opening_hand(self):
        player = create_player(RosterEntry(id="p1", name="Alice"), _make_deck(), random.Random(42))
        assert len(player.hand) == INITIAL_HAND_SIZE
        assert len(player.hand) + len(player.deck) == 30 * DECK_COPIES
        assert player.discard_pile == []

    def test_each_card_copied(self):
        player = create_player(RosterEntry(id="p1", name="Alice"), _make_deck(), random.Random(42))
        counts = Counter(c.id for c in player.hand + player.deck)
        assert set(counts.values()) == {DECK_COPIES}


class TestCreateInitialState:
    """Tests for create_initial_state()."""

    def test_two_players(self):
        roster = [
            RosterEntry(id="p1", name="Alice", selected_deck="alpha"),
            RosterEntry(id="p2", name="Bob", selected_deck="beta"),
        ]
        state = create_initial_state(roster, _make_registry("alpha", "beta"), "swamp", random.Random(42))
        assert [p.id for p in state.players] == ["p1", "p2"]
        assert len(state.characters) == 6
        assert state.map_id == "swamp"
        assert state.log == []
        assert state.attack_in_progress is None
        assert not state.deck_inspection.is_open

    def test_missing_selection_uses_first_deck(self):
        roster = [RosterEntry(id="p1", name="Alice")]
        state = create_initial_state(roster, _make_registry("alpha"), rng=random.Random(42))
        assert len(state.players) == 1
        assert state.map_id == "plains"

    def test_unknown_deck_skips_player(self):
        roster = [
            RosterEntry(id="p1", name="Alice", selected_deck="alpha"),
            RosterEntry(id="p2", name="Bob", selected_deck="ghost"),
        ]
        state = create_initial_state(roster, _make_registry("alpha"), rng=random.Random(42))
        assert [p.id for p in state.players] == ["p1"]
        assert all(c.player_id == "p1" for c in state.characters)
