"""Tests for board transitions: movement, health, conditions, tokens, dice, maps."""

import random

import pytest

from engine.board import (
    add_token_character,
    change_map,
    move_character,
    new_token_id,
    roll_dice,
    update_character_conditions,
    update_character_health,
)
from engine.dice import MOVEMENT_DIE_FACES
from models.characters import Character, CharacterSize, Position, TokenTemplate
from models.game_state import GameState, Player


def _make_state() -> GameState:
    return GameState(
        players=[Player(id="p1", name="Alice")],
        characters=[
            Character(
                id="p1-hero",
                player_id="p1",
                name="Hero",
                position=Position(x=2, y=2),
                health=20,
                max_health=20,
            )
        ],
    )


class TestMoveCharacter:
    """Tests for move_character()."""

    def test_moves(self):
        nxt = move_character(_make_state(), "p1-hero", Position(x=70, y=136))
        assert nxt.find_character("p1-hero").position == Position(x=70, y=136)

    def test_no_bounds_check(self):
        nxt = move_character(_make_state(), "p1-hero", Position(x=-500, y=9000))
        assert nxt.find_character("p1-hero").position.y == 9000

    def test_unknown_character(self):
        with pytest.raises(ValueError, match="not found"):
            move_character(_make_state(), "ghost", Position(x=0, y=0))


class TestUpdateHealth:
    """Tests for update_character_health()."""

    def test_sets_health(self):
        nxt = update_character_health(_make_state(), "p1-hero", 12)
        assert nxt.find_character("p1-hero").health == 12
        assert nxt.log == []

    def test_zero_removes_and_logs_once(self):
        nxt = update_character_health(_make_state(), "p1-hero", 0)
        assert nxt.find_character("p1-hero") is None
        assert len(nxt.log) == 1
        assert nxt.log[0].message == "Hero was destroyed!"

    def test_negative_removes(self):
        nxt = update_character_health(_make_state(), "p1-hero", -3)
        assert nxt.characters == []

    def test_destroyed_character_cannot_be_updated_again(self):
        nxt = update_character_health(_make_state(), "p1-hero", 0)
        with pytest.raises(ValueError):
            update_character_health(nxt, "p1-hero", 5)


class TestUpdateConditions:
    """Tests for update_character_conditions()."""

    def test_replaces_list(self):
        state = update_character_conditions(_make_state(), "p1-hero", ["Stunned"])
        nxt = update_character_conditions(state, "p1-hero", ["Armor", "Poisoned"])
        assert nxt.find_character("p1-hero").conditions == ["Armor", "Poisoned"]


class TestTokens:
    """Tests for add_token_character() and new_token_id()."""

    def test_adds_token(self):
        template = TokenTemplate(player_id="p1", name="Wolf", health=4, size=CharacterSize.SMALL)
        nxt = add_token_character(_make_state(), template)
        assert len(nxt.characters) == 2
        token = nxt.characters[-1]
        assert token.id.startswith("token-")
        assert token.name == "Wolf"
        assert token.max_health == 4
        assert token.size == CharacterSize.SMALL

    def test_template_accepts_client_field_names(self):
        template = TokenTemplate.model_validate(
            {"playerId": "p1", "imageUrl": "wolf.png", "health": 3, "maxHealth": 5}
        )
        assert template.image_url == "wolf.png"
        assert template.max_health == 5
        token = add_token_character(_make_state(), template).characters[-1]
        assert token.image_url == "wolf.png"
        assert token.health == 3
        assert token.max_health == 5

    def test_tokens_get_distinct_ids(self):
        template = TokenTemplate(player_id="p1")
        state = add_token_character(_make_state(), template)
        state = add_token_character(state, template)
        ids = [c.id for c in state.characters]
        assert len(ids) == len(set(ids))

    def test_new_token_id_avoids_existing(self):
        first = new_token_id(set())
        assert new_token_id({first}) != first


class TestRollDice:
    """Tests for roll_dice()."""

    def test_logs_face(self):
        nxt = roll_dice(_make_state(), "p1", rng=random.Random(42))
        message = nxt.log[-1].message
        assert message.startswith("Alice rolled: ")
        assert message.removeprefix("Alice rolled: ") in MOVEMENT_DIE_FACES

    def test_unknown_player(self):
        with pytest.raises(ValueError):
            roll_dice(_make_state(), "ghost")


class TestChangeMap:
    """Tests for change_map()."""

    def test_known_map(self):
        assert change_map(_make_state(), "swamp").map_id == "swamp"

    def test_unknown_map_falls_back(self):
        assert change_map(_make_state(), "atlantis").map_id == "plains"
