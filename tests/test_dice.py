"""Tests for the movement die."""

import random
from collections import Counter

from engine.dice import MOVEMENT_DIE_FACES, roll_movement_die


class TestMovementDie:
    """Tests for roll_movement_die()."""

    def test_face_matches_index(self):
        result = roll_movement_die(rng=random.Random(42))
        assert MOVEMENT_DIE_FACES[result.index] == result.face

    def test_seeded_is_deterministic(self):
        a = [roll_movement_die(rng=random.Random(3)).face for _ in range(5)]
        b = [roll_movement_die(rng=random.Random(3)).face for _ in range(5)]
        assert a == b

    def test_all_faces_reachable(self):
        rng = random.Random(42)
        faces = Counter(roll_movement_die(rng=rng).face for _ in range(600))
        assert set(faces) == set(MOVEMENT_DIE_FACES)

    def test_sides_does_not_change_outcome_space(self):
        rng = random.Random(42)
        for _ in range(100):
            assert roll_movement_die(sides=20, rng=rng).face in MOVEMENT_DIE_FACES

    def test_six_faces(self):
        assert len(MOVEMENT_DIE_FACES) == 6
        assert MOVEMENT_DIE_FACES[0] == "ALL 2"
        assert MOVEMENT_DIE_FACES[-1] == "ONE 5"
