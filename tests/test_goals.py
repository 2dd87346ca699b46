import itertools

import numpy as np
import pytest

from qlab.core.errors import InvalidGoal
from qlab.core.goals import GOAL_RADIX, Goal, goal_key, goal_reached


class TestGoalKey:

    def test_injective_over_supported_range(self):
        keys = {}
        for length in (1, 2, 3):
            for levels in itertools.product(range(GOAL_RADIX), repeat=length):
                key = goal_key(levels)
                assert key not in keys, f"{levels} colisiona con {keys[key]}"
                keys[key] = levels

    def test_distinct_pairs_never_collide(self):
        pairs = list(itertools.product(range(GOAL_RADIX), repeat=2))
        for a, b in itertools.combinations(pairs, 2):
            assert goal_key(list(a)) != goal_key(list(b))

    def test_deterministic_and_accepts_lists_tuples_and_goals(self):
        assert goal_key([2, 3]) == goal_key((2, 3)) == goal_key(Goal((2, 3))) == 27

    def test_different_lengths_do_not_collide(self):
        assert goal_key([1]) != goal_key([0, 1])

    @pytest.mark.parametrize("levels", [[4, 0], [-1, 2], [0, 10]])
    def test_out_of_range_rejected(self, levels):
        with pytest.raises(InvalidGoal):
            goal_key(levels)

    def test_custom_radix(self):
        assert goal_key([9, 9], radix=10) == 199


class TestGoal:

    @pytest.mark.parametrize("levels", [[], [True, False], [1.5, 2], ["2", "3"]])
    def test_invalid_descriptions(self, levels):
        with pytest.raises(InvalidGoal):
            Goal.of(levels)

    def test_invalid_goal_is_a_value_error(self):
        with pytest.raises(ValueError):
            Goal.of([])

    def test_str(self):
        assert str(Goal.of([2, 3])) == "[2, 3]"

    def test_numpy_levels_are_normalised(self):
        obs = np.array([2, 3, 1, 1, 0, 1, 2], dtype=np.int64)
        goal = Goal.of(obs[:2])
        assert goal == Goal((2, 3))
        assert all(type(level) is int for level in goal.levels)
        assert goal_key(obs[:2]) == goal_key(np.array([2, 3])) == 27

    def test_numpy_bools_rejected(self):
        with pytest.raises(InvalidGoal):
            Goal.of(np.array([True, False]))


def test_goal_reached_compares_leading_axes():
    goal = Goal.of([2, 3])
    assert goal_reached(goal, (2, 3, 1, 1, 0, 1, 2))
    assert not goal_reached(goal, (3, 2, 1, 1, 0, 1, 2))
    assert not goal_reached(goal, (2,))
