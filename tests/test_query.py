import numpy as np
import pytest

from qlab.core.errors import NotTrained, UnknownState, UntrainedGoal
from qlab.core.goals import goal_key
from qlab.core.policy import best_action
from qlab.core.q_table import QTableStore
from qlab.core.query import ResolvedAction, index_state_space, normalize_state, resolve_action


@pytest.fixture
def trained_store():
    store = QTableStore()
    store.put(goal_key([1]), np.array([[1.0, 4.0], [-2.0, -1.0]]))
    return store


def test_untrained_goal(toy_env):
    with pytest.raises(UntrainedGoal):
        resolve_action(QTableStore(), toy_env, [1], [0])


def test_not_trained_alias():
    assert NotTrained is UntrainedGoal


def test_resolves_best_action_metadata(toy_env, trained_store):
    action = resolve_action(trained_store, toy_env, [1], [0])
    assert action == ResolvedAction("toy#action1", ("Value",), (1,))


def test_matches_best_action_on_stored_table(toy_env, trained_store):
    table = trained_store.get(goal_key([1]))
    for state in range(2):
        expected = best_action(toy_env.applicable_actions(state), table[state])
        assert resolve_action(trained_store, toy_env, [1], [state]).payload == (expected,)


@pytest.mark.parametrize("state", [
    [5], [0, 0], [], ["x"], [0.5], [float("inf")], [float("-inf")], [float("nan")],
])
def test_unknown_state(toy_env, trained_store, state):
    with pytest.raises(UnknownState):
        resolve_action(trained_store, toy_env, [1], state)


def test_state_index_can_be_reused(toy_env, trained_store):
    index = index_state_space(toy_env)
    assert index == {(0,): 0, (1,): 1}
    assert resolve_action(trained_store, toy_env, [1], [1], state_index=index).payload == (1,)


def test_booleans_are_normalized():
    assert normalize_state([2, 2, True, False, True, True, 2]) == (2, 2, 1, 0, 1, 1, 2)
    assert normalize_state(np.array([1, 0])) == (1, 0)
