import gymnasium as gym
import pytest

import qlab  # noqa: F401  (registra "qlab/Lab-v1")
from qlab.core.environment import ActionMetadata


class ToyEnvironment:
    """
    Entorno mínimo para tests: estados [0], [1], ... y transiciones explícitas.

    transitions[(state, action)] -> next_state; si falta, la acción no mueve el estado.
    """

    def __init__(self, n_states=2, n_actions=2, transitions=None, applicable=None,
                 start=0, axes=None, fail_on=None):
        self.n_states = n_states
        self.n_actions = n_actions
        self.transitions = transitions or {}
        self.applicable = applicable
        self.start = start
        self.axes = axes or {}
        self.fail_on = fail_on
        self.state = start
        self.calls = []
        self.on_action = None

    def state_count(self):
        return self.n_states

    def action_count(self):
        return self.n_actions

    def current_state(self):
        return self.state

    def current_state_vector(self):
        return (self.state,)

    def applicable_actions(self, state):
        if self.applicable is not None:
            return self.applicable.get(state, [])
        return list(range(self.n_actions))

    def perform_action(self, action):
        self.calls.append(("perform_action", action))
        if self.fail_on is not None and action == self.fail_on:
            raise ConnectionError("El actuador no responde")
        self.state = self.transitions.get((self.state, action), self.state)
        if self.on_action is not None:
            self.on_action(action)

    def action_metadata(self, action):
        return ActionMetadata(
            tag=f"toy#action{action}",
            payload_tags=("Value",),
            payload=(action,),
            affected_axis=self.axes.get(action),
        )

    @property
    def state_space(self):
        return [(i,) for i in range(self.n_states)]

    def reset_episode(self):
        self.calls.append(("reset_episode",))
        self.state = self.start


@pytest.fixture
def toy_env():
    """2 estados, 2 acciones: la acción 0 lleva del estado 0 al objetivo (estado 1)."""
    return ToyEnvironment(transitions={(0, 0): 1})


@pytest.fixture
def lab_env():
    env = gym.make("qlab/Lab-v1").unwrapped
    yield env
    env.close()
