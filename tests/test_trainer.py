import numpy as np
import pytest

import qlab.core.trainer as trainer_module
from qlab.core.errors import InvalidHyperparameter, NoApplicableActions, TrainingTimeout
from qlab.core.goals import Goal
from qlab.core.policy import make_rng
from qlab.core.reward import NO_SHAPING, RewardModel
from qlab.core.trainer import Hyperparameters, Trainer, TrainerConfig, q_update

from conftest import ToyEnvironment


def _trainer(env, reward_model=NO_SHAPING, seed=0, **config):
    return Trainer(env, reward_model, make_rng(seed), TrainerConfig(**config))


class TestHyperparameters:

    @pytest.mark.parametrize("kwargs", [
        dict(episodes=0),
        dict(episodes=-3),
        dict(episodes=2.5),
        dict(episodes=True),
        dict(alpha=1.5),
        dict(alpha=-0.1),
        dict(gamma=1.01),
        dict(epsilon=-0.5),
        dict(reward=float("nan")),
    ])
    def test_invalid_values(self, kwargs):
        values = dict(episodes=1, alpha=0.5, gamma=0.9, epsilon=0.1, reward=100.0)
        values.update(kwargs)
        with pytest.raises(InvalidHyperparameter):
            Hyperparameters(**values).validate()

    def test_bounds_are_inclusive(self):
        Hyperparameters(1, 0.0, 1.0, 1.0, -5).validate()
        Hyperparameters(1, 1.0, 0.0, 0.0, 0).validate()

    def test_validation_happens_before_touching_the_environment(self, toy_env):
        with pytest.raises(InvalidHyperparameter):
            _trainer(toy_env).run(Goal.of([1]), Hyperparameters(1, 2.0, 0.9, 0.0, 100.0))
        assert toy_env.calls == []

    @pytest.mark.parametrize("kwargs", [dict(max_steps_per_episode=0), dict(timeout=0)])
    def test_invalid_trainer_config(self, kwargs):
        with pytest.raises(InvalidHyperparameter):
            TrainerConfig(**kwargs)


class TestQUpdate:

    def test_fixed_point_is_a_no_op(self):
        q_table = np.array([[12.0, 0.0], [0.0, 0.0]])
        # reward + gamma * maxQ == Q[s, a]
        new_value = q_update(q_table, 0, 0, reward=10.0, next_max=4.0, alpha=0.3, gamma=0.5)
        assert new_value == 12.0
        assert q_table[0, 0] == 12.0

    def test_bellman_update(self):
        q_table = np.zeros((2, 2))
        assert q_update(q_table, 0, 1, reward=100.0, next_max=10.0, alpha=0.5, gamma=0.9) == 54.5


class TestTrainer:

    def test_toy_end_to_end(self, toy_env):
        q_table, stats = _trainer(toy_env).run(
            Goal.of([1]), Hyperparameters(1, 0.5, 0.9, 0.0, 100.0))

        # 0 + 0.5 * (100 + 0.9 * 0 - 0)
        assert q_table[0, 0] == 50.0
        assert q_table[0, 1] == 0.0
        assert stats.episodes == 1 and stats.steps == [1] and stats.truncated == 0

    def test_alpha_one_gamma_zero_stores_the_reward(self, toy_env):
        q_table, _ = _trainer(toy_env).run(
            Goal.of([1]), Hyperparameters(1, 1.0, 0.0, 0.0, 37.5))
        assert q_table[0, 0] == 37.5

    def test_shaping_penalty_enters_the_update(self):
        env = ToyEnvironment(transitions={(0, 0): 1}, axes={0: 2})
        q_table, _ = _trainer(env, reward_model=RewardModel()).run(
            Goal.of([1]), Hyperparameters(1, 1.0, 0.0, 0.0, 100.0))
        assert q_table[0, 0] == 50.0

    def test_environment_is_reset_before_every_episode(self, toy_env):
        _, stats = _trainer(toy_env).run(
            Goal.of([1]), Hyperparameters(3, 0.5, 0.9, 0.0, 100.0))

        assert [c for c in toy_env.calls if c[0] == "reset_episode"] == [("reset_episode",)] * 3
        assert stats.steps == [1, 1, 1]

    def test_without_reset_the_goal_state_carries_over(self, toy_env):
        _, stats = _trainer(toy_env, reset_between_episodes=False).run(
            Goal.of([1]), Hyperparameters(3, 0.5, 0.9, 0.0, 100.0))
        assert stats.steps == [1, 0, 0]

    def test_unreachable_goal_terminates_with_step_budget(self):
        # La acción 0 no mueve nada: el objetivo [1] es inalcanzable
        env = ToyEnvironment(transitions={})
        q_table, stats = _trainer(env, max_steps_per_episode=25).run(
            Goal.of([1]), Hyperparameters(4, 0.5, 0.9, 0.3, 100.0))

        assert stats.steps == [25] * 4
        assert stats.truncated == 4 and stats.reached == 0
        assert not q_table.any()

    def test_timeout(self, monkeypatch):
        env = ToyEnvironment(transitions={})
        clock = iter(range(0, 10_000, 10))
        monkeypatch.setattr(trainer_module.time, "monotonic", lambda: float(next(clock)))

        trainer = _trainer(env, max_steps_per_episode=10_000, timeout=5.0)
        with pytest.raises(TrainingTimeout):
            trainer.run(Goal.of([1]), Hyperparameters(1, 0.5, 0.9, 0.0, 1.0))

    def test_environment_failure_propagates(self):
        env = ToyEnvironment(transitions={(0, 0): 1}, fail_on=0)
        with pytest.raises(ConnectionError):
            _trainer(env).run(Goal.of([1]), Hyperparameters(1, 0.5, 0.9, 0.0, 100.0))

    def test_dead_end_state_is_fatal(self):
        env = ToyEnvironment(n_states=3, transitions={(0, 0): 1}, applicable={0: [0], 1: []})
        with pytest.raises(NoApplicableActions):
            _trainer(env).run(Goal.of([2]), Hyperparameters(1, 0.5, 0.9, 0.0, 100.0))

    def test_learns_the_shortest_route(self):
        # 0 -a1-> 1 -a1-> 2 (objetivo); a0 vuelve siempre a 0
        env = ToyEnvironment(
            n_states=3,
            transitions={(0, 1): 1, (1, 1): 2, (1, 0): 0, (2, 0): 0},
        )
        q_table, stats = _trainer(env, seed=3).run(
            Goal.of([2]), Hyperparameters(200, 0.5, 0.9, 0.3, 10.0))

        assert stats.truncated == 0
        assert q_table[0, 1] > q_table[0, 0]
        assert q_table[1, 1] > q_table[1, 0]
