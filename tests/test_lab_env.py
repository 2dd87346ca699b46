import gymnasium as gym
import numpy as np
import pytest

from qlab.core.environment import LearningEnvironment
from qlab.core.goals import Goal
from qlab.core.learner import QLearner
from qlab.envs.lab_v1.game import LabGame, zone_level
from qlab.helpers.eval import evaluate_greedy

START = (0, 0, 0, 0, 0, 0, 2)


class TestLabGame:

    @pytest.mark.parametrize("light, blinds, sunshine, level", [
        (0, 0, 3, 0),
        (0, 1, 1, 1),
        (0, 1, 3, 2),
        (1, 0, 0, 2),
        (1, 1, 2, 3),
        (1, 1, 3, 3),
    ])
    def test_zone_level(self, light, blinds, sunshine, level):
        assert zone_level(light, blinds, sunshine) == level

    def test_state_space_is_the_full_product(self):
        game = LabGame()
        assert len(game.state_space) == 4 * 4 * 2 * 2 * 2 * 2 * 4
        assert len(set(game.state_space)) == len(game.state_space)
        assert game.state_space[0] == (0, 0, 0, 0, 0, 0, 0)

    def test_applicable_actions_change_the_state(self):
        game = LabGame()
        start = game.state_index()
        # Todo apagado y bajado: solo encender luces o subir persianas
        assert game.applicable_actions(start) == [0, 2, 4, 6]

        game.step(0)
        assert 0 not in game.applicable_actions(game.state_index())
        assert 1 in game.applicable_actions(game.state_index())

    def test_step_updates_levels(self):
        game = LabGame(sunshine=2)
        assert game.step(0) == (2, 0, 1, 0, 0, 0, 2)
        assert game.step(6) == (2, 1, 1, 0, 0, 1, 2)

    def test_invalid_sunshine_and_actions(self):
        with pytest.raises(ValueError):
            LabGame(sunshine=4)
        with pytest.raises(ValueError):
            LabGame().step(8)


class TestLabEnv:

    def test_implements_the_learning_port(self, lab_env):
        assert isinstance(lab_env, LearningEnvironment)
        assert lab_env.state_count() == 1024
        assert lab_env.action_count() == 8

    def test_action_metadata(self, lab_env):
        meta = lab_env.action_metadata(6)
        assert meta.tag.endswith("SetZ2Blinds")
        assert meta.payload_tags == ("Z2Blinds",)
        assert meta.payload == (True,)
        assert meta.affected_axis == 5
        with pytest.raises(ValueError):
            lab_env.action_metadata(99)

    def test_reset_episode_restores_start_state(self, lab_env):
        lab_env.perform_action(0)
        lab_env.perform_action(4)
        lab_env.reset_episode()
        assert lab_env.current_state_vector() == START

    def test_gymnasium_api(self):
        env = gym.make("qlab/Lab-v1")
        obs, info = env.reset(seed=0, options={"goal": [0, 1]})
        assert env.observation_space.contains(obs)
        np.testing.assert_array_equal(obs, START)

        obs, reward, terminated, truncated, info = env.step(6)
        assert terminated and not truncated
        assert reward == 100.0 - 1.0
        env.close()

    def test_reset_options(self, lab_env):
        obs, _ = lab_env.reset(options={"state": (0, 0, 1, 1, 1, 1, 3)})
        assert tuple(obs) == (3, 3, 1, 1, 1, 1, 3)

    def test_ansi_render(self):
        env = gym.make("qlab/Lab-v1", render_mode="ansi")
        env.reset()
        assert "Z1Level=0" in env.render()
        env.close()


class TestLabTraining:

    def test_learns_to_raise_the_blinds(self, lab_env):
        with QLearner(lab_env, seed=0) as learner:
            learner.calculate_q([0, 1], episodes=50, alpha=0.5, gamma=0.9, epsilon=0.3, reward=100)
            action = learner.get_action_from_state([0, 1], [0, 0, False, False, False, False, 2])

            assert action.action_tag.endswith("SetZ2Blinds")
            assert action.payload_tags == ("Z2Blinds",)
            assert action.payload == (True,)

            result = evaluate_greedy(lab_env, learner.q_table([0, 1]), Goal.of([0, 1]),
                                     episodes=2, max_steps=10)
            assert result.success_rate == 1.0
            assert result.steps == [1, 1]
