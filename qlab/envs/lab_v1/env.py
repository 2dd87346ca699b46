# qlab/envs/lab_v1/env.py

import gymnasium as gym
from gymnasium import spaces
import numpy as np

from qlab.core.environment import ActionMetadata
from qlab.core.goals import Goal, goal_reached
from qlab.core.reward import RewardModel

from .game import AXIS_NAMES, LEVELS, LabGame


class LabEnv(gym.Env):
    """
    Laboratorio simulado con dos zonas de luz.

    Además de la API de Gymnasium (reset/step), implementa el puerto
    `LearningEnvironment` que usa el Trainer (current_state, perform_action...).
    """

    metadata = {"render_modes": ["ansi"], "render_fps": 4}

    def __init__(self,
                 render_mode=None,
                 sunshine=2,        # Nivel de sol exterior (0..3) del estado inicial
                 goal=None,         # Objetivo por defecto para la recompensa de step()
                 reward_goal=100.0,
                 ):
        super().__init__()
        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode

        # Lógica del juego (Delegada a LabGame)
        self._game = LabGame(sunshine=sunshine)
        self._reward_model = RewardModel()
        self.REWARD_GOAL = float(reward_goal)
        self._goal = Goal.of(goal) if goal is not None else None

        # Espacios de acción y observación
        self.action_space = spaces.Discrete(len(self._game.actions))
        self.observation_space = spaces.MultiDiscrete(
            [LEVELS, LEVELS, 2, 2, 2, 2, LEVELS], dtype=np.int64)

    # API de Gymnasium ---

    def _get_obs(self):
        return np.array(self._game.get_vector(), dtype=np.int64)

    def _get_info(self):
        return {
            "steps": self._game.current_step,
            "state": self._game.state_index(),
            "applicable_actions": self._game.applicable_actions(self._game.state_index()),
        }

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)
        options = options or {}

        sunshine = options.get("sunshine")
        if options.get("random_sunshine"):
            sunshine = int(self.np_random.integers(0, LEVELS))
        self._game.reset(sunshine=sunshine)

        if "state" in options:
            self._game.set_state(options["state"])
        if options.get("goal") is not None:
            self._goal = Goal.of(options["goal"])

        return self._get_obs(), self._get_info()

    def step(self, action):
        action = int(action)
        vector = self._game.step(action)

        terminated = self._goal is not None and goal_reached(self._goal, vector)
        reward = self._reward_model.reward(
            self._game.actions[action], terminated, self.REWARD_GOAL)

        # El límite de pasos lo impone el TimeLimit del registro
        truncated = False
        return self._get_obs(), float(reward), bool(terminated), truncated, self._get_info()

    def render(self):
        if self.render_mode is None:
            gym.logger.warn(
                "You are calling render method without specifying any render mode."
            )
            return None
        vector = self._game.get_vector()
        return "  ".join(f"{name}={value}" for name, value in zip(AXIS_NAMES, vector))

    # Puerto LearningEnvironment ---

    def state_count(self) -> int:
        return len(self._game.state_space)

    def action_count(self) -> int:
        return len(self._game.actions)

    def current_state(self) -> int:
        return self._game.state_index()

    def current_state_vector(self) -> tuple:
        return self._game.get_vector()

    def applicable_actions(self, state: int) -> list:
        return self._game.applicable_actions(state)

    def perform_action(self, action: int) -> None:
        self._game.step(int(action))

    def action_metadata(self, action: int) -> ActionMetadata:
        if not 0 <= action < len(self._game.actions):
            raise ValueError(f"Acción desconocida: {action}")
        return self._game.actions[action]

    @property
    def state_space(self):
        return self._game.state_space

    def reset_episode(self) -> None:
        self._game.reset()
