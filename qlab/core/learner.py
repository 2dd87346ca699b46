# qlab/core/learner.py
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

import numpy as np

from qlab.core.environment import LearningEnvironment
from qlab.core.errors import UntrainedGoal
from qlab.core.goals import Goal, goal_key
from qlab.core.policy import make_rng
from qlab.core.q_table import QTableStore
from qlab.core.query import ResolvedAction, index_state_space, resolve_action
from qlab.core.reward import RewardModel
from qlab.core.trainer import Hyperparameters, Trainer, TrainerConfig, TrainingStats

logger = logging.getLogger(__name__)


class QLearner:
    """
    Calcula y sirve Q-Tables condicionadas a un objetivo sobre un entorno.

    Es el dueño del almacén de tablas y de la fuente de aleatoriedad: se
    construye una vez, se comparte por referencia y se cierra con `close()`
    (o usándolo como context manager).
    """

    def __init__(
        self,
        env: LearningEnvironment,
        seed: Optional[int] = None,
        store: Optional[QTableStore] = None,
        reward_model: Optional[RewardModel] = None,
        config: Optional[TrainerConfig] = None,
    ):
        self.env = env
        self.store = store if store is not None else QTableStore()
        self.rng = make_rng(seed)
        self.reward_model = reward_model or RewardModel()
        self.config = config or TrainerConfig()
        self.last_stats: Optional[TrainingStats] = None

        self._state_index = index_state_space(env)
        if len(self._state_index) != env.state_count():
            raise ValueError(
                f"El espacio de estados tiene {len(self._state_index)} vectores distintos "
                f"pero el entorno declara {env.state_count()} estados")

        logger.info("Inicializado con un espacio de estados de n=%d", env.state_count())
        logger.info("Inicializado con un espacio de acciones de m=%d", env.action_count())

    def calculate_q(
        self,
        goal_description: "Goal | Iterable[int]",
        episodes: int,
        alpha: float,
        gamma: float,
        epsilon: float,
        reward: float,
        show_progress: bool = False,
    ) -> None:
        """
        Calcula la Q-Table del objetivo y la publica en el almacén (sobrescribe).

        Args:
            goal_description: Objetivo, e.g. [2, 3] (nivel Zona 1, nivel Zona 2).
            episodes: Número de episodios.
            alpha: Tasa de aprendizaje [0, 1].
            gamma: Factor de descuento [0, 1].
            epsilon: Probabilidad de exploración [0, 1].
            reward: Recompensa al alcanzar el objetivo.
        """
        goal = Goal.of(goal_description)
        key = goal_key(goal)
        hparams = Hyperparameters(episodes, alpha, gamma, epsilon, reward).validate()

        trainer = Trainer(self.env, self.reward_model, self.rng, self.config)
        with self.store.goal_lock(key):
            q_table, stats = trainer.run(goal, hparams, show_progress=show_progress)
            self.store.put(key, q_table)
        self.last_stats = stats

    def get_action_from_state(
        self,
        goal_description: "Goal | Iterable[int]",
        state_description: Iterable[Any],
    ) -> ResolvedAction:
        """
        Args:
            goal_description: Estado deseado del laboratorio (e.g. [2, 3]).
            state_description: Estado actual (e.g. [2, 2, True, False, True, True, 2]).
        """
        return resolve_action(
            self.store, self.env, goal_description, state_description,
            state_index=self._state_index)

    def q_table(self, goal_description: "Goal | Sequence[int]") -> np.ndarray:
        table = self.store.get(goal_key(goal_description))
        if table is None:
            raise UntrainedGoal(
                f"No hay Q-Table entrenada para el objetivo {Goal.of(goal_description)}")
        return table

    def close(self) -> None:
        self.store.clear()
        close = getattr(self.env, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "QLearner":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
