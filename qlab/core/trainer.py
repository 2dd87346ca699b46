# qlab/core/trainer.py
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from rich.progress import track

from qlab.core.environment import LearningEnvironment
from qlab.core.errors import InvalidHyperparameter, TrainingTimeout
from qlab.core.goals import Goal, goal_reached
from qlab.core.policy import epsilon_greedy, max_q
from qlab.core.q_table import new_table
from qlab.core.reward import RewardModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Hyperparameters:
    """
    Hiperparámetros de una llamada de entrenamiento (no se persisten).

    Args:
        episodes: Número de episodios (entero positivo).
        alpha: Tasa de aprendizaje (learning rate) en [0, 1].
        gamma: Factor de descuento (discount factor) en [0, 1].
        epsilon: Probabilidad de exploración en [0, 1].
        reward: Recompensa al alcanzar el objetivo.
    """

    episodes: int
    alpha: float
    gamma: float
    epsilon: float
    reward: float

    def validate(self) -> "Hyperparameters":
        if isinstance(self.episodes, bool) or not isinstance(self.episodes, (int, np.integer)) \
                or self.episodes <= 0:
            raise InvalidHyperparameter(
                f"episodes debe ser un entero positivo (recibido {self.episodes!r})")
        for name in ("alpha", "gamma", "epsilon"):
            value = getattr(self, name)
            if not isinstance(value, (int, float, np.number)) or not 0.0 <= value <= 1.0:
                raise InvalidHyperparameter(
                    f"{name} debe estar en [0, 1] (recibido {value!r})")
        if not isinstance(self.reward, (int, float, np.number)) or not math.isfinite(self.reward):
            raise InvalidHyperparameter(
                f"reward debe ser un número finito (recibido {self.reward!r})")
        return self


@dataclass(frozen=True)
class TrainerConfig:
    """
    Salvaguardas del bucle de entrenamiento.

    Args:
        max_steps_per_episode: Pasos máximos antes de truncar un episodio.
        timeout: Segundos máximos para toda la llamada (None = sin límite).
        reset_between_episodes: Llamar a `reset_episode()` al inicio de cada episodio.
    """

    max_steps_per_episode: int = 1000
    timeout: Optional[float] = None
    reset_between_episodes: bool = True

    def __post_init__(self):
        if self.max_steps_per_episode <= 0:
            raise InvalidHyperparameter(
                f"max_steps_per_episode debe ser positivo (recibido {self.max_steps_per_episode})")
        if self.timeout is not None and self.timeout <= 0:
            raise InvalidHyperparameter(
                f"timeout debe ser positivo (recibido {self.timeout})")


def q_update(q_table: np.ndarray, state: int, action: int, reward: float,
             next_max: float, alpha: float, gamma: float) -> float:
    """
    Actualiza Q[s, a] con la ecuación de Bellman y devuelve el nuevo valor.

    `next_max` es maxQ del estado alcanzado tras ejecutar la acción.
    """
    old_value = q_table[state, action]
    # La fórmula central de Q-Learning.
    q_table[state, action] = old_value + alpha * (reward + gamma * next_max - old_value)
    return float(q_table[state, action])


@dataclass
class TrainingStats:
    episodes: int = 0
    steps: list[int] = field(default_factory=list)
    truncated: int = 0

    @property
    def reached(self) -> int:
        return self.episodes - self.truncated

    @property
    def total_steps(self) -> int:
        return sum(self.steps)


class Trainer:
    """Bucle episódico de Q-learning (Watkins) con política epsilon-greedy."""

    def __init__(
        self,
        env: LearningEnvironment,
        reward_model: RewardModel,
        rng: np.random.Generator,
        config: Optional[TrainerConfig] = None,
    ):
        self.env = env
        self.reward_model = reward_model
        self.rng = rng
        self.config = config or TrainerConfig()

    def run(self, goal: Goal, hparams: Hyperparameters,
            show_progress: bool = False) -> tuple[np.ndarray, TrainingStats]:
        """
        Entrena una Q-Table desde cero para `goal`.

        La tabla se construye aparte y se devuelve al final; quien llama decide
        cuándo publicarla. Si se supera el timeout se lanza TrainingTimeout y
        la tabla parcial se descarta.
        """
        hparams.validate()
        env = self.env
        q_table = new_table(env.state_count(), env.action_count())
        stats = TrainingStats()

        deadline = None
        if self.config.timeout is not None:
            deadline = time.monotonic() + self.config.timeout

        episodes = range(int(hparams.episodes))
        if show_progress:
            episodes = track(episodes, description=f"Entrenando objetivo {goal}...")

        for episode in episodes:
            if self.config.reset_between_episodes:
                env.reset_episode()
            steps = self._run_episode(q_table, goal, hparams, deadline)
            stats.episodes += 1
            stats.steps.append(steps)
            if steps >= self.config.max_steps_per_episode and \
                    not goal_reached(goal, env.current_state_vector()):
                stats.truncated += 1
                logger.warning(
                    "Episodio %d truncado tras %d pasos sin alcanzar el objetivo %s",
                    episode, steps, goal)

        logger.info(
            "Objetivo %s: %d episodios, %d pasos, %d truncados",
            goal, stats.episodes, stats.total_steps, stats.truncated)
        return q_table, stats

    def _run_episode(self, q_table: np.ndarray, goal: Goal,
                     hparams: Hyperparameters, deadline: Optional[float]) -> int:
        env = self.env
        alpha, gamma = float(hparams.alpha), float(hparams.gamma)
        steps = 0

        while not goal_reached(goal, env.current_state_vector()):
            if steps >= self.config.max_steps_per_episode:
                break
            if deadline is not None and time.monotonic() > deadline:
                raise TrainingTimeout(
                    f"El entrenamiento del objetivo {goal} superó {self.config.timeout}s")

            state = env.current_state()
            action = epsilon_greedy(
                state, q_table, hparams.epsilon, env.applicable_actions(state), self.rng)

            # Los fallos del entorno se propagan: no actualizamos con una transición inválida
            env.perform_action(action)

            reached = goal_reached(goal, env.current_state_vector())
            reward = self.reward_model.reward(
                env.action_metadata(action), reached, hparams.reward)

            next_state = env.current_state()
            next_max = max_q(q_table, next_state, env.applicable_actions(next_state))

            old_value = q_table[state, action]
            q_update(q_table, state, action, reward, next_max, alpha, gamma)
            steps += 1

            logger.debug(
                "Q[%d,%d]: %.4f -> %.4f (r=%.2f, maxQ'=%.4f)",
                state, action, old_value, q_table[state, action], reward, next_max)

        return steps
