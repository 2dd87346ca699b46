# qlab/helpers/eval.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from rich.progress import track

from qlab.core.environment import LearningEnvironment
from qlab.core.goals import Goal, goal_reached
from qlab.core.policy import best_action

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    episodes: int = 0
    successes: int = 0
    steps: list[int] = field(default_factory=list)
    rewards: list[float] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        return self.successes / self.episodes if self.episodes else 0.0

    @property
    def mean_steps(self) -> float:
        return float(np.mean(self.steps)) if self.steps else 0.0


def evaluate_greedy(
    env: LearningEnvironment,
    q_table: np.ndarray,
    goal: Goal,
    episodes: int = 1,
    max_steps: int = 100,
    reward_model=None,
    terminal_reward: float = 0.0,
    show_progress: bool = False,
) -> EvaluationResult:
    """
    Ejecuta la política greedy (epsilon = 0) de una Q-Table desde el estado inicial.

    Un episodio cuenta como éxito si alcanza el objetivo en `max_steps` pasos o menos.
    """
    result = EvaluationResult()
    iterator = range(int(episodes))
    if show_progress:
        iterator = track(iterator, description="Evaluando...")

    for _ in iterator:
        env.reset_episode()
        steps, total_reward = 0, 0.0
        reached = goal_reached(goal, env.current_state_vector())
        while not reached and steps < max_steps:
            state = env.current_state()
            action = best_action(env.applicable_actions(state), q_table[state])
            env.perform_action(action)
            reached = goal_reached(goal, env.current_state_vector())
            if reward_model is not None:
                total_reward += reward_model.reward(
                    env.action_metadata(action), reached, terminal_reward)
            steps += 1

        result.episodes += 1
        result.steps.append(steps)
        result.rewards.append(total_reward)
        if reached:
            result.successes += 1

    logger.info("Evaluación del objetivo %s: %d/%d éxitos, %.1f pasos de media",
                goal, result.successes, result.episodes, result.mean_steps)
    return result
