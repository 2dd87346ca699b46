# qlab/core/policy.py
"""Selección de acciones sobre una Q-Table (funciones puras salvo el RNG)."""
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from qlab.core.errors import NoApplicableActions


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Fuente de aleatoriedad del proceso. Con semilla, los tests son reproducibles."""
    return np.random.default_rng(seed)


def best_action(applicable_actions: Sequence[int], action_values: Sequence[float]) -> int:
    """
    Acción aplicable con mayor valor.

    Empate: gana la primera acción en el orden de `applicable_actions`.
    """
    if len(applicable_actions) == 0:
        raise NoApplicableActions("No hay acciones aplicables para este estado.")

    best = None
    best_value = -np.inf
    for action in applicable_actions:
        value = action_values[action]
        if best is None or value > best_value:
            best, best_value = action, value
    return int(best)


def epsilon_greedy(
    state: int,
    q_table: np.ndarray,
    epsilon: float,
    applicable_actions: Sequence[int],
    rng: np.random.Generator,
) -> int:
    """
    Política epsilon-greedy.
    - Con probabilidad epsilon, una acción aplicable al azar (exploración).
    - Con probabilidad 1-epsilon, la mejor acción conocida (explotación).
    """
    if len(applicable_actions) == 0:
        raise NoApplicableActions(
            f"El estado {state} no tiene acciones aplicables.")

    if rng.random() < epsilon:
        return int(applicable_actions[rng.integers(len(applicable_actions))])
    return best_action(applicable_actions, q_table[state])


def max_q(q_table: np.ndarray, state: int, applicable_actions: Sequence[int]) -> float:
    """
    Máximo valor Q entre las acciones aplicables en `state`.

    En la actualización, `state` es el estado alcanzado tras ejecutar la
    acción, no el estado previo.
    """
    if len(applicable_actions) == 0:
        raise NoApplicableActions(
            f"El estado {state} no tiene acciones aplicables.")
    return float(max(q_table[state][a] for a in applicable_actions))
