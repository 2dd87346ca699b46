# qlab/core/query.py
from __future__ import annotations

from typing import Any, Iterable, Mapping, NamedTuple, Optional, Sequence

from qlab.core.environment import LearningEnvironment
from qlab.core.errors import UnknownState, UntrainedGoal
from qlab.core.goals import Goal, goal_key
from qlab.core.policy import best_action
from qlab.core.q_table import QTableStore


class ResolvedAction(NamedTuple):
    action_tag: str
    payload_tags: tuple[str, ...]
    payload: tuple[Any, ...]


def index_state_space(env: LearningEnvironment) -> dict[tuple[int, ...], int]:
    """Índice inverso vector de estado -> StateIndex."""
    return {tuple(int(v) for v in vector): i for i, vector in enumerate(env.state_space)}


def normalize_state(state_description: Iterable[Any]) -> tuple[int, ...]:
    """Convierte [2, 2, True, False, ...] en (2, 2, 1, 0, ...)."""
    try:
        values = list(state_description)
    except TypeError as e:
        raise UnknownState(
            f"Descripción de estado no iterable: {state_description!r}") from e

    normalized = []
    for value in values:
        if isinstance(value, bool):
            normalized.append(int(value))
            continue
        try:
            as_int = int(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise UnknownState(
                f"Valor no discreto {value!r} en el estado {values!r}") from e
        if as_int != value:
            raise UnknownState(f"Valor no discreto {value!r} en el estado {values!r}")
        normalized.append(as_int)
    return tuple(normalized)


def resolve_action(
    store: QTableStore,
    env: LearningEnvironment,
    goal: "Goal | Sequence[int]",
    state_description: Iterable[Any],
    state_index: Optional[Mapping[tuple[int, ...], int]] = None,
) -> ResolvedAction:
    """
    Acción recomendada (tag + payload) para un estado, según la Q-Table del objetivo.
    """
    goal = Goal.of(goal)
    q_table = store.get(goal_key(goal))
    if q_table is None:
        raise UntrainedGoal(f"No hay Q-Table entrenada para el objetivo {goal}")

    if state_index is None:
        state_index = index_state_space(env)
    vector = normalize_state(state_description)
    state = state_index.get(vector)
    if state is None:
        raise UnknownState(f"El estado {list(vector)} no pertenece al espacio de estados")

    action = best_action(env.applicable_actions(state), q_table[state])
    meta = env.action_metadata(action)
    return ResolvedAction(meta.tag, tuple(meta.payload_tags), tuple(meta.payload))
