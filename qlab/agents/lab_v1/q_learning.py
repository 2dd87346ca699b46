"""Entrenamiento, consulta y evaluación baseline para qlab/Lab-v1 usando Q-Learning.

Este módulo implementa las funciones `train_agent`, `query_agent` y `eval_agent`
que la CLI espera encontrar para el entorno según la configuración BASELINE.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence

import gymnasium as gym

from qlab.cli.run_manager import Q_TABLES_FILE
from qlab.core.goals import Goal
from qlab.core.learner import QLearner
from qlab.core.q_table import QTableStore
from qlab.core.query import ResolvedAction
from qlab.core.trainer import TrainerConfig
from qlab.helpers.eval import EvaluationResult, evaluate_greedy


def _make_env(env_id: str):
    # El Trainer habla con el puerto del entorno, no con los wrappers de Gymnasium
    return gym.make(env_id).unwrapped


def _trainer_config(config: dict) -> TrainerConfig:
    timeout = config.get("timeout")
    return TrainerConfig(
        max_steps_per_episode=int(config.get("max_steps", 1000)),
        timeout=float(timeout) if timeout is not None else None,
    )


def load_store(run_dir: Path) -> QTableStore:
    """Q-Tables guardadas en el 'run' (vacío si todavía no hay ninguna)."""
    q_tables_file = Path(run_dir) / Q_TABLES_FILE
    if q_tables_file.exists():
        return QTableStore.load(q_tables_file)
    return QTableStore()


# --- Funciones estandarizadas (Contrato para la CLI) ---


def train_agent(
    env_id: str,
    config: dict,
    run_dir: Path,
    goals: Iterable[Sequence[int]],
    seed: Optional[int] = None,
    render: bool = True,
) -> Path:
    """
    Entrena una Q-Table por objetivo y las guarda en la carpeta del 'run'.

    Las tablas de otros objetivos ya guardadas en el 'run' se conservan;
    las del mismo objetivo se sobrescriben.
    """
    learner = QLearner(
        _make_env(env_id),
        seed=seed,
        store=load_store(run_dir),
        config=_trainer_config(config),
    )
    with learner:
        for goal in goals:
            learner.calculate_q(
                Goal.of(goal),
                episodes=int(config['episodes']),
                alpha=float(config['alpha']),
                gamma=float(config['gamma']),
                epsilon=float(config['epsilon']),
                reward=float(config['reward']),
                show_progress=render,
            )
        return learner.store.save(Path(run_dir) / Q_TABLES_FILE)


def action_labels(env_id: str) -> list[str]:
    """Etiquetas de columna para la Q-Table, e.g. 'SetZ2Blinds(True)'."""
    env = _make_env(env_id)
    try:
        labels = []
        for action in range(env.action_count()):
            meta = env.action_metadata(action)
            name = meta.tag.rsplit("#", 1)[-1]
            labels.append(f"{name}({','.join(str(v) for v in meta.payload)})")
        return labels
    finally:
        env.close()


def query_agent(
    env_id: str,
    run_dir: Path,
    goal: Sequence[int],
    state: Sequence[int],
) -> ResolvedAction:
    """Acción recomendada para un estado según la Q-Table guardada del objetivo."""
    with QLearner(_make_env(env_id), store=load_store(run_dir)) as learner:
        return learner.get_action_from_state(goal, state)


def eval_agent(
    env_id: str,
    run_dir: Path,
    goal: Sequence[int],
    episodes: int,
    config: dict,
    render: bool = True,
) -> EvaluationResult:
    """Ejecuta la política greedy de la Q-Table guardada desde el estado inicial."""
    with QLearner(_make_env(env_id), store=load_store(run_dir)) as learner:
        return evaluate_greedy(
            learner.env,
            learner.q_table(goal),
            Goal.of(goal),
            episodes=episodes,
            max_steps=int(config.get("max_steps", 1000)),
            reward_model=learner.reward_model,
            terminal_reward=float(config.get("reward", 0.0)),
            show_progress=render,
        )
