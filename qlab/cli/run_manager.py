# qlab/cli/run_manager.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

# Carpeta base de los 'runs' (relativa al directorio de trabajo)
RUNS_DIR = Path("runs")

Q_TABLES_FILE = "q_tables.npz"


def _env_dir(env_id: str, base: Optional[Path] = None) -> Path:
    # "qlab/Lab-v1" -> runs/Lab-v1
    return (base or RUNS_DIR) / env_id.split('/')[-1]


def get_run_dir(env_id: str, seed: int, base: Optional[Path] = None) -> Path:
    """Devuelve (creándola si hace falta) la carpeta del 'run' para una semilla."""
    run_dir = _env_dir(env_id, base) / f"seed-{seed}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def find_latest_run_dir(env_id: str, base: Optional[Path] = None) -> Optional[Path]:
    """El 'run' modificado más recientemente que contenga Q-Tables."""
    env_dir = _env_dir(env_id, base)
    if not env_dir.is_dir():
        return None
    candidates = [d for d in env_dir.glob("seed-*") if (d / Q_TABLES_FILE).exists()]
    if not candidates:
        return None
    return max(candidates, key=lambda d: (d / Q_TABLES_FILE).stat().st_mtime)
