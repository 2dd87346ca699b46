# qlab/core/q_table.py
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

logger = logging.getLogger(__name__)


def new_table(state_count: int, action_count: int) -> np.ndarray:
    """Q-Table densa (estados x acciones) inicializada a cero."""
    if state_count <= 0 or action_count <= 0:
        raise ValueError(
            f"Dimensiones de Q-Table no válidas: {state_count}x{action_count}")
    return np.zeros((state_count, action_count), dtype=np.float64)


class QTableStore:
    """
    Almacén objetivo -> Q-Table.

    - Las tablas se publican completas (`put` copia y congela el array), de modo
      que un lector nunca observa una tabla a medio actualizar.
    - `goal_lock(key)` serializa los entrenamientos de un mismo objetivo sin
      bloquear los de otros objetivos.
    """

    def __init__(self):
        self._tables: dict[int, np.ndarray] = {}
        self._lock = threading.Lock()
        self._goal_locks: dict[int, threading.Lock] = {}

    def get(self, goal_key: int) -> Optional[np.ndarray]:
        with self._lock:
            return self._tables.get(goal_key)

    def put(self, goal_key: int, table: np.ndarray) -> None:
        published = np.array(table, dtype=np.float64, copy=True)
        if published.ndim != 2:
            raise ValueError(
                f"Se esperaba una Q-Table 2D, recibida de forma {published.shape}")
        published.setflags(write=False)
        with self._lock:
            replaced = goal_key in self._tables
            self._tables[goal_key] = published
        logger.debug("Q-Table %s para el objetivo %s (%dx%d)",
                     "reemplazada" if replaced else "publicada",
                     goal_key, *published.shape)

    def goal_lock(self, goal_key: int) -> threading.Lock:
        with self._lock:
            lock = self._goal_locks.get(goal_key)
            if lock is None:
                lock = self._goal_locks[goal_key] = threading.Lock()
            return lock

    def goals(self) -> list[int]:
        with self._lock:
            return sorted(self._tables)

    def __contains__(self, goal_key: object) -> bool:
        with self._lock:
            return goal_key in self._tables

    def __len__(self) -> int:
        with self._lock:
            return len(self._tables)

    def __iter__(self) -> Iterator[int]:
        return iter(self.goals())

    def clear(self) -> None:
        # Los locks por objetivo se conservan: un entrenamiento en curso puede tener uno
        with self._lock:
            self._tables.clear()

    # Persistencia ---

    def save(self, path: str | Path) -> Path:
        """Guarda todas las tablas en un único fichero .npz (una entrada por objetivo)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            arrays = {f"goal_{key}": table for key, table in self._tables.items()}
        # np.savez añade la extensión si falta; abrimos el fichero nosotros para respetar el nombre
        with open(path, "wb") as f:
            np.savez(f, **arrays)
        logger.info("Guardadas %d Q-Tables en %s", len(arrays), path)
        return path

    @classmethod
    def load(cls, path: str | Path) -> "QTableStore":
        store = cls()
        with np.load(Path(path)) as data:
            for name in data.files:
                prefix, _, raw_key = name.partition("_")
                if prefix != "goal" or not raw_key.isdigit():
                    raise ValueError(
                        f"Entrada inesperada '{name}' en el fichero de Q-Tables {path}")
                store.put(int(raw_key), data[name])
        logger.info("Cargadas %d Q-Tables desde %s", len(store), path)
        return store
