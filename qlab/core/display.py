# qlab/core/display.py
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from rich.table import Table


def format_q_table(q_table: np.ndarray) -> str:
    """Volcado de la matriz Q: una fila por estado, columnas de ancho fijo."""
    lines = ["Q matrix"]
    for i, row in enumerate(q_table):
        values = "".join(f"{value:6.2f} " for value in row)
        lines.append(f"From state {i}:  {values}")
    return "\n".join(lines)


def q_table_to_rich(
    q_table: np.ndarray,
    action_labels: Optional[Sequence[str]] = None,
    only_visited: bool = False,
    title: str = "Q matrix",
) -> Table:
    """
    Tabla de rich para la CLI. Con `only_visited` se omiten las filas a cero
    (en el laboratorio la mayoría de los 1024 estados nunca se visitan).
    """
    n_actions = q_table.shape[1]
    labels = list(action_labels) if action_labels else [f"a{j}" for j in range(n_actions)]

    table = Table(title=title)
    table.add_column("Estado", justify="right", style="cyan")
    for label in labels:
        table.add_column(label, justify="right")

    for i, row in enumerate(q_table):
        if only_visited and not np.any(row):
            continue
        table.add_row(str(i), *(f"{value:6.2f}" for value in row))
    return table
