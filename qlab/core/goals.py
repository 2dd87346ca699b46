# qlab/core/goals.py
from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Iterable, Sequence

from qlab.core.errors import InvalidGoal

# Niveles de luz del laboratorio: 0..3
GOAL_RADIX = 4


@dataclass(frozen=True)
class Goal:
    """
    Valores objetivo para los primeros ejes del estado.

    En el laboratorio, `Goal((2, 3))` significa: nivel de luz 2 en la Zona 1 y
    nivel 3 en la Zona 2.
    """

    levels: tuple[int, ...]

    def __post_init__(self):
        if not self.levels:
            raise InvalidGoal("La descripción del objetivo no puede estar vacía.")
        for level in self.levels:
            # bool es subclase de int, pero [True, False] no es un objetivo válido
            if isinstance(level, bool) or not isinstance(level, numbers.Integral):
                raise InvalidGoal(
                    f"Nivel de objetivo no entero: {level!r} en {self.levels!r}")
        # Las observaciones de Gymnasium llegan como np.int64
        object.__setattr__(self, "levels", tuple(int(level) for level in self.levels))

    @classmethod
    def of(cls, description: "Goal | Iterable[int]") -> "Goal":
        """Acepta un Goal, una lista o una tupla (e.g. [2, 3])."""
        if isinstance(description, Goal):
            return description
        try:
            return cls(tuple(description))
        except TypeError as e:
            raise InvalidGoal(
                f"Descripción de objetivo no iterable: {description!r}") from e

    def __len__(self) -> int:
        return len(self.levels)

    def __str__(self) -> str:
        return "[" + ", ".join(str(v) for v in self.levels) + "]"


def goal_key(goal: "Goal | Iterable[int]", radix: int = GOAL_RADIX) -> int:
    """
    Clave entera inyectiva para un objetivo.

    Rango válido: cada nivel en [0, radix). La clave es el número en base
    `radix` cuyos dígitos son los niveles, precedidos de un dígito centinela 1:

        goal_key([2, 3]) == 1*4**2 + 2*4 + 3 == 27

    El centinela evita colisiones entre tuplas de distinta longitud
    ([0, 1] frente a [1]).
    """
    goal = Goal.of(goal)
    if radix < 2:
        raise InvalidGoal(f"La base debe ser >= 2 (recibido {radix}).")

    key = 1
    for level in goal.levels:
        if not 0 <= level < radix:
            raise InvalidGoal(
                f"Nivel {level} fuera de rango [0, {radix}) en el objetivo {goal}")
        key = key * radix + level
    return key


def goal_reached(goal: Goal, state_vector: Sequence[int]) -> bool:
    """¿Coinciden los primeros len(goal) ejes del estado con el objetivo?"""
    if len(state_vector) < len(goal.levels):
        return False
    return tuple(int(v) for v in state_vector[:len(goal.levels)]) == goal.levels
