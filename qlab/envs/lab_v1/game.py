# qlab/envs/lab_v1/game.py
from __future__ import annotations

import itertools
import math

from qlab.core.environment import ActionMetadata

LEVELS = 4          # Niveles de luz y de sol: 0..3
AXIS_NAMES = ("Z1Level", "Z2Level", "Z1Light", "Z2Light",
              "Z1Blinds", "Z2Blinds", "Sunshine")

_PREFIX = "http://example.org/was#"

# (tag, payload_tags, payload, eje afectado, valor que deja en el eje)
_ACTIONS: tuple[tuple[str, tuple[str, ...], tuple, int, int], ...] = (
    (_PREFIX + "SetZ1Light", ("Z1Light",), (True,), 2, 1),
    (_PREFIX + "SetZ1Light", ("Z1Light",), (False,), 2, 0),
    (_PREFIX + "SetZ2Light", ("Z2Light",), (True,), 3, 1),
    (_PREFIX + "SetZ2Light", ("Z2Light",), (False,), 3, 0),
    (_PREFIX + "SetZ1Blinds", ("Z1Blinds",), (True,), 4, 1),
    (_PREFIX + "SetZ1Blinds", ("Z1Blinds",), (False,), 4, 0),
    (_PREFIX + "SetZ2Blinds", ("Z2Blinds",), (True,), 5, 1),
    (_PREFIX + "SetZ2Blinds", ("Z2Blinds",), (False,), 5, 0),
)


def zone_level(light: int, blinds: int, sunshine: int) -> int:
    """Una lámpara aporta 2 niveles; la persiana subida deja pasar ceil(sol/2)."""
    return min(LEVELS - 1, 2 * light + blinds * math.ceil(sunshine / 2))


class LabGame:
    """
    Lógica del laboratorio simulado: dos zonas, cada una con una lámpara y una
    persiana, y un nivel de sol exterior que no controla el agente.

    Vector de estado: [z1_level, z2_level, z1_light, z2_light, z1_blinds, z2_blinds, sunshine]
    """

    def __init__(self, sunshine: int = 2) -> None:
        if not 0 <= sunshine < LEVELS:
            raise ValueError(f"sunshine debe estar en [0, {LEVELS}) (recibido {sunshine})")
        self.start_sunshine = int(sunshine)

        # Espacio de estados canónico: producto cartesiano en el orden de los ejes
        self.state_space: tuple[tuple[int, ...], ...] = tuple(itertools.product(
            range(LEVELS), range(LEVELS), (0, 1), (0, 1), (0, 1), (0, 1), range(LEVELS)))
        self._index = {vector: i for i, vector in enumerate(self.state_space)}

        self.actions = tuple(
            ActionMetadata(tag, tags, payload, axis) for tag, tags, payload, axis, _ in _ACTIONS)
        self._targets = tuple(value for *_, value in _ACTIONS)

        # Estado del juego: luces, persianas, sol
        self.switches = [0, 0, 0, 0]
        self.sunshine = self.start_sunshine
        self.current_step = 0

    def reset(self, sunshine: int | None = None) -> None:
        self.switches = [0, 0, 0, 0]
        self.sunshine = self.start_sunshine if sunshine is None else int(sunshine)
        self.current_step = 0

    def set_state(self, vector) -> None:
        """Fuerza un estado (los niveles se recalculan a partir de interruptores y sol)."""
        values = [int(v) for v in vector]
        if len(values) != len(AXIS_NAMES):
            raise ValueError(f"Se esperaban {len(AXIS_NAMES)} ejes, recibidos {len(values)}")
        if any(v not in (0, 1) for v in values[2:6]) or not 0 <= values[6] < LEVELS:
            raise ValueError(f"Estado fuera de rango: {values}")
        self.switches = values[2:6]
        self.sunshine = values[6]

    def get_vector(self) -> tuple[int, ...]:
        z1_light, z2_light, z1_blinds, z2_blinds = self.switches
        return (
            zone_level(z1_light, z1_blinds, self.sunshine),
            zone_level(z2_light, z2_blinds, self.sunshine),
            z1_light, z2_light, z1_blinds, z2_blinds,
            self.sunshine,
        )

    def state_index(self, vector=None) -> int:
        return self._index[self.get_vector() if vector is None else tuple(vector)]

    def applicable_actions(self, state: int) -> list[int]:
        """Acciones que cambian algo: no se enciende una luz ya encendida."""
        vector = self.state_space[state]
        return [a for a, meta in enumerate(self.actions)
                if vector[meta.affected_axis] != self._targets[a]]

    def step(self, action: int) -> tuple[int, ...]:
        if not 0 <= action < len(self.actions):
            raise ValueError(f"Acción desconocida: {action}")
        axis = self.actions[action].affected_axis
        self.switches[axis - 2] = self._targets[action]
        self.current_step += 1
        return self.get_vector()
