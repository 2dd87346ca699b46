# qlab/core/reward.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from qlab.core.environment import ActionMetadata

# Penalizaciones de shaping del laboratorio (por acción, se aplican siempre)
LIGHT_SWITCH_PENALTY = -50.0   # Encender/apagar luces
BLINDS_MOVE_PENALTY = -1.0     # Subir/bajar persianas

# Ejes del vector de estado del laboratorio:
# 0, 1 nivel de luz por zona; 2, 3 luces; 4, 5 persianas; 6 sol
Z1_LIGHT_AXIS, Z2_LIGHT_AXIS = 2, 3
Z1_BLINDS_AXIS, Z2_BLINDS_AXIS = 4, 5

LAB_AXIS_PENALTIES: Mapping[int, float] = MappingProxyType({
    Z1_LIGHT_AXIS: LIGHT_SWITCH_PENALTY,
    Z2_LIGHT_AXIS: LIGHT_SWITCH_PENALTY,
    Z1_BLINDS_AXIS: BLINDS_MOVE_PENALTY,
    Z2_BLINDS_AXIS: BLINDS_MOVE_PENALTY,
})


@dataclass(frozen=True)
class RewardModel:
    """
    Recompensa inmediata de una acción.

    reward = (terminal_reward si se alcanzó el objetivo, si no 0)
             + penalización del eje que toca la acción (0 si el eje no figura)
    """

    axis_penalties: Mapping[int, float] = field(
        default_factory=lambda: LAB_AXIS_PENALTIES)

    def penalty(self, action: ActionMetadata) -> float:
        if action.affected_axis is None:
            return 0.0
        return float(self.axis_penalties.get(action.affected_axis, 0.0))

    def reward(self, action: ActionMetadata, goal_reached: bool, terminal_reward: float) -> float:
        base = float(terminal_reward) if goal_reached else 0.0
        return base + self.penalty(action)


NO_SHAPING = RewardModel(axis_penalties=MappingProxyType({}))

_LAB_REWARD = RewardModel()


def action_reward(action: ActionMetadata, goal_reached: bool, terminal_reward: float) -> float:
    """Recompensa con las penalizaciones por defecto del laboratorio."""
    return _LAB_REWARD.reward(action, goal_reached, terminal_reward)
