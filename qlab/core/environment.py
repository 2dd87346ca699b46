# qlab/core/environment.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class ActionMetadata:
    """Lo que el mundo exterior necesita para ejecutar una acción."""

    tag: str
    payload_tags: tuple[str, ...] = field(default_factory=tuple)
    payload: tuple[Any, ...] = field(default_factory=tuple)
    # Eje del estado que modifica la acción (solo se usa para el reward shaping)
    affected_axis: Optional[int] = None


@runtime_checkable
class LearningEnvironment(Protocol):
    """
    Contrato que el motor de aprendizaje exige al entorno.

    El Trainer y la interfaz de consulta solo hablan con este protocolo; no
    saben nada de cómo se descubren las acciones ni de cómo se ejecutan.
    """

    def state_count(self) -> int: ...

    def action_count(self) -> int: ...

    def current_state(self) -> int: ...

    def current_state_vector(self) -> tuple[int, ...]: ...

    def applicable_actions(self, state: int) -> Sequence[int]: ...

    def perform_action(self, action: int) -> None: ...

    def action_metadata(self, action: int) -> ActionMetadata: ...

    @property
    def state_space(self) -> Sequence[tuple[int, ...]]: ...

    def reset_episode(self) -> None:
        """Devuelve el entorno a su estado inicial conocido."""
        ...
