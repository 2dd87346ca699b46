# qlab/core/errors.py
"""Errores del motor de aprendizaje.

Todos derivan de `QLabError` para que la CLI pueda capturarlos de una vez,
pero también de la excepción estándar más cercana (ValueError, LookupError,
RuntimeError) para que el código cliente pueda tratarlos de forma natural.
"""


class QLabError(Exception):
    """Base de todos los errores de qlab."""


class InvalidHyperparameter(QLabError, ValueError):
    """Alpha, gamma o epsilon fuera de [0, 1], o número de episodios no positivo."""


class InvalidGoal(QLabError, ValueError):
    """Descripción de objetivo vacía, no entera o fuera del rango soportado."""


class UntrainedGoal(QLabError, LookupError):
    """Se consultó un objetivo para el que todavía no existe Q-Table."""


# Nombre alternativo usado por la interfaz de consulta
NotTrained = UntrainedGoal


class UnknownState(QLabError, LookupError):
    """El vector de estado no pertenece al espacio de estados canónico."""


class NoApplicableActions(QLabError, RuntimeError):
    """La política se invocó sobre un estado sin acciones aplicables."""


class TrainingTimeout(QLabError, TimeoutError):
    """El entrenamiento superó el tiempo máximo configurado."""
