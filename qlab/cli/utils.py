# qlab/cli/utils.py
import importlib
import logging

import gymnasium as gym
from rich.console import Console
from rich.logging import RichHandler

console = Console()

_CONFIG_KEYS = ("DESCRIPTION", "BASELINE", "UNIT", "ALGORITHM", "DEFAULT_GOAL")


def setup_logging(verbose: bool = False) -> None:
    """Envía los logs de qlab a la consola de rich."""
    logger = logging.getLogger("qlab")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=console, show_path=False))


def _read_config(config_module) -> dict:
    return {key: getattr(config_module, key, None) for key in _CONFIG_KEYS}


def get_env_config(env_id: str) -> dict:
    """
    Intenta cargar el módulo de configuración (config.py) para un entorno específico.
    """
    try:
        # Obtenemos la especificación del entorno registrado
        spec = gym.spec(env_id)
        entry_point = spec.entry_point  # e.g., "qlab.envs.lab_v1.env:LabEnv"

        # Derivamos el path de configuración (e.g. "qlab.envs.lab_v1.config")
        module_path = entry_point.split(':')[0]
        path_parts = module_path.split('.')
        if len(path_parts) <= 1:
            return {}
        config_module_path = ".".join(path_parts[:-1] + ["config"])

        return _read_config(importlib.import_module(config_module_path))

    except (ImportError, AttributeError, gym.error.Error):
        # Fallback: derivar por ID del entorno con -/_ (e.g. "Lab-v1" -> lab_v1)
        pkg_us = env_id.split('/')[-1].replace('-', '_').lower()
        try:
            return _read_config(importlib.import_module(f"qlab.envs.{pkg_us}.config"))
        except ImportError:
            return {}


def env_package(env_id: str) -> str:
    """'qlab/Lab-v1' -> 'lab_v1'"""
    return env_id.split('/')[-1].replace('-', '_').lower()


def parse_int_list(raw: str) -> list[int]:
    """'2,2,1,0' o '2 2 1 0' -> [2, 2, 1, 0]; también acepta true/false."""
    values = []
    for token in raw.replace(',', ' ').split():
        lowered = token.lower()
        if lowered in ("true", "false"):
            values.append(int(lowered == "true"))
        else:
            values.append(int(token))
    return values
