# qlab/__init__.py
import logging

from gymnasium.envs.registration import register

__version__ = "0.1.0"

register(
    id="qlab/Lab-v1",
    entry_point="qlab.envs.lab_v1.env:LabEnv",
    max_episode_steps=200,
    kwargs={'sunshine': 2}  # Argumentos por defecto
)

logging.getLogger(__name__).addHandler(logging.NullHandler())
