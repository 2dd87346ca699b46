# qlab/envs/lab_v1/config.py

DESCRIPTION = "Alcanza los niveles de luz deseados en dos zonas con lámparas y persianas."

UNIT = "ql"
ALGORITHM = "q_learning"

# Objetivo usado por 'qlab train' si no se pasa --goal
DEFAULT_GOAL = [2, 3]

# Configuración del agente de referencia para 'qlab train'
BASELINE = {
    "agent": "q_learning",  # Debe coincidir con el nombre del módulo en qlab/agents/lab_v1/
    "config": {
        "episodes": 10,
        "alpha": 0.1,
        "gamma": 0.5,
        "epsilon": 0.2,
        "reward": 100.0,
        # Salvaguardas del bucle de entrenamiento
        "max_steps": 1000,
        "timeout": None,
    }
}
