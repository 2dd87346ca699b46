# qlab/core/__init__.py
from qlab.core.errors import (
    InvalidGoal,
    InvalidHyperparameter,
    NoApplicableActions,
    NotTrained,
    QLabError,
    TrainingTimeout,
    UnknownState,
    UntrainedGoal,
)
from qlab.core.goals import Goal, goal_key, goal_reached
from qlab.core.environment import ActionMetadata, LearningEnvironment
from qlab.core.q_table import QTableStore, new_table
from qlab.core.reward import RewardModel, action_reward
from qlab.core.policy import best_action, epsilon_greedy, make_rng, max_q
from qlab.core.trainer import Hyperparameters, Trainer, TrainerConfig, TrainingStats
from qlab.core.query import ResolvedAction, index_state_space, resolve_action
from qlab.core.learner import QLearner

__all__ = [
    "ActionMetadata",
    "Goal",
    "Hyperparameters",
    "InvalidGoal",
    "InvalidHyperparameter",
    "LearningEnvironment",
    "NoApplicableActions",
    "NotTrained",
    "QLabError",
    "QLearner",
    "QTableStore",
    "ResolvedAction",
    "RewardModel",
    "Trainer",
    "TrainerConfig",
    "TrainingStats",
    "TrainingTimeout",
    "UnknownState",
    "UntrainedGoal",
    "action_reward",
    "best_action",
    "epsilon_greedy",
    "goal_key",
    "goal_reached",
    "index_state_space",
    "make_rng",
    "max_q",
    "new_table",
    "resolve_action",
]
