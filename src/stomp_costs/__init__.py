"""Obstacle-distance trajectory costs for STOMP-style optimizers.

Provides:
- Validated cost-function configuration
- Memoized voxel distance fields of the robot's links
- The ObstacleDistanceGradient cost function and a tag registry
"""

from .config import CostFunctionConfig, StompConfiguration, load_parameters
from .cost_functions import (
    CostFunction,
    ObstacleDistanceGradient,
    aggregate_costs,
    create_cost_function,
    distance_to_cost,
)
from .errors import (
    BindError,
    ConfigurationError,
    ErrorCode,
    EvaluationPreconditionError,
    InvalidParameterError,
    MissingParameterError,
)
from .planning_scene import MotionPlanRequest, PlanningScene, RobotStateMsg

__all__ = [
    "BindError",
    "ConfigurationError",
    "CostFunction",
    "CostFunctionConfig",
    "ErrorCode",
    "EvaluationPreconditionError",
    "InvalidParameterError",
    "MissingParameterError",
    "MotionPlanRequest",
    "ObstacleDistanceGradient",
    "PlanningScene",
    "RobotStateMsg",
    "StompConfiguration",
    "aggregate_costs",
    "create_cost_function",
    "distance_to_cost",
    "load_parameters",
]
