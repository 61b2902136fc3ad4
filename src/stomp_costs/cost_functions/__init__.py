"""Trajectory cost functions for the STOMP optimizer."""

from .base import CostFunction
from .obstacle_distance_gradient import ObstacleDistanceGradient, distance_to_cost
from .registry import (
    COST_FUNCTIONS,
    aggregate_costs,
    create_cost_function,
    get_cost_function_class,
)

__all__ = [
    "COST_FUNCTIONS",
    "CostFunction",
    "ObstacleDistanceGradient",
    "aggregate_costs",
    "create_cost_function",
    "distance_to_cost",
    "get_cost_function_class",
]
