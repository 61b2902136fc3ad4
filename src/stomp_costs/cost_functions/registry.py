"""Cost-function lookup by tag and optimizer-side aggregation."""

import logging
from typing import Any, Mapping, Sequence

import numpy as np

from ..collision.distance_field import DistanceFieldCache
from ..errors import ConfigurationError
from ..robot.robot_model import RobotModel
from .base import CostFunction
from .obstacle_distance_gradient import ObstacleDistanceGradient

logger = logging.getLogger(__name__)

COST_FUNCTIONS: dict[str, type[CostFunction]] = {
    "ObstacleDistanceGradient": ObstacleDistanceGradient,
}


def get_cost_function_class(tag: str) -> type[CostFunction]:
    """Resolve a tag such as ``stomp_moveit/ObstacleDistanceGradient``.

    Raises:
        ConfigurationError: Unknown tag.
    """
    name = str(tag).rsplit("/", 1)[-1]
    if name not in COST_FUNCTIONS:
        raise ConfigurationError(
            f"unknown cost function '{tag}', available: {sorted(COST_FUNCTIONS)}",
            key="class",
        )
    return COST_FUNCTIONS[name]


def create_cost_function(
    entry: Mapping[str, Any],
    robot_model: RobotModel,
    group_name: str,
    field_cache: DistanceFieldCache | None = None,
) -> CostFunction:
    """Instantiate and initialize a cost function from a config entry.

    Args:
        entry: Mapping with a ``class`` tag plus the function's parameters.
        robot_model: Robot the optimizer plans for.
        group_name: Default joint group.
        field_cache: Shared distance field cache, if any.

    Raises:
        ConfigurationError: Missing or unknown tag, or initialization failure.
    """
    if "class" not in entry:
        raise ConfigurationError("cost function entry has no 'class' tag", key="class")

    cls = get_cost_function_class(entry["class"])
    cost_function = cls(field_cache=field_cache)
    if not cost_function.initialize(robot_model, group_name, entry):
        raise cost_function.last_error or ConfigurationError(
            f"failed to initialize '{entry['class']}'"
        )
    return cost_function


def aggregate_costs(
    cost_functions: Sequence[CostFunction],
    parameters: np.ndarray,
    start_timestep: int,
    num_timesteps: int,
    iteration_number: int,
    rollout_number: int,
) -> tuple[bool, np.ndarray | None, bool]:
    """Weighted sum of per-waypoint costs over several cost functions.

    Returns:
        Tuple of (success, summed costs or None, validity). Fails if any
        member fails; validity is the conjunction of member validities.
    """
    if start_timestep < 0 or num_timesteps < 0:
        logger.error(
            "invalid range: start %d, count %d", start_timestep, num_timesteps,
        )
        return False, None, False

    total = np.zeros(num_timesteps)
    all_valid = True
    for cost_function in cost_functions:
        ok, costs, valid = cost_function.compute_costs(
            parameters, start_timestep, num_timesteps,
            iteration_number, rollout_number,
        )
        if not ok:
            logger.error(
                "%s failed to compute costs (iteration %d, rollout %d)",
                cost_function.name, iteration_number, rollout_number,
            )
            return False, None, False
        total += cost_function.weight * costs
        all_valid = all_valid and valid

    return True, total, all_valid
