"""Self-collision proximity cost based on a voxel distance field.

Each waypoint is posed on a private robot state, the minimum distance
between non-allowed link pairs is read from the distance field, and the
distance is mapped to a cost in [0, 1]:

    d >= max_distance      -> 0       (no influence)
    d < 0                  -> 1       (in collision)
    otherwise              -> (max_distance - d) / max_distance

The configured weight is not applied here; the optimizer reads ``weight``
when aggregating cost functions.
"""

import logging
from typing import Any, Mapping

import numpy as np

from ..collision.distance_field import DistanceFieldCache, DistanceRequest
from ..config import CostFunctionConfig, StompConfiguration
from ..errors import (
    BindError,
    ConfigurationError,
    ErrorCode,
    EvaluationPreconditionError,
)
from ..planning_scene import MotionPlanRequest, PlanningScene, robot_state_from_msg
from ..robot.robot_model import RobotModel
from .base import CostFunction

logger = logging.getLogger(__name__)


def distance_to_cost(distance: float, max_distance: float) -> float:
    """Map a signed distance to a cost in [0, 1].

    Continuous at ``max_distance``; jumps to 1 below zero, since penetration
    depth is not a reliable measure in a truncated field.
    """
    if distance >= max_distance:
        return 0.0
    if distance < 0.0:
        return 1.0
    return (max_distance - distance) / max_distance


class ObstacleDistanceGradient(CostFunction):
    """Cost that grows as the robot approaches self-collision.

    The distance field is acquired through a ``DistanceFieldCache`` and is
    only rebuilt when the robot model, voxel size or max distance change.
    Pass the same cache to several instances to evaluate rollouts in
    parallel on a single field.

    Usage:
        cost = ObstacleDistanceGradient()
        cost.initialize(robot_model, "arm", {"cost_weight": 1.0,
                                             "voxel_size": 0.05,
                                             "max_distance": 0.1})
        ok, code = cost.set_motion_plan_request(scene, request, stomp_config)
        ok, costs, valid = cost.compute_costs(parameters, 0, n, 0, 0)
        cost.done(True, n_iterations, final_cost)
    """

    def __init__(self, field_cache: DistanceFieldCache | None = None):
        super().__init__()
        self._field_cache = field_cache if field_cache is not None else DistanceFieldCache()

        # Process lifetime
        self._robot_model: RobotModel | None = None
        self._group_name: str | None = None
        self._config: CostFunctionConfig | None = None
        self._distance_field = None

        # Attempt lifetime
        self._planning_scene: PlanningScene | None = None
        self._bound_group: str | None = None
        self._distance_request: DistanceRequest | None = None
        self._robot_state = None

    @property
    def name(self) -> str:
        return "ObstacleDistanceGradient"

    @property
    def weight(self) -> float:
        if self._config is None:
            raise RuntimeError(f"{self.name} is not configured")
        return self._config.cost_weight

    @property
    def config(self) -> CostFunctionConfig | None:
        return self._config

    @property
    def distance_field(self):
        return self._distance_field

    @property
    def field_cache(self) -> DistanceFieldCache:
        return self._field_cache

    @property
    def is_bound(self) -> bool:
        return self._robot_state is not None

    @property
    def group_name(self) -> str | None:
        return self._bound_group or self._group_name

    def initialize(
        self,
        robot_model: RobotModel,
        group_name: str,
        config: Mapping[str, Any],
    ) -> bool:
        """Attach the robot model and default group, then configure."""
        self._robot_model = robot_model
        self._group_name = group_name
        return self.configure(config)

    def configure(self, config: Mapping[str, Any]) -> bool:
        """Validate parameters and acquire the distance field.

        Nothing is committed unless both succeed.

        Returns:
            True on success. On failure ``last_error`` holds the
            ``ConfigurationError``.
        """
        try:
            if self._robot_model is None:
                raise ConfigurationError(
                    "no robot model, call initialize() before configure()"
                )
            parsed = CostFunctionConfig.from_dict(config)
            try:
                field = self._field_cache.get(
                    self._robot_model, parsed.voxel_size, parsed.max_distance,
                )
            except Exception as e:
                raise ConfigurationError(
                    f"distance field construction failed: {e}"
                ) from e
        except ConfigurationError as e:
            self.last_error = e
            logger.error("%s failed to configure: %s", self.name, e)
            return False

        self._config = parsed
        self._distance_field = field
        self.last_error = None
        return True

    def set_motion_plan_request(
        self,
        planning_scene: PlanningScene,
        request: MotionPlanRequest,
        config: StompConfiguration,
    ) -> tuple[bool, ErrorCode]:
        """Bind the planning context for one attempt.

        The scene's allowed-collision matrix is borrowed, not copied, and
        is released by ``done()`` or the next bind. Any previously bound
        context is dropped first, so a failed bind leaves the cost function
        unbound.

        Returns:
            Tuple of (success, error code).
        """
        self._release_attempt()
        try:
            if self._distance_field is None:
                raise BindError(f"{self.name} is not configured")
            if planning_scene is None:
                raise BindError("no planning scene given")
            if request is None or request.start_state is None:
                raise BindError("motion plan request has no start state")
            if planning_scene.robot_model is not self._robot_model:
                raise BindError(
                    f"planning scene robot '{planning_scene.robot_model.name}' "
                    f"differs from configured robot '{self._robot_model.name}'"
                )

            group = request.group_name or self._group_name
            if not self._robot_model.has_group(group):
                raise BindError(
                    f"unknown joint group '{group}'", ErrorCode.INVALID_GROUP_NAME,
                )
            joints = self._robot_model.group_joint_names(group)

            if config is not None and config.num_dimensions \
                    and config.num_dimensions != len(joints):
                raise BindError(
                    f"optimizer expects {config.num_dimensions} dimensions, "
                    f"group '{group}' has {len(joints)} joints"
                )

            state = planning_scene.get_current_state()
            try:
                robot_state_from_msg(request.start_state, state, joints)
            except ValueError as e:
                raise BindError(
                    f"failed to get start state from request: {e}",
                    ErrorCode.INVALID_ROBOT_STATE,
                ) from e
            state.update()
        except BindError as e:
            self.last_error = e
            logger.error("%s %s", self.name, e)
            return False, e.error_code

        self._planning_scene = planning_scene
        self._bound_group = group
        self._distance_request = DistanceRequest(
            acm=planning_scene.get_allowed_collision_matrix(),
        )
        self._robot_state = state
        self.last_error = None
        return True, ErrorCode.SUCCESS

    def _check_preconditions(
        self,
        parameters: np.ndarray,
        start_timestep: int,
        num_timesteps: int,
    ) -> None:
        if self._robot_state is None:
            raise EvaluationPreconditionError(
                "robot state has not been set, bind a motion plan request first"
            )
        if parameters.ndim != 2:
            raise EvaluationPreconditionError(
                f"parameters must be 2-D (joints x timesteps), got shape "
                f"{parameters.shape}"
            )
        if start_timestep < 0 or num_timesteps < 0:
            raise EvaluationPreconditionError(
                f"invalid range: start {start_timestep}, count {num_timesteps}"
            )

        needed = start_timestep + num_timesteps
        available = parameters.shape[1]
        if available < needed:
            raise EvaluationPreconditionError(
                f"size of 'parameters' is less than required: needs "
                f"{needed} timesteps, has {available}"
            )

        dof = len(self._robot_model.group_position_indices(self._bound_group))
        if parameters.shape[0] != dof:
            raise EvaluationPreconditionError(
                f"parameters have {parameters.shape[0]} rows, group "
                f"'{self._bound_group}' has {dof} joints"
            )

        if not np.all(np.isfinite(parameters[:, start_timestep:needed])):
            raise EvaluationPreconditionError(
                "parameters contain non-finite values in the requested range"
            )

    def compute_costs(
        self,
        parameters: np.ndarray,
        start_timestep: int,
        num_timesteps: int,
        iteration_number: int,
        rollout_number: int,
    ) -> tuple[bool, np.ndarray | None, bool]:
        """Score ``num_timesteps`` waypoints starting at ``start_timestep``.

        ``costs[i]`` belongs to column ``start_timestep + i``.
        """
        parameters = np.asarray(parameters, dtype=np.float64)
        try:
            self._check_preconditions(parameters, start_timestep, num_timesteps)
        except EvaluationPreconditionError as e:
            self.last_error = e
            logger.error("%s %s", self.name, e)
            return False, None, False

        max_distance = self._config.max_distance
        costs = np.zeros(num_timesteps)
        min_distance = float("inf")

        for i, t in enumerate(range(start_timestep, start_timestep + num_timesteps)):
            self._robot_state.set_joint_group_positions(self._bound_group, parameters[:, t])
            self._robot_state.update()

            result = self._distance_field.distance_self(
                self._distance_request, self._robot_state,
            )
            costs[i] = distance_to_cost(result.min_distance, max_distance)
            min_distance = min(min_distance, result.min_distance)

        logger.debug(
            "%s iteration %d rollout %d: %d waypoints, min distance %.4f m",
            self.name, iteration_number, rollout_number, num_timesteps,
            min_distance,
        )
        self.last_error = None
        return True, costs, True

    def done(self, success: bool, total_iterations: int, final_cost: float) -> None:
        """Release attempt-scoped state; configuration and field are kept."""
        logger.debug(
            "%s attempt finished (success=%s, iterations=%d, final cost=%.4f)",
            self.name, success, total_iterations, final_cost,
        )
        self._release_attempt()

    def _release_attempt(self) -> None:
        self._planning_scene = None
        self._bound_group = None
        self._distance_request = None
        self._robot_state = None
