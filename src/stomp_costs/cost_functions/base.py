"""Interface shared by all trajectory cost functions."""

from abc import ABC, abstractmethod
from typing import Any, Mapping

import numpy as np

from ..config import StompConfiguration
from ..errors import ErrorCode
from ..planning_scene import MotionPlanRequest, PlanningScene
from ..robot.robot_model import RobotModel


class CostFunction(ABC):
    """Per-waypoint trajectory cost used by the STOMP optimizer.

    Lifecycle, driven by the optimizer:
        1. ``initialize`` / ``configure`` once per process (or on reconfigure).
        2. ``set_motion_plan_request`` once per planning attempt.
        3. ``compute_costs`` once per iteration and rollout.
        4. ``done`` once when the attempt ends.

    Failures are reported through return values, never raised. The
    exception behind the latest failure is kept in ``last_error``.
    """

    def __init__(self):
        self.last_error: Exception | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def weight(self) -> float:
        """Weight the optimizer applies when aggregating raw costs."""
        pass

    @abstractmethod
    def initialize(
        self,
        robot_model: RobotModel,
        group_name: str,
        config: Mapping[str, Any],
    ) -> bool:
        pass

    @abstractmethod
    def configure(self, config: Mapping[str, Any]) -> bool:
        pass

    @abstractmethod
    def set_motion_plan_request(
        self,
        planning_scene: PlanningScene,
        request: MotionPlanRequest,
        config: StompConfiguration,
    ) -> tuple[bool, ErrorCode]:
        pass

    @abstractmethod
    def compute_costs(
        self,
        parameters: np.ndarray,
        start_timestep: int,
        num_timesteps: int,
        iteration_number: int,
        rollout_number: int,
    ) -> tuple[bool, np.ndarray | None, bool]:
        """Score consecutive waypoints of a trajectory batch.

        Args:
            parameters: Joint trajectory (num_joints, num_timesteps).
            start_timestep: First column to score.
            num_timesteps: Number of columns to score.
            iteration_number: Optimizer iteration, diagnostics only.
            rollout_number: Rollout index, diagnostics only.

        Returns:
            Tuple of (success, costs (num_timesteps,) or None, validity).
        """
        pass

    @abstractmethod
    def done(self, success: bool, total_iterations: int, final_cost: float) -> None:
        pass
