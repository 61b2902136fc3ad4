"""Shared pytest fixtures."""

import numpy as np
import pytest

from stomp_costs import MotionPlanRequest, PlanningScene, RobotStateMsg, StompConfiguration
from stomp_costs.models import GROUP_NAME, Q_FOLDED, Q_STRAIGHT, build_planar_arm


@pytest.fixture
def params():
    """Cost-function parameters used throughout the tests."""
    return {"cost_weight": 1.0, "voxel_size": 0.05, "max_distance": 0.1}


@pytest.fixture
def planar_arm():
    """Three-link planar arm."""
    return build_planar_arm()


@pytest.fixture
def single_link_arm():
    """Single-link arm: no link pair to check."""
    return build_planar_arm(num_links=1, name="single_link_arm")


@pytest.fixture
def scene(planar_arm):
    """Planning scene with adjacent links allowed to touch."""
    return PlanningScene(planar_arm)


@pytest.fixture
def stomp_config():
    """Optimizer settings matching the planar arm group."""
    return StompConfiguration(num_timesteps=10, num_dimensions=3)


@pytest.fixture
def make_request():
    """Factory for plan requests of the arm group."""
    def _make(q=Q_STRAIGHT, joint_names=("joint1", "joint2", "joint3"),
              group_name=GROUP_NAME):
        return MotionPlanRequest(
            group_name=group_name,
            start_state=RobotStateMsg.from_positions(list(joint_names), q),
        )
    return _make


@pytest.fixture
def request_straight(make_request):
    """Plan request starting fully stretched."""
    return make_request(Q_STRAIGHT)


@pytest.fixture
def straight_trajectory() -> np.ndarray:
    """Rotating the stretched arm about joint1 keeps links apart (3, 8)."""
    q = np.tile(Q_STRAIGHT[:, None], (1, 8))
    q[0, :] = np.linspace(-np.pi / 2, np.pi / 2, 8)
    return q


@pytest.fixture
def folded_trajectory() -> np.ndarray:
    """Single waypoint in self-collision (3, 1)."""
    return Q_FOLDED[:, None].copy()
