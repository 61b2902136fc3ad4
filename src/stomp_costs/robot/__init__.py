"""Robot kinematics and collision geometry."""

from .geometry import Capsule, LinkGeometry, Sphere, primitive_from_dict
from .robot_model import RobotModel
from .robot_state import RobotState

__all__ = [
    "Capsule",
    "LinkGeometry",
    "RobotModel",
    "RobotState",
    "Sphere",
    "primitive_from_dict",
]
