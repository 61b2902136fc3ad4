"""Planning scene and motion-plan request passed to cost functions at bind time."""

from dataclasses import dataclass, field

import numpy as np

from .collision.allowed_collision_matrix import AllowedCollisionMatrix
from .robot.robot_model import RobotModel
from .robot.robot_state import RobotState


@dataclass
class RobotStateMsg:
    """Joint positions by name, as carried in a plan request.

    Attributes:
        name: Joint names.
        position: Joint positions, same order as ``name``.
    """

    name: list[str] = field(default_factory=list)
    position: list[float] = field(default_factory=list)

    @classmethod
    def from_positions(cls, joint_names: list[str], positions) -> "RobotStateMsg":
        return cls(name=list(joint_names),
                   position=[float(p) for p in np.asarray(positions).ravel()])


@dataclass
class MotionPlanRequest:
    """A single planning attempt's request.

    Attributes:
        group_name: Joint group to plan for. Empty uses the cost
            function's default group.
        start_state: Start configuration.
    """

    group_name: str = ""
    start_state: RobotStateMsg = field(default_factory=RobotStateMsg)


class PlanningScene:
    """Robot model, current state and allowed-collision matrix.

    Cost functions borrow the matrix for one planning attempt only.
    """

    def __init__(
        self,
        robot_model: RobotModel,
        acm: AllowedCollisionMatrix | None = None,
    ):
        self.robot_model = robot_model
        self._acm = acm if acm is not None else AllowedCollisionMatrix.from_robot_model(robot_model)
        self._current_state = RobotState(robot_model)

    def get_allowed_collision_matrix(self) -> AllowedCollisionMatrix:
        return self._acm

    def get_current_state(self) -> RobotState:
        """Copy of the scene's current state."""
        return self._current_state.copy()

    def set_current_state(self, positions: dict[str, float]) -> None:
        self._current_state.set_variable_positions(positions)


def robot_state_from_msg(
    msg: RobotStateMsg,
    state: RobotState,
    required_joints: list[str] = (),
) -> None:
    """Apply a joint-state message onto ``state``.

    Joints not named in the message keep their current value in ``state``.

    Args:
        msg: Joint names and positions.
        state: State to update in place.
        required_joints: Joints that must be present in the message.

    Raises:
        ValueError: Length mismatch, unknown joint, non-finite value or
            missing required joint.
    """
    if len(msg.name) != len(msg.position):
        raise ValueError(
            f"start state has {len(msg.name)} names but "
            f"{len(msg.position)} positions"
        )
    missing = [j for j in required_joints if j not in msg.name]
    if missing:
        raise ValueError(f"start state is missing joints {missing}")

    state.set_variable_positions(dict(zip(msg.name, msg.position)))
