"""Mutable posed robot state backed by Pinocchio forward kinematics."""

import numpy as np
import pinocchio as pin

from .robot_model import RobotModel


class RobotState:
    """Joint configuration plus cached link transforms.

    Setting positions marks the transforms stale; ``update()`` recomputes
    forward kinematics. Reading a link transform from a stale state raises,
    so a distance query can never run against the previous pose.

    Each state owns its own Pinocchio ``Data`` and must not be shared
    between concurrent evaluations.
    """

    def __init__(self, robot_model: RobotModel):
        self.robot_model = robot_model
        self._data = robot_model.model.createData()
        self._q = np.array(robot_model.neutral_configuration(), dtype=np.float64)
        self._dirty = True

    @property
    def positions(self) -> np.ndarray:
        """Full configuration vector (copy)."""
        return self._q.copy()

    @property
    def dirty(self) -> bool:
        return self._dirty

    def set_positions(self, q: np.ndarray) -> None:
        q = np.asarray(q, dtype=np.float64).ravel()
        if q.shape != self._q.shape:
            raise ValueError(
                f"expected {self._q.size} positions, got {q.size}"
            )
        self._q[:] = q
        self._dirty = True

    def set_variable_positions(self, positions: dict[str, float]) -> None:
        """Set individual joints by name.

        Raises:
            ValueError: Unknown joint or non-finite value.
        """
        for joint_name, value in positions.items():
            idx = self.robot_model.joint_position_index(joint_name)
            try:
                value = float(value)
            except TypeError:
                raise ValueError(
                    f"joint '{joint_name}' position is not a number: {value!r}"
                ) from None
            if not np.isfinite(value):
                raise ValueError(f"joint '{joint_name}' position is {value}")
            self._q[idx] = value
        self._dirty = True

    def set_joint_group_positions(self, group_name: str, values: np.ndarray) -> None:
        indices = self.robot_model.group_position_indices(group_name)
        values = np.asarray(values, dtype=np.float64).ravel()
        if values.size != indices.size:
            raise ValueError(
                f"group '{group_name}' has {indices.size} joints, "
                f"got {values.size} values"
            )
        self._q[indices] = values
        self._dirty = True

    def get_joint_group_positions(self, group_name: str) -> np.ndarray:
        return self._q[self.robot_model.group_position_indices(group_name)].copy()

    def update(self) -> None:
        """Recompute joint and frame placements for the current positions."""
        pin.framesForwardKinematics(self.robot_model.model, self._data, self._q)
        self._dirty = False

    def get_link_transform(self, link_name: str) -> tuple[np.ndarray, np.ndarray]:
        """World pose of a link.

        Returns:
            Tuple of (rotation (3, 3), translation (3,)).

        Raises:
            RuntimeError: Positions changed since the last ``update()``.
        """
        if self._dirty:
            raise RuntimeError(
                "robot state transforms are stale, call update() first"
            )
        oMf = self._data.oMf[self.robot_model.link_frame_id(link_name)]
        return oMf.rotation.copy(), oMf.translation.copy()

    def copy(self) -> "RobotState":
        other = RobotState(self.robot_model)
        other.set_positions(self._q)
        return other
