"""Kinematic robot model with link collision geometry and joint groups."""

import logging
from itertools import combinations
from pathlib import Path

import numpy as np
import pinocchio as pin

from .geometry import LinkGeometry

logger = logging.getLogger(__name__)


class RobotModel:
    """Pinocchio model annotated with collision geometry and joint groups.

    Each link is identified by a Pinocchio frame of the same name. Joint
    groups map a group name to an ordered list of single-dof joints; a
    trajectory for the group has one row per joint in that order.

    Usage:
        model = pin.buildModelFromUrdf(path)
        robot = RobotModel(model, links, {"arm": ["joint1", "joint2"]})
    """

    def __init__(
        self,
        model: pin.Model,
        links: list[LinkGeometry],
        groups: dict[str, list[str]],
        name: str | None = None,
    ):
        """Initialize robot model.

        Args:
            model: Pinocchio kinematic model.
            links: Collision geometry per link.
            groups: Joint group name -> ordered joint names.
            name: Robot name. Defaults to the Pinocchio model name.

        Raises:
            ValueError: Unknown link frame or joint, or a multi-dof joint
                in a group.
        """
        self.model = model
        self.name = name or model.name
        self.links = {link.name: link for link in links}

        self._link_frame_ids: dict[str, int] = {}
        self._link_joint_ids: dict[str, int] = {}
        for link in links:
            if not model.existFrame(link.name):
                raise ValueError(f"link '{link.name}' has no frame in model")
            fid = model.getFrameId(link.name)
            self._link_frame_ids[link.name] = fid
            self._link_joint_ids[link.name] = int(model.frames[fid].parentJoint)

        self._group_joints: dict[str, list[str]] = {}
        self._group_indices: dict[str, np.ndarray] = {}
        for group_name, joint_names in groups.items():
            indices = []
            for joint_name in joint_names:
                indices.append(self.joint_position_index(joint_name))
            self._group_joints[group_name] = list(joint_names)
            self._group_indices[group_name] = np.array(indices, dtype=int)

    @classmethod
    def from_urdf(
        cls,
        urdf_path: str | Path,
        link_shapes: dict[str, list[dict]],
        groups: dict[str, list[str]],
    ) -> "RobotModel":
        """Build from a URDF file plus primitive descriptions per link.

        Args:
            urdf_path: Path to the URDF file (kinematics only is used).
            link_shapes: Link name -> list of primitive mappings, e.g.
                ``{"type": "capsule", "a": [...], "b": [...], "radius": r}``.
            groups: Joint group name -> ordered joint names.
        """
        model = pin.buildModelFromUrdf(str(urdf_path))
        links = [LinkGeometry.from_dict(name, shapes)
                 for name, shapes in link_shapes.items()]
        logger.info(
            "Loaded robot '%s' from %s (%d joints, %d collision links)",
            model.name, urdf_path, model.njoints - 1, len(links),
        )
        return cls(model, links, groups)

    @property
    def link_names(self) -> list[str]:
        return list(self.links)

    @property
    def joint_names(self) -> list[str]:
        """Names of all joints except the universe joint."""
        return list(self.model.names)[1:]

    def has_group(self, group_name: str) -> bool:
        return group_name in self._group_joints

    def group_joint_names(self, group_name: str) -> list[str]:
        return list(self._group_joints[group_name])

    def group_position_indices(self, group_name: str) -> np.ndarray:
        """Indices into the configuration vector for the group's joints."""
        return self._group_indices[group_name]

    def joint_position_index(self, joint_name: str) -> int:
        """Configuration-vector index of a single-dof joint.

        Raises:
            ValueError: Unknown joint or joint with more than one dof.
        """
        if not self.model.existJointName(joint_name):
            raise ValueError(f"unknown joint '{joint_name}'")
        jid = self.model.getJointId(joint_name)
        if self.model.nqs[jid] != 1:
            raise ValueError(
                f"joint '{joint_name}' has {self.model.nqs[jid]} position "
                "variables, only single-dof joints are supported"
            )
        return int(self.model.idx_qs[jid])

    def link_frame_id(self, link_name: str) -> int:
        return self._link_frame_ids[link_name]

    def adjacent_link_pairs(self) -> list[tuple[str, str]]:
        """Link pairs rigidly attached or connected by a single joint."""
        parents = self.model.parents
        pairs = []
        for a, b in combinations(self.links, 2):
            ja = self._link_joint_ids[a]
            jb = self._link_joint_ids[b]
            if ja == jb or parents[jb] == ja or parents[ja] == jb:
                pairs.append((a, b))
        return pairs

    def neutral_configuration(self) -> np.ndarray:
        return pin.neutral(self.model)
