"""Planar serial arm model used by examples and tests.

Every joint rotates about z and every link is a capsule along its local
x axis, so the arm stays in the xy plane and self-collision happens only
when the chain folds back onto itself.
"""

import numpy as np
import pinocchio as pin

from ..robot.geometry import Capsule, LinkGeometry
from ..robot.robot_model import RobotModel

GROUP_NAME = "arm"

LINK_LENGTH = 0.3   # [m]
LINK_RADIUS = 0.03  # [m]

# Fully stretched along x: non-adjacent links are one link length apart.
Q_STRAIGHT = np.array([0.0, 0.0, 0.0])

# Third link folds back across the first one.
Q_FOLDED = np.array([0.0, 2.8, 2.8])


def build_planar_arm(
    num_links: int = 3,
    link_length: float = LINK_LENGTH,
    link_radius: float = LINK_RADIUS,
    name: str = "planar_arm",
) -> RobotModel:
    """Build a planar revolute arm.

    Joint ``joint{i}`` sits at the tip of ``link{i-1}`` and carries
    ``link{i}``. All joints form the ``arm`` group.

    Args:
        num_links: Number of links (and joints).
        link_length: Length of each link [m].
        link_radius: Capsule radius of each link [m].
        name: Robot name.
    """
    if num_links < 1:
        raise ValueError(f"num_links must be >= 1, got {num_links}")

    model = pin.Model()
    model.name = name

    links = []
    joint_names = []
    parent = 0
    parent_frame = 0  # universe
    for i in range(1, num_links + 1):
        offset = np.array([link_length if i > 1 else 0.0, 0.0, 0.0])
        joint_name = f"joint{i}"
        jid = model.addJoint(
            parent, pin.JointModelRZ(), pin.SE3(np.eye(3), offset), joint_name,
        )
        model.appendBodyToJoint(
            jid,
            pin.Inertia.FromCylinder(1.0, link_radius, link_length),
            pin.SE3(np.eye(3), np.array([link_length / 2, 0.0, 0.0])),
        )
        link_name = f"link{i}"
        joint_frame = model.addJointFrame(jid, parent_frame)
        parent_frame = model.addBodyFrame(link_name, jid, pin.SE3.Identity(), joint_frame)

        links.append(LinkGeometry(link_name, [
            Capsule(a=np.zeros(3), b=np.array([link_length, 0.0, 0.0]),
                    radius=link_radius),
        ]))
        joint_names.append(joint_name)
        parent = jid

    return RobotModel(model, links, {GROUP_NAME: joint_names}, name=name)
