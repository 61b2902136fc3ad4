"""Allowed-collision bookkeeping and robot self-distance fields."""

from .allowed_collision_matrix import AllowedCollisionMatrix
from .distance_field import (
    CollisionRobotDistanceField,
    DistanceFieldCache,
    DistanceRequest,
    DistanceResult,
    LinkDistanceField,
)

__all__ = [
    "AllowedCollisionMatrix",
    "CollisionRobotDistanceField",
    "DistanceFieldCache",
    "DistanceRequest",
    "DistanceResult",
    "LinkDistanceField",
]
