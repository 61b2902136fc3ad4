"""Voxel signed-distance representation of a robot's links.

Every link's collision primitives are sampled once on a regular grid in
the link frame. A self-distance query poses the robot, moves the query
spheres of one link into the frame of another, and interpolates the other
link's grid. Construction cost grows with link volume / voxel_size^3,
which is why fields are memoized by ``DistanceFieldCache``.
"""

import logging
import threading
import time
from dataclasses import dataclass

import numpy as np
from scipy.ndimage import map_coordinates

from ..robot.geometry import LinkGeometry
from ..robot.robot_model import RobotModel
from ..robot.robot_state import RobotState
from .allowed_collision_matrix import AllowedCollisionMatrix

logger = logging.getLogger(__name__)


@dataclass
class DistanceRequest:
    """Options of a self-distance query.

    Attributes:
        acm: Allowed-collision matrix; allowed pairs are skipped. ``None``
            checks every pair of links.
    """

    acm: AllowedCollisionMatrix | None = None


@dataclass
class DistanceResult:
    """Outcome of a self-distance query.

    Attributes:
        min_distance: Smallest signed distance over checked pairs [m].
            Negative means interpenetration, ``inf`` means no pair was
            checked.
        link_names: The pair that produced ``min_distance``.
        num_pairs: Number of link pairs checked.
    """

    min_distance: float = float("inf")
    link_names: tuple[str, str] | None = None
    num_pairs: int = 0


class LinkDistanceField:
    """Truncated signed-distance grid of a single link in its own frame."""

    def __init__(
        self,
        link: LinkGeometry,
        voxel_size: float,
        exterior_limit: float,
        interior_limit: float,
    ):
        """Sample the link's signed distance on a voxel grid.

        The grid is centered on the link bounds with an odd voxel count per
        axis and extends ``exterior_limit`` beyond them. Values are clipped
        to ``[-interior_limit, exterior_limit]``.
        """
        self.name = link.name
        self.voxel_size = voxel_size
        self.exterior_limit = exterior_limit

        lo, hi = link.bounds()
        center = (lo + hi) / 2
        half = np.ceil(((hi - lo) / 2 + exterior_limit) / voxel_size).astype(int)
        self.shape = tuple(int(n) for n in 2 * half + 1)
        self.origin = center - half * voxel_size

        axes = [self.origin[k] + voxel_size * np.arange(self.shape[k])
                for k in range(3)]
        points = np.stack(np.meshgrid(*axes, indexing="ij"), axis=-1).reshape(-1, 3)
        sdf = link.signed_distance(points).reshape(self.shape)

        self.values = np.clip(sdf, -interior_limit, exterior_limit)
        self.values.setflags(write=False)

    @property
    def num_voxels(self) -> int:
        return int(np.prod(self.shape))

    def distance(self, points: np.ndarray) -> np.ndarray:
        """Trilinearly interpolated signed distance at link-frame points (N, 3).

        Points outside the grid read the truncation value.
        """
        coords = (np.asarray(points, dtype=np.float64) - self.origin) / self.voxel_size
        return map_coordinates(self.values, coords.T, order=1, mode="nearest")


class CollisionRobotDistanceField:
    """Self-distance queries over per-link distance fields.

    Immutable after construction; may be read by several evaluators at once
    as long as each brings its own ``RobotState``.
    """

    def __init__(
        self,
        robot_model: RobotModel,
        voxel_size: float,
        max_distance: float,
        exterior_bandwidth: float,
        interior_bandwidth: float,
    ):
        """Build distance fields for every link of ``robot_model``.

        Args:
            robot_model: Robot with collision geometry.
            voxel_size: Grid resolution [m].
            max_distance: Largest distance that must be resolved [m].
            exterior_bandwidth: Outside truncation band [voxels].
            interior_bandwidth: Inside truncation band [voxels].

        Raises:
            ValueError: Invalid resolution or link without geometry.
        """
        if not voxel_size > 0.0:
            raise ValueError(f"voxel_size must be positive, got {voxel_size}")
        if not robot_model.links:
            raise ValueError(f"robot '{robot_model.name}' has no collision links")

        self.robot_model = robot_model
        self.voxel_size = voxel_size
        self.max_distance = max_distance
        self.exterior_bandwidth = exterior_bandwidth
        self.interior_bandwidth = interior_bandwidth

        self._spheres = {name: link.query_spheres()
                         for name, link in robot_model.links.items()}
        max_radius = max((float(np.max(radii)) for _, radii in self._spheres.values()
                          if radii.size), default=0.0)

        # Query spheres are subtracted after lookup, so the band must reach
        # past the largest radius for distances up to max_distance to stay exact.
        exterior_limit = exterior_bandwidth * voxel_size + max_radius + voxel_size
        interior_limit = interior_bandwidth * voxel_size

        self._fields = {
            name: LinkDistanceField(link, voxel_size, exterior_limit, interior_limit)
            for name, link in robot_model.links.items()
        }

    @property
    def num_voxels(self) -> int:
        return sum(f.num_voxels for f in self._fields.values())

    def _directed_distance(
        self,
        field_link: str,
        query_link: str,
        poses: dict[str, tuple[np.ndarray, np.ndarray]],
    ) -> float:
        centers, radii = self._spheres[query_link]
        if radii.size == 0:
            return float("inf")
        R_f, t_f = poses[field_link]
        R_q, t_q = poses[query_link]
        world = centers @ R_q.T + t_q
        local = (world - t_f) @ R_f
        return float(np.min(self._fields[field_link].distance(local) - radii))

    def distance_self(
        self,
        request: DistanceRequest,
        state: RobotState,
    ) -> DistanceResult:
        """Minimum signed distance between non-allowed link pairs.

        Args:
            request: Query options (allowed-collision matrix).
            state: Posed robot state; must be up to date.

        Returns:
            DistanceResult with the smallest pair distance.
        """
        link_names = list(self._fields)
        if request.acm is None:
            pairs = AllowedCollisionMatrix().checked_pairs(link_names)
        else:
            pairs = request.acm.checked_pairs(link_names)

        result = DistanceResult(num_pairs=len(pairs))
        if not pairs:
            return result

        poses = {name: state.get_link_transform(name) for name in link_names}
        for a, b in pairs:
            dist = min(
                self._directed_distance(a, b, poses),
                self._directed_distance(b, a, poses),
            )
            if dist < result.min_distance:
                result.min_distance = dist
                result.link_names = (a, b)

        return result


class DistanceFieldCache:
    """Memoized distance field keyed by (robot model, voxel size, max distance).

    The field is rebuilt if and only if the key changes. ``build_count``
    counts constructions. Safe to share between evaluators.
    """

    def __init__(self, builder=CollisionRobotDistanceField):
        """Initialize an empty cache.

        Args:
            builder: Callable ``(robot_model, voxel_size, max_distance,
                exterior_bandwidth, interior_bandwidth)`` returning a field.
        """
        self._builder = builder
        self._lock = threading.Lock()
        self._robot_model: RobotModel | None = None
        self._key: tuple[float, float] | None = None
        self._field = None
        self.build_count = 0

    @property
    def field(self):
        return self._field

    def is_current(
        self, robot_model: RobotModel, voxel_size: float, max_distance: float,
    ) -> bool:
        return (self._field is not None
                and self._robot_model is robot_model
                and self._key == (voxel_size, max_distance))

    def get(self, robot_model: RobotModel, voxel_size: float, max_distance: float):
        """Return the field for the key, building it on first use or key change.

        A failed build leaves the previously cached field in place.
        """
        with self._lock:
            if self.is_current(robot_model, voxel_size, max_distance):
                return self._field

            # Same band inside and outside.
            bandwidth = max_distance / voxel_size
            logger.info(
                "Creating distance field for '%s' (voxel size %.4f m, "
                "max distance %.4f m, bandwidth %.1f voxels)",
                robot_model.name, voxel_size, max_distance, bandwidth,
            )
            t_start = time.time()
            field = self._builder(
                robot_model, voxel_size, max_distance, bandwidth, bandwidth,
            )
            logger.info(
                "Completed distance field after %.3f seconds",
                time.time() - t_start,
            )

            self._field = field
            self._robot_model = robot_model
            self._key = (voxel_size, max_distance)
            self.build_count += 1
            return field

    def clear(self) -> None:
        with self._lock:
            self._field = None
            self._robot_model = None
            self._key = None
