"""Collision primitives attached to robot links.

Each primitive is expressed in its link frame and provides:
- an exact signed distance (negative inside) used to fill distance fields,
- a sphere decomposition used as query points against other links.
"""

from dataclasses import dataclass, field

import numpy as np

EPS = 1e-12


def _point_segment_distance(
    points: np.ndarray, a: np.ndarray, b: np.ndarray,
) -> np.ndarray:
    """Distance from each point (N, 3) to the segment a-b."""
    d = b - a
    denom = float(np.dot(d, d))
    if denom <= EPS:
        return np.linalg.norm(points - a, axis=1)
    s = np.clip((points - a) @ d / denom, 0.0, 1.0)
    closest = a + s[:, None] * d
    return np.linalg.norm(points - closest, axis=1)


@dataclass
class Sphere:
    """Sphere primitive.

    Attributes:
        radius: Sphere radius [m].
        center: Center in the link frame (3,) [m].
    """

    radius: float
    center: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.center = np.asarray(self.center, dtype=np.float64).reshape(3)
        if not self.radius > 0.0:
            raise ValueError(f"sphere radius must be positive, got {self.radius}")

    def signed_distance(self, points: np.ndarray) -> np.ndarray:
        return np.linalg.norm(points - self.center, axis=1) - self.radius

    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        return self.center - self.radius, self.center + self.radius

    def query_spheres(self) -> tuple[np.ndarray, np.ndarray]:
        return self.center[None, :].copy(), np.array([self.radius])


@dataclass
class Capsule:
    """Capsule primitive: line segment a-b swept by a sphere.

    Attributes:
        a: First segment end in the link frame (3,) [m].
        b: Second segment end in the link frame (3,) [m].
        radius: Capsule radius [m].
    """

    a: np.ndarray
    b: np.ndarray
    radius: float

    def __post_init__(self):
        self.a = np.asarray(self.a, dtype=np.float64).reshape(3)
        self.b = np.asarray(self.b, dtype=np.float64).reshape(3)
        if not self.radius > 0.0:
            raise ValueError(f"capsule radius must be positive, got {self.radius}")

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.b - self.a))

    def signed_distance(self, points: np.ndarray) -> np.ndarray:
        return _point_segment_distance(points, self.a, self.b) - self.radius

    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        lo = np.minimum(self.a, self.b) - self.radius
        hi = np.maximum(self.a, self.b) + self.radius
        return lo, hi

    def query_spheres(self) -> tuple[np.ndarray, np.ndarray]:
        """Spheres of the capsule radius spaced at most one radius apart."""
        n = max(2, int(np.ceil(self.length / self.radius)) + 1)
        s = np.linspace(0.0, 1.0, n)
        centers = self.a + s[:, None] * (self.b - self.a)
        return centers, np.full(n, self.radius)


PRIMITIVE_TYPES = {
    "sphere": Sphere,
    "capsule": Capsule,
}


def primitive_from_dict(data: dict):
    """Build a primitive from a mapping such as ``{"type": "sphere", ...}``.

    Raises:
        ValueError: Unknown primitive type or invalid dimensions.
    """
    kwargs = dict(data)
    kind = kwargs.pop("type", None)
    if kind not in PRIMITIVE_TYPES:
        raise ValueError(
            f"unknown primitive type {kind!r}, expected one of "
            f"{sorted(PRIMITIVE_TYPES)}"
        )
    return PRIMITIVE_TYPES[kind](**kwargs)


@dataclass
class LinkGeometry:
    """Collision geometry of one link.

    Attributes:
        name: Link name; must match a frame of the kinematic model.
        shapes: Primitives expressed in the link frame.
    """

    name: str
    shapes: list = field(default_factory=list)

    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounds of all shapes in the link frame."""
        if not self.shapes:
            raise ValueError(f"link '{self.name}' has no collision shapes")
        los, his = zip(*(shape.bounds() for shape in self.shapes))
        return np.min(los, axis=0), np.max(his, axis=0)

    def signed_distance(self, points: np.ndarray) -> np.ndarray:
        """Signed distance to the union of shapes, (N, 3) -> (N,)."""
        if not self.shapes:
            raise ValueError(f"link '{self.name}' has no collision shapes")
        return np.min(
            [shape.signed_distance(points) for shape in self.shapes], axis=0,
        )

    def query_spheres(self) -> tuple[np.ndarray, np.ndarray]:
        """Concatenated query spheres of all shapes: centers (M, 3), radii (M,)."""
        if not self.shapes:
            return np.zeros((0, 3)), np.zeros(0)
        centers, radii = zip(*(shape.query_spheres() for shape in self.shapes))
        return np.vstack(centers), np.concatenate(radii)

    @classmethod
    def from_dict(cls, name: str, shapes: list[dict]) -> "LinkGeometry":
        return cls(name=name, shapes=[primitive_from_dict(s) for s in shapes])
