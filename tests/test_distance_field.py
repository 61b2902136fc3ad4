"""Tests for per-link distance fields, self-distance queries and caching."""

import numpy as np
import pytest

from stomp_costs.collision import (
    AllowedCollisionMatrix,
    CollisionRobotDistanceField,
    DistanceFieldCache,
    DistanceRequest,
    LinkDistanceField,
)
from stomp_costs.models import GROUP_NAME, Q_FOLDED, Q_STRAIGHT
from stomp_costs.robot import LinkGeometry, RobotState, Sphere


def _posed_state(robot, q):
    state = RobotState(robot)
    state.set_joint_group_positions(GROUP_NAME, q)
    state.update()
    return state


def _parallel_fold(surface_distance, link_length=0.3, radius=0.03):
    """Configuration placing link3 parallel above link1 at a given gap."""
    a = np.arcsin((surface_distance + 2 * radius) / link_length)
    return np.array([0.0, a, np.pi - a])


def _build(robot, voxel_size=0.05, max_distance=0.1):
    bandwidth = max_distance / voxel_size
    return CollisionRobotDistanceField(
        robot, voxel_size, max_distance, bandwidth, bandwidth,
    )


# ============================================================
# TestLinkDistanceField
# ============================================================

class TestLinkDistanceField:
    """Tests for a single link's voxel grid."""

    @pytest.fixture
    def sphere_field(self):
        link = LinkGeometry("ball", [Sphere(radius=0.1)])
        return LinkDistanceField(link, voxel_size=0.01,
                                 exterior_limit=0.2, interior_limit=0.2)

    def test_grid_is_centered_with_odd_size(self, sphere_field):
        assert all(n % 2 == 1 for n in sphere_field.shape)
        center_index = np.array(sphere_field.shape) // 2
        np.testing.assert_allclose(
            sphere_field.origin + center_index * 0.01, 0.0, atol=1e-12,
        )

    def test_center_value(self, sphere_field):
        d = sphere_field.distance(np.zeros((1, 3)))
        assert d[0] == pytest.approx(-0.1, abs=1e-6)

    def test_interpolated_outside_value(self, sphere_field):
        """Off-grid points are interpolated to within a voxel."""
        points = np.array([[0.153, 0.0, 0.0], [0.0, -0.127, 0.041]])
        expected = np.linalg.norm(points, axis=1) - 0.1
        np.testing.assert_allclose(sphere_field.distance(points), expected, atol=0.01)

    def test_truncated_far_away(self, sphere_field):
        """Points beyond the band read the exterior limit."""
        d = sphere_field.distance(np.array([[5.0, 0.0, 0.0]]))
        assert d[0] == pytest.approx(0.2)

    def test_interior_clipped(self):
        link = LinkGeometry("ball", [Sphere(radius=0.1)])
        field = LinkDistanceField(link, voxel_size=0.01,
                                  exterior_limit=0.2, interior_limit=0.05)
        assert np.min(field.values) == pytest.approx(-0.05)

    def test_values_read_only(self, sphere_field):
        with pytest.raises(ValueError):
            sphere_field.values[0, 0, 0] = 1.0


# ============================================================
# TestSelfDistance
# ============================================================

class TestSelfDistance:
    """Tests for CollisionRobotDistanceField.distance_self."""

    def test_straight_arm_beyond_max_distance(self, planar_arm, scene):
        field = _build(planar_arm)
        state = _posed_state(planar_arm, Q_STRAIGHT)
        result = field.distance_self(
            DistanceRequest(acm=scene.get_allowed_collision_matrix()), state,
        )
        assert result.num_pairs == 1
        assert result.link_names == ("link1", "link3")
        assert result.min_distance >= 0.1

    def test_folded_arm_in_collision(self, planar_arm, scene):
        field = _build(planar_arm)
        state = _posed_state(planar_arm, Q_FOLDED)
        result = field.distance_self(
            DistanceRequest(acm=scene.get_allowed_collision_matrix()), state,
        )
        assert result.min_distance < 0

    def test_measured_gap(self, planar_arm, scene):
        """A 5 cm gap between link1 and link3 is resolved to within a voxel."""
        field = _build(planar_arm, voxel_size=0.01, max_distance=0.1)
        state = _posed_state(planar_arm, _parallel_fold(0.05))
        result = field.distance_self(
            DistanceRequest(acm=scene.get_allowed_collision_matrix()), state,
        )
        assert result.min_distance == pytest.approx(0.05, abs=0.01)

    def test_allowed_pairs_are_excluded(self, planar_arm):
        """Allowing link1-link3 leaves no pair to check."""
        acm = AllowedCollisionMatrix.from_robot_model(planar_arm)
        acm.set_entry("link3", "link1", True)
        field = _build(planar_arm)
        state = _posed_state(planar_arm, Q_FOLDED)
        result = field.distance_self(DistanceRequest(acm=acm), state)
        assert result.num_pairs == 0
        assert result.min_distance == float("inf")
        assert result.link_names is None

    def test_without_acm_adjacent_links_touch(self, planar_arm):
        """Without a matrix, adjacent links overlap at their shared joint."""
        field = _build(planar_arm)
        state = _posed_state(planar_arm, Q_STRAIGHT)
        result = field.distance_self(DistanceRequest(), state)
        assert result.num_pairs == 3
        assert result.min_distance < 0

    def test_single_link_has_no_pairs(self, single_link_arm):
        field = _build(single_link_arm)
        state = RobotState(single_link_arm)
        state.update()
        acm = AllowedCollisionMatrix.from_robot_model(single_link_arm)
        result = field.distance_self(DistanceRequest(acm=acm), state)
        assert result.min_distance == float("inf")

    def test_stale_state_rejected(self, planar_arm, scene):
        field = _build(planar_arm)
        state = RobotState(planar_arm)
        state.set_joint_group_positions(GROUP_NAME, Q_FOLDED)
        with pytest.raises(RuntimeError):
            field.distance_self(
                DistanceRequest(acm=scene.get_allowed_collision_matrix()), state,
            )

    def test_finer_voxels_mean_more_voxels(self, planar_arm):
        coarse = _build(planar_arm, voxel_size=0.05)
        fine = _build(planar_arm, voxel_size=0.025)
        assert fine.num_voxels > coarse.num_voxels


# ============================================================
# TestDistanceFieldCache
# ============================================================

class TestDistanceFieldCache:
    """Tests for memoized field construction."""

    def test_identical_key_not_rebuilt(self, planar_arm):
        cache = DistanceFieldCache()
        f1 = cache.get(planar_arm, 0.05, 0.1)
        f2 = cache.get(planar_arm, 0.05, 0.1)
        assert f1 is f2
        assert cache.build_count == 1

    @pytest.mark.parametrize("voxel_size, max_distance", [(0.025, 0.1), (0.05, 0.2)])
    def test_changed_key_rebuilds(self, planar_arm, voxel_size, max_distance):
        cache = DistanceFieldCache()
        f1 = cache.get(planar_arm, 0.05, 0.1)
        f2 = cache.get(planar_arm, voxel_size, max_distance)
        assert f1 is not f2
        assert cache.build_count == 2
        assert f2.voxel_size == voxel_size

    def test_other_robot_rebuilds(self, planar_arm, single_link_arm):
        cache = DistanceFieldCache()
        cache.get(planar_arm, 0.05, 0.1)
        cache.get(single_link_arm, 0.05, 0.1)
        assert cache.build_count == 2

    def test_same_bandwidth_inside_and_outside(self, planar_arm):
        """Builder receives max_distance / voxel_size for both bands."""
        calls = []

        def builder(robot_model, voxel_size, max_distance, ex_bw, in_bw):
            calls.append((ex_bw, in_bw))
            return object()

        DistanceFieldCache(builder).get(planar_arm, 0.05, 0.1)
        assert calls[0][0] == pytest.approx(2.0)
        assert calls[0][0] == calls[0][1]

    def test_failed_build_keeps_previous_field(self, planar_arm):
        cache = DistanceFieldCache()
        field = cache.get(planar_arm, 0.05, 0.1)
        with pytest.raises(ValueError):
            cache.get(planar_arm, -0.05, 0.1)
        assert cache.field is field
        assert cache.is_current(planar_arm, 0.05, 0.1)
        assert cache.build_count == 1

    def test_clear(self, planar_arm):
        cache = DistanceFieldCache()
        cache.get(planar_arm, 0.05, 0.1)
        cache.clear()
        assert cache.field is None
        cache.get(planar_arm, 0.05, 0.1)
        assert cache.build_count == 2


class TestAllowedCollisionMatrix:
    """Tests for pair exemptions."""

    def test_symmetric_entries(self):
        acm = AllowedCollisionMatrix()
        acm.set_entry("a", "b", True)
        assert acm.is_allowed("b", "a")
        acm.set_entry("b", "a", False)
        assert not acm.is_allowed("a", "b")

    def test_default_entry(self):
        acm = AllowedCollisionMatrix()
        acm.set_default_entry("sensor", True)
        assert acm.is_allowed("sensor", "anything")
        assert acm.checked_pairs(["a", "b", "sensor"]) == [("a", "b")]

    def test_copy_is_independent(self, planar_arm):
        acm = AllowedCollisionMatrix.from_robot_model(planar_arm)
        other = acm.copy()
        other.set_entry("link1", "link3", True)
        assert not acm.is_allowed("link1", "link3")
        assert len(other) == len(acm) + 1
