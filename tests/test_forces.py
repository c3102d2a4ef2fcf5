"""Tests for the per-particle force rules."""

import math

import numpy as np
import pytest

import forces
import sampling
from constants import VELOCITY_DAMPING


def _norm(vector):
    return math.sqrt(sum(c * c for c in vector))


class TestRayRepulsion:
    """Distance to the ray and the resulting push."""

    def test_closest_point_and_distance(self):
        cx, cy, cz, distance = forces.closest_point_on_ray(
            3.0, 4.0, -2.0, 0.0, 0.0, 10.0, 0.0, 0.0, -1.0
        )
        assert (cx, cy, cz) == pytest.approx((0.0, 0.0, -2.0))
        assert distance == pytest.approx(5.0)

    def test_points_behind_origin_use_the_line(self):
        _, _, _, distance = forces.closest_point_on_ray(
            1.0, 0.0, 20.0, 0.0, 0.0, 10.0, 0.0, 0.0, -1.0
        )
        assert distance == pytest.approx(1.0)

    def test_closer_particles_are_pushed_harder(self):
        radius, strength = 3.0, 0.5
        d1, d2 = 0.5, 2.0
        s1 = forces.repulsion_strength(d1, radius, strength)
        s2 = forces.repulsion_strength(d2, radius, strength)
        assert s1 > s2 > 0.0
        assert s1 < strength

        near = forces.repulsion_impulse(d1, 0.0, 0.0, 0.0, 0.0, 0.0, s1, 0.0, 0.0, 0.0, 0.8)
        far = forces.repulsion_impulse(d2, 0.0, 0.0, 0.0, 0.0, 0.0, s2, 0.0, 0.0, 0.0, 0.8)
        assert _norm(near) > _norm(far)

    def test_push_points_away_from_ray(self):
        ix, iy, iz = forces.repulsion_impulse(0.0, -2.0, 1.0, 0.0, 0.0, 1.0, 0.3, 0.0, 0.0, 0.0, 0.8)
        assert ix == pytest.approx(0.0)
        assert iy == pytest.approx(-0.3)
        assert iz == pytest.approx(0.0)

    def test_pointer_speed_boosts_and_sweeps(self):
        ix, iy, iz = forces.repulsion_impulse(1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.2, 0.0, 0.1, 0.1, 0.8)
        # radial: 0.2 * (1 + 0.1 * 5); sweep: 0.1 * 0.8 * 10 * 0.2
        assert ix == pytest.approx(0.3)
        assert iy == pytest.approx(0.16)
        assert iz == pytest.approx(0.0)

    def test_slow_pointer_has_no_sweep(self):
        _, iy, _ = forces.repulsion_impulse(1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.2, 0.0, 0.0005, 0.0005, 0.8)
        assert iy == 0.0

    def test_particle_on_the_ray_gets_no_nan(self):
        impulse = forces.repulsion_impulse(0.0, 0.0, 2.0, 0.0, 0.0, 2.0, 0.5, 0.0, 0.0, 0.0, 0.8)
        assert all(math.isfinite(c) for c in impulse)
        assert impulse == (0.0, 0.0, 0.0)


class TestClampSpeed:
    """Context-sensitive speed ceiling."""

    def test_damping_then_clamp_away_from_ray(self):
        max_speed = 0.1
        vx, vy, vz = 10.0 * VELOCITY_DAMPING, 0.0, 0.0
        vx, vy, vz, speed_sq = forces.clamp_speed(vx, vy, vz, max_speed, False)
        assert speed_sq == pytest.approx(9.8 ** 2)
        assert _norm((vx, vy, vz)) == pytest.approx(max_speed * 0.6)
        assert vx > 0

    def test_near_ray_ceiling_is_looser(self):
        vx, vy, vz, _ = forces.clamp_speed(0.0, 3.0, -4.0, 0.1, True)
        assert _norm((vx, vy, vz)) == pytest.approx(0.15)
        assert vy / vz == pytest.approx(-0.75)

    def test_slow_velocity_untouched(self):
        assert forces.clamp_speed(0.01, 0.0, 0.0, 0.1, False)[:3] == (0.01, 0.0, 0.0)


class TestAmbientFlow:
    """Drift terms applied away from the ray."""

    def test_curl_field_matches_formula(self):
        x, y, z, t = 1.0, -2.0, 0.5, 3.0
        expected = (
            math.sin(y * 0.4 + t) * math.cos(z * 0.4 + t * 0.7) * 0.0003,
            math.sin(z * 0.4 + t * 0.5) * math.cos(x * 0.4 + t * 0.8) * 0.0003,
            math.sin(x * 0.4 + t * 0.6) * math.cos(y * 0.4 + t * 0.9) * 0.0003,
        )
        assert forces.curl_flow(x, y, z, t) == pytest.approx(expected)

    def test_center_push_points_outward_and_fades(self):
        inner = forces.center_push(1.0, 0.0, 0.0, 5.0, 0.001)
        outer = forces.center_push(4.0, 0.0, 0.0, 5.0, 0.001)
        assert inner[0] == pytest.approx(0.001 * 0.8)
        assert outer[0] == pytest.approx(0.001 * 0.2)
        assert forces.center_push(6.0, 0.0, 0.0, 5.0, 0.001) == (0.0, 0.0, 0.0)

    def test_center_push_at_origin_is_zero(self):
        assert forces.center_push(0.0, 0.0, 0.0, 5.0, 0.001) == (0.0, 0.0, 0.0)

    def test_ambient_flow_is_small_and_finite(self):
        sampling.seed(4)
        for point in [(0.0, 0.0, 0.0), (3.0, 1.0, -2.0), (9.0, 0.0, 0.0)]:
            delta = forces.ambient_flow(*point, 12.5, 10.0, 0.002)
            assert all(math.isfinite(c) for c in delta)
            assert _norm(delta) < 0.01


class TestBoundaryForce:
    """Soft containment near the sphere."""

    def test_no_force_well_inside(self):
        assert forces.boundary_force(5.0, 0.0, 0.0, 10.0) == (0.0, 0.0, 0.0)

    def test_quadratic_inward_force(self):
        bx, by, bz = forces.boundary_force(0.0, 9.0, 0.0, 10.0)
        assert by == pytest.approx(-0.01 * 0.25)
        assert bx == pytest.approx(0.0)
        assert bz == pytest.approx(0.0)

    def test_extra_jitter_near_edge_is_inward(self):
        sampling.seed(6)
        for _ in range(50):
            bx, _, _ = forces.boundary_force(9.8, 0.0, 0.0, 10.0)
            assert -0.01 * 0.81 - 0.01 <= bx <= -0.01 * 0.81

    def test_outside_boundary_pushes_back(self):
        bx, _, _ = forces.boundary_force(12.0, 0.0, 0.0, 10.0)
        assert bx < -0.01

    def test_origin_with_tiny_boundary_is_finite(self):
        delta = forces.boundary_force(0.0, 0.0, 0.0, 1.0)
        assert all(math.isfinite(c) for c in delta)


def test_safe_normalize_zero_vector():
    assert forces.safe_normalize(0.0, 0.0, 0.0) == (0.0, 0.0, 0.0, 0.0)
    nx, ny, nz, length = forces.safe_normalize(0.0, 3.0, 4.0)
    assert (nx, ny, nz, length) == pytest.approx((0.0, 0.6, 0.8, 5.0))
