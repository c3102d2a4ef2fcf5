"""Tests for the particle store."""

import numpy as np
import pytest

import sampling
from particle import ParticleSystem
from settings import SimulationConfig
from themes import evaluate


class TestInitialize:
    """Array layout and initial state."""

    def test_arrays_are_index_aligned(self, particles):
        n = particles.particle_count
        assert n == 1000
        for name in ("positions", "velocities", "colors", "base_colors"):
            array = getattr(particles, name)
            assert array.shape == (n, 3), name
            assert array.dtype == np.float32, name
        assert particles.sizes.shape == (n,)
        assert particles.color_values.shape == (n,)

    def test_positions_fill_ninety_percent_of_boundary(self, particles):
        radii = np.linalg.norm(particles.positions, axis=1)
        assert radii.max() <= 9.0 + 1e-4
        assert radii.min() > 0.0

    def test_initial_velocity_speeds(self, particles):
        speeds = np.linalg.norm(particles.velocities, axis=1)
        assert speeds.min() >= 0.001 - 1e-6
        assert speeds.max() <= 0.004 + 1e-6

    def test_sizes_jitter_around_particle_size(self, particles, small_config):
        size = small_config.particle_size
        assert particles.sizes.min() >= size * 0.6 - 1e-7
        assert particles.sizes.max() <= size * 1.4 + 1e-7

    def test_colors_start_at_base_colors(self, particles, small_config):
        expected = evaluate(small_config.color_theme, particles.color_values, small_config.brightness)
        np.testing.assert_allclose(particles.base_colors, expected, rtol=1e-6)
        np.testing.assert_array_equal(particles.colors, particles.base_colors)

    def test_initialize_reallocates_to_new_count(self, particles):
        particles.initialize(250)
        assert particles.particle_count == 250
        assert particles.positions.shape == (250, 3)
        assert particles.sizes.shape == (250,)

    def test_rejects_empty_store(self, particles):
        with pytest.raises(ValueError):
            particles.initialize(0)

    def test_same_seed_same_swarm(self, small_config):
        first = ParticleSystem(small_config, seed=77)
        second = ParticleSystem(small_config, seed=77)
        np.testing.assert_array_equal(first.positions, second.positions)
        np.testing.assert_array_equal(first.color_values, second.color_values)

    def test_positions_come_from_sphere_sampler(self, small_config):
        particles = ParticleSystem(small_config, seed=77)
        sampling.seed(77)
        expected = sampling.sample_in_sphere(small_config.particle_count, small_config.boundary_radius * 0.9)
        np.testing.assert_array_equal(particles.positions, expected.astype(np.float32))


def test_reset_shape_with_boundary_radius_ten():
    config = SimulationConfig(particle_count=1000, boundary_radius=10)
    particles = ParticleSystem(config, seed=8)
    radii = np.linalg.norm(particles.positions.astype(np.float64), axis=1)
    assert np.all(radii <= 9.0 + 1e-4)
    assert np.all(radii > 0.0)


def test_refresh_colors_keeps_color_values(particles):
    before = particles.color_values.copy()
    particles.refresh_colors("monochrome", 0.5)
    np.testing.assert_array_equal(particles.color_values, before)
    np.testing.assert_allclose(
        particles.base_colors[:, 0], (0.3 + 0.7 * before) * 0.5, rtol=1e-5
    )
    np.testing.assert_array_equal(particles.colors, particles.base_colors)


def test_buffers_are_flat_views(particles):
    particles.needs_update = False
    positions, colors, sizes = particles.buffers()
    n = particles.particle_count
    assert positions.shape == (3 * n,)
    assert colors.shape == (3 * n,)
    assert sizes.shape == (n,)
    positions[0] = 42.0
    assert particles.positions[0, 0] == 42.0
