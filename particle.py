# particle.py
"""
Manages the state of all particles in the swarm.

This module defines the ParticleSystem class, which is responsible for
initializing and storing particle data (position, velocity, colour, size)
in flat, index-aligned NumPy arrays that the renderer can upload directly.
"""
import logging
from typing import Optional, Tuple

import numpy as np
from numba import jit

import sampling
from settings import SimulationConfig
from themes import evaluate

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, config: SimulationConfig, seed: Optional[int] = None):
#     - Inputs:
#       - config: The shared simulation config.
#       - seed: Master seed for every random draw. None leaves the
#         generator unseeded.
#     - Side Effects: Allocates and fills the particle arrays.
#     - Invariants:
#       - positions, velocities, colors, base_colors: float32 (N, 3).
#       - sizes, color_values: float32 (N,).
#       - color_values never change after initialize().
#
#   - initialize(self, count: Optional[int] = None) -> None:
#     - Side Effects: Reallocates all arrays and refreshes colours.
#
#   - refresh_colors(self, theme: Optional[str] = None, brightness: Optional[float] = None) -> None:
#     - Side Effects: Recomputes base_colors and resets colors to them.
#
#   - buffers(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
#     - Outputs: flat views of positions (3N), colors (3N) and sizes (N).


@jit(nopython=True)
def _fill_particles_numba(velocities, color_values, sizes, particle_size):
    """Numba-jitted initial motion, colour scalar and size of every particle."""
    for i in range(velocities.shape[0]):
        speed = 0.001 + sampling.uniform_scalar() * 0.003
        dx, dy, dz = sampling.uniform_in_direction()
        velocities[i, 0] = dx * speed
        velocities[i, 1] = dy * speed
        velocities[i, 2] = dz * speed

        color_values[i] = sampling.uniform_scalar()
        sizes[i] = particle_size * (0.6 + sampling.uniform_scalar() * 0.8)


class ParticleSystem:
    """
    A container for all particles, managing their state via NumPy arrays.
    """
    def __init__(self, config: SimulationConfig, seed: Optional[int] = None):
        """
        Initializes the particle system.

        Args:
            config (SimulationConfig): Shared simulation tunables.
            seed (Optional[int]): Master seed for all randomness.
        """
        self.config = config
        self.seed = seed
        if seed is not None:
            sampling.seed(seed)
            logging.debug(f"Particle RNG seeded with {seed}.")

        self.particle_count = 0
        self.needs_update = False
        self.initialize()

    def initialize(self, count: Optional[int] = None) -> None:
        """
        (Re)allocates every array and seeds fresh particle state.

        Args:
            count (Optional[int]): Number of particles. Defaults to
                config.particle_count.
        """
        if count is None:
            count = self.config.particle_count
        if count < 1:
            raise ValueError(f"Particle count must be positive, got {count}.")

        self.particle_count = count
        self.positions = np.zeros((count, 3), dtype=np.float32)
        self.velocities = np.zeros((count, 3), dtype=np.float32)
        self.colors = np.zeros((count, 3), dtype=np.float32)
        self.base_colors = np.zeros((count, 3), dtype=np.float32)
        self.sizes = np.zeros(count, dtype=np.float32)
        self.color_values = np.zeros(count, dtype=np.float32)

        spawn_radius = self.config.boundary_radius * 0.9
        self.positions[:] = sampling.sample_in_sphere(count, spawn_radius)
        _fill_particles_numba(
            self.velocities, self.color_values, self.sizes, self.config.particle_size
        )
        self.refresh_colors()

        logging.info(
            f"ParticleSystem initialized with {count} particles "
            f"inside radius {spawn_radius:.2f}."
        )
        logging.debug(
            f"Particle data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Colors shape: {self.colors.shape}, "
            f"Sizes shape: {self.sizes.shape}"
        )

    def refresh_colors(self, theme: Optional[str] = None, brightness: Optional[float] = None) -> None:
        """
        Re-derives base colours from the colour scalars.

        Called on initialization and whenever the theme or brightness
        changes. The display colours are reset to the new base colours.
        """
        theme = theme if theme is not None else self.config.color_theme
        brightness = brightness if brightness is not None else self.config.brightness

        self.base_colors[:] = evaluate(theme, self.color_values, brightness)
        self.colors[:] = self.base_colors
        self.needs_update = True
        logging.debug(f"Particle colours refreshed (theme '{theme}', brightness {brightness}).")

    def buffers(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Returns flat views of the render buffers (positions, colors, sizes)."""
        return self.positions.reshape(-1), self.colors.reshape(-1), self.sizes
