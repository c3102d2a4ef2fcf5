# simulation.py
"""
Handles the per-frame update of the particle swarm.

This module defines the Simulation class, which advances the particle
system by one tick: it casts the pointer ray, runs every particle through
the force rules in forces.py, integrates, and updates the transient
colours and sizes. It is also the single entry point through which the
control panel changes tunables between ticks.
"""
import logging
from typing import Any

import numpy as np
from numba import jit

import forces
from constants import SIZE_RELAXATION, STALL_JITTER, STALL_SPEED_SQ, VELOCITY_DAMPING
from interaction import PerspectiveCamera, PointerState, InteractionRay, compute_interaction_ray
from particle import ParticleSystem
from settings import RECOLORING_FIELDS, REINITIALIZING_FIELDS, SimulationConfig
from themes import get_theme

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, particles: ParticleSystem, config: SimulationConfig, camera: PerspectiveCamera):
#     - Side Effects: Stores references; the config is shared with the
#       particle system and the control panel.
#
#   - step(self, pointer: PointerState, elapsed: float) -> InteractionRay:
#     - Inputs:
#       - pointer: Current pointer state (read-only).
#       - elapsed: Seconds since start, drives the curl flow field.
#     - Outputs: The interaction ray used for this tick.
#     - Side Effects: Mutates positions, velocities, colors and sizes in
#       place and sets particles.needs_update.
#     - Invariants: Particle count is unchanged; no value becomes NaN/inf;
#       color_values and base_colors are untouched.
#
#   - update_parameter(self, name: str, value: Any) -> Any:
#     - Side Effects: Clamps and stores the value; refreshes colours or
#       reinitializes the particles when the field requires it.
#
#   - reset(self) -> None:
#     - Side Effects: Reinitializes the particles with the current config.


@jit(nopython=True)
def _step_numba(
    positions, velocities, colors, base_colors, sizes,
    ray_origin, ray_direction,
    pointer_vx, pointer_vy, pointer_speed, elapsed,
    repulsion_strength, repulsion_radius, mouse_influence,
    max_speed, random_movement, particle_size, boundary_radius
):
    """
    Numba-jitted tick over every particle.

    The steps below run in a fixed order for each particle. The ambient
    flow and the boundary force use the position read at the top of the
    tick, not the freshly integrated one.
    """
    ox, oy, oz = ray_origin[0], ray_origin[1], ray_origin[2]
    dx, dy, dz = ray_direction[0], ray_direction[1], ray_direction[2]
    near_radius = repulsion_radius * 1.5

    for i in range(positions.shape[0]):
        x = float(positions[i, 0])
        y = float(positions[i, 1])
        z = float(positions[i, 2])
        vx = float(velocities[i, 0])
        vy = float(velocities[i, 1])
        vz = float(velocities[i, 2])

        # 1. Display colour starts from the base colour every tick.
        colors[i, 0] = base_colors[i, 0]
        colors[i, 1] = base_colors[i, 1]
        colors[i, 2] = base_colors[i, 2]

        # 2. Ray repulsion
        cx, cy, cz, distance_to_ray = forces.closest_point_on_ray(x, y, z, ox, oy, oz, dx, dy, dz)
        in_repulsion = distance_to_ray < repulsion_radius
        if in_repulsion:
            strength = forces.repulsion_strength(distance_to_ray, repulsion_radius, repulsion_strength)
            ix, iy, iz = forces.repulsion_impulse(
                x, y, z, cx, cy, cz, strength,
                pointer_vx, pointer_vy, pointer_speed, mouse_influence
            )
            vx += ix
            vy += iy
            vz += iz

            glow = 1.0 + strength * 2.0
            colors[i, 0] = min(1.0, base_colors[i, 0] * glow)
            colors[i, 1] = min(1.0, base_colors[i, 1] * glow)
            colors[i, 2] = min(1.0, base_colors[i, 2] * glow)
            sizes[i] = particle_size * (1.0 + strength * 0.5)
        else:
            sizes[i] += (particle_size - sizes[i]) * SIZE_RELAXATION

        # 3. Integrate
        positions[i, 0] = x + vx
        positions[i, 1] = y + vy
        positions[i, 2] = z + vz

        # 4. Fixed damping
        vx *= VELOCITY_DAMPING
        vy *= VELOCITY_DAMPING
        vz *= VELOCITY_DAMPING

        # 5. Speed clamp, looser near the ray
        vx, vy, vz, speed_sq = forces.clamp_speed(
            vx, vy, vz, max_speed, distance_to_ray < near_radius
        )

        # 6. Keep slow particles from freezing
        if speed_sq < STALL_SPEED_SQ:
            vx += (np.random.random() - 0.5) * STALL_JITTER
            vy += (np.random.random() - 0.5) * STALL_JITTER
            vz += (np.random.random() - 0.5) * STALL_JITTER

        # 7. Ambient flow away from the ray
        if not in_repulsion:
            ax, ay, az = forces.ambient_flow(x, y, z, elapsed, boundary_radius, random_movement)
            vx += ax
            vy += ay
            vz += az

        # 8. Boundary containment
        bx, by, bz = forces.boundary_force(x, y, z, boundary_radius)
        velocities[i, 0] = vx + bx
        velocities[i, 1] = vy + by
        velocities[i, 2] = vz + bz


class Simulation:
    """
    Advances the particle swarm one tick per rendered frame.
    """
    def __init__(self, particles: ParticleSystem, config: SimulationConfig, camera: PerspectiveCamera):
        """
        Initializes the simulation.

        Args:
            particles (ParticleSystem): The particle store to mutate.
            config (SimulationConfig): Shared tunables.
            camera (PerspectiveCamera): Camera used to cast the pointer ray.
        """
        self.particles = particles
        self.config = config
        self.camera = camera
        self.tick_count = 0
        logging.info("Simulation logic initialized.")

    def step(self, pointer: PointerState, elapsed: float) -> InteractionRay:
        """
        Executes one tick of the simulation.
        """
        ray = compute_interaction_ray(pointer.ndc, self.camera)
        c = self.config
        p = self.particles

        _step_numba(
            p.positions, p.velocities, p.colors, p.base_colors, p.sizes,
            ray.origin, ray.direction,
            pointer.velocity_x, pointer.velocity_y, pointer.speed, elapsed,
            c.repulsion_strength, c.repulsion_radius, c.mouse_influence,
            c.max_speed, c.random_movement, c.particle_size, c.boundary_radius
        )
        p.needs_update = True
        self.tick_count += 1
        return ray

    def update_parameter(self, name: str, value: Any) -> Any:
        """
        Applies a control-panel change between ticks.

        Returns:
            Any: The value actually stored after clamping.
        """
        old_value = getattr(self.config, name, None)
        new_value = self.config.set_value(name, value)
        if new_value == old_value:
            return new_value

        logging.info(f"Parameter '{name}' updated. Old: {old_value}, New: {new_value}")

        if name == "color_theme":
            bloom = get_theme(new_value).bloom
            self.config.bloom_strength = bloom.strength
            self.config.bloom_radius = bloom.radius
            self.config.bloom_threshold = bloom.threshold
        if name in RECOLORING_FIELDS:
            self.particles.refresh_colors()
        elif name in REINITIALIZING_FIELDS:
            self.reset()
        return new_value

    def reset(self) -> None:
        """Reinitializes every particle with the current configuration."""
        self.particles.initialize()
        logging.info("Particles reset by user.")
