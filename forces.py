# forces.py
"""
Per-particle force rules.

Each rule is a small Numba-jitted function over scalars so the tick in
simulation.py can call them for every particle without allocating. The
rules are applied in a fixed order by the tick; see Simulation.step.
"""
import numpy as np
from numba import jit

from constants import (
    AMBIENT_JITTER, CURL_SCALE, CURL_STRENGTH, EPSILON, OCCASIONAL_JITTER_CHANCE
)

# --- Data Contracts ---
#
# closest_point_on_ray(px, py, pz, ox, oy, oz, dx, dy, dz) -> (cx, cy, cz, distance):
#   - Inputs: particle position, ray origin and unit ray direction.
#   - Outputs: the closest point on the ray's line and the distance to it.
#
# repulsion_strength(distance, radius, strength) -> float:
#   - Outputs: strength * (1 - distance / radius); strictly decreasing in
#     distance for distance < radius.
#
# clamp_speed(vx, vy, vz, max_speed, near_ray) -> (vx, vy, vz, speed_sq):
#   - Outputs: velocity rescaled to the context-sensitive ceiling, and the
#     squared speed measured before rescaling.
#
# ambient_flow(x, y, z, t, boundary_radius, random_movement) -> (ax, ay, az):
#   - Outputs: velocity delta from jitter, centre repulsion and curl flow.
#
# boundary_force(x, y, z, boundary_radius) -> (bx, by, bz):
#   - Outputs: inward velocity delta near the containment sphere.


@jit(nopython=True)
def safe_normalize(x, y, z):
    """Normalizes a vector, returning the zero vector if it has no length."""
    length = np.sqrt(x * x + y * y + z * z)
    if length < EPSILON:
        return 0.0, 0.0, 0.0, length
    return x / length, y / length, z / length, length


@jit(nopython=True)
def closest_point_on_ray(px, py, pz, ox, oy, oz, dx, dy, dz):
    # Projection onto the full line, so points behind the camera also
    # measure their distance to it.
    t = (px - ox) * dx + (py - oy) * dy + (pz - oz) * dz
    cx = ox + dx * t
    cy = oy + dy * t
    cz = oz + dz * t
    ex = px - cx
    ey = py - cy
    ez = pz - cz
    return cx, cy, cz, np.sqrt(ex * ex + ey * ey + ez * ez)


@jit(nopython=True)
def repulsion_strength(distance, radius, strength):
    return strength * (1.0 - distance / radius)


@jit(nopython=True)
def repulsion_impulse(
    px, py, pz, cx, cy, cz, strength,
    pointer_vx, pointer_vy, pointer_speed, mouse_influence
):
    """
    Velocity delta pushing a particle away from the ray.

    A particle sitting exactly on the ray gets no radial push. Pointer
    motion adds a sweep term along the pointer's screen velocity.
    """
    nx, ny, nz, _ = safe_normalize(px - cx, py - cy, pz - cz)
    boost = strength * (1.0 + pointer_speed * 5.0)
    ix = nx * boost
    iy = ny * boost
    iz = nz * boost

    if pointer_speed > 0.001:
        sweep = mouse_influence * 10.0 * strength
        ix += pointer_vx * sweep
        iy += pointer_vy * sweep
        # Pointer velocity is screen-space, so the sweep has no z term.
    return ix, iy, iz


@jit(nopython=True)
def clamp_speed(vx, vy, vz, max_speed, near_ray):
    speed_sq = vx * vx + vy * vy + vz * vz
    if near_ray:
        ceiling = max_speed * 1.5
    else:
        ceiling = max_speed * 0.6
    if speed_sq > ceiling * ceiling:
        factor = ceiling / np.sqrt(speed_sq)
        return vx * factor, vy * factor, vz * factor, speed_sq
    return vx, vy, vz, speed_sq


@jit(nopython=True)
def curl_flow(x, y, z, t):
    """Sinusoidal pseudo-curl field, scaled to a velocity delta."""
    s = CURL_SCALE
    cx = np.sin(y * s + t) * np.cos(z * s + t * 0.7)
    cy = np.sin(z * s + t * 0.5) * np.cos(x * s + t * 0.8)
    cz = np.sin(x * s + t * 0.6) * np.cos(y * s + t * 0.9)
    return cx * CURL_STRENGTH, cy * CURL_STRENGTH, cz * CURL_STRENGTH


@jit(nopython=True)
def center_push(x, y, z, limit, peak):
    """Outward push within `limit` of the origin, fading to zero at `limit`."""
    nx, ny, nz, dist = safe_normalize(x, y, z)
    if dist >= limit:
        return 0.0, 0.0, 0.0
    push = peak * (1.0 - dist / limit)
    return nx * push, ny * push, nz * push


@jit(nopython=True)
def ambient_flow(x, y, z, t, boundary_radius, random_movement):
    """
    Drift applied to particles outside the repulsion radius.

    Combines small jitter, two centre anti-clustering pushes, the curl
    field, and an occasional larger jitter.
    """
    ax = (np.random.random() * 2.0 - 1.0) * AMBIENT_JITTER
    ay = (np.random.random() * 2.0 - 1.0) * AMBIENT_JITTER
    az = (np.random.random() * 2.0 - 1.0) * AMBIENT_JITTER

    px, py, pz = center_push(x, y, z, boundary_radius * 0.7, 0.0006)
    ax += px
    ay += py
    az += pz

    fx, fy, fz = curl_flow(x, y, z, t)
    ax += fx
    ay += fy
    az += fz

    px, py, pz = center_push(x, y, z, boundary_radius * 0.5, 0.001)
    ax += px
    ay += py
    az += pz

    if np.random.random() < OCCASIONAL_JITTER_CHANCE:
        kick = random_movement * 1.5
        ax += (np.random.random() - 0.5) * kick
        ay += (np.random.random() - 0.5) * kick
        az += (np.random.random() - 0.5) * kick
    return ax, ay, az


@jit(nopython=True)
def boundary_force(x, y, z, boundary_radius):
    """Soft containment: quadratic inward force within 2 units of the edge."""
    nx, ny, nz, dist = safe_normalize(x, y, z)
    boundary_dist = boundary_radius - dist
    if boundary_dist >= 2.0:
        return 0.0, 0.0, 0.0

    falloff = 1.0 - boundary_dist / 2.0
    force = 0.01 * falloff * falloff
    if boundary_dist < 0.5:
        force += 0.01 * np.random.random()
    return -nx * force, -ny * force, -nz * force
