# sampling.py
"""
Random sampling primitives used by particle initialization and the tick.

All functions are Numba-jitted so they can be called both from Python and
from inside the jitted simulation loops. Numba keeps its own generator
state, separate from NumPy's, so `seed` must be called through Numba for
the master seed to reach the hot loops.
"""
import numpy as np
from numba import jit

from constants import EPSILON

# --- Data Contracts ---
#
# uniform_scalar() -> float
#   - Outputs: a float in [0, 1).
#
# uniform_in_sphere(radius: float) -> Tuple[float, float, float]
#   - Outputs: a point uniformly distributed over the volume of a ball of
#     the given radius (radial CDF is (r/R)^3).
#   - Invariants: 0 < |p| <= radius (almost surely).
#
# uniform_in_direction() -> Tuple[float, float, float]
#   - Outputs: a unit vector in a uniformly random direction.
#
# sample_in_sphere(count: int, radius: float) -> np.ndarray
#   - Outputs: float64 array of shape (count, 3).


@jit(nopython=True)
def seed(value):
    """Seeds the generator shared by all jitted code."""
    np.random.seed(value)


@jit(nopython=True)
def uniform_scalar():
    return np.random.random()


@jit(nopython=True)
def _unit_cube_point_in_ball():
    # Rejection sample the cube [-1, 1]^3 until the point lands inside the
    # unit ball and is long enough to normalize.
    x = y = z = 0.0
    mag = 0.0
    while mag <= EPSILON or mag > 1.0:
        x = np.random.random() * 2.0 - 1.0
        y = np.random.random() * 2.0 - 1.0
        z = np.random.random() * 2.0 - 1.0
        mag = np.sqrt(x * x + y * y + z * z)
    return x, y, z, mag


@jit(nopython=True)
def uniform_in_direction():
    """Returns a random unit vector."""
    x, y, z, mag = _unit_cube_point_in_ball()
    return x / mag, y / mag, z / mag


@jit(nopython=True)
def uniform_in_sphere(radius):
    """
    Returns a point uniformly distributed inside a ball.

    The radius is drawn as cbrt(u) * radius, which keeps the point density
    constant per unit volume.
    """
    dx, dy, dz = uniform_in_direction()
    r = np.random.random() ** (1.0 / 3.0) * radius
    return dx * r, dy * r, dz * r


@jit(nopython=True)
def sample_in_sphere(count, radius):
    """Draws `count` points with `uniform_in_sphere`."""
    points = np.empty((count, 3), dtype=np.float64)
    for i in range(count):
        x, y, z = uniform_in_sphere(radius)
        points[i, 0] = x
        points[i, 1] = y
        points[i, 2] = z
    return points
