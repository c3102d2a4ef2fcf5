# interaction.py
"""
Pointer-to-world interaction.

This module holds the perspective camera, the pointer state fed by input
events, and the ray casting that turns a pointer position into the
InteractionRay used for repulsion. The camera follows the usual OpenGL
conventions: it looks down its local -z axis and normalized device
coordinates span [-1, 1] on every axis.
"""
import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from constants import CAMERA_DISTANCE, CAMERA_FAR, CAMERA_FOV, CAMERA_NEAR, EPSILON

# --- Data Contracts ---
#
# compute_interaction_ray(pointer_ndc: Tuple[float, float], camera: PerspectiveCamera) -> InteractionRay:
#   - Outputs: ray whose origin is the camera position and whose direction
#     is the unit vector through the unprojected point (x, y, 0.5).
#   - Invariants: direction is finite and of unit length.
#
# unproject_to_world_at_depth(pointer_ndc, camera, depth: float) -> np.ndarray:
#   - Outputs: the world point on the pointer ray whose z equals `depth`.
#   - Invariants: finite even for rays nearly parallel to the z = depth plane.


class PerspectiveCamera:
    """
    A perspective camera placed at `position`, looking down -z.
    """
    def __init__(
        self,
        fov: float = CAMERA_FOV,
        aspect: float = 1.0,
        near: float = CAMERA_NEAR,
        far: float = CAMERA_FAR,
        position: Sequence[float] = (0.0, 0.0, CAMERA_DISTANCE),
    ):
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.position = np.asarray(position, dtype=np.float64)
        self._update_matrices()

    def set_aspect(self, aspect: float) -> None:
        """Updates the aspect ratio, e.g. after a window resize."""
        self.aspect = aspect
        self._update_matrices()
        logging.debug(f"Camera aspect ratio set to {aspect:.3f}.")

    def _update_matrices(self) -> None:
        f = 1.0 / math.tan(math.radians(self.fov) / 2.0)
        n, fa = self.near, self.far
        self.projection_matrix = np.array([
            [f / self.aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (fa + n) / (n - fa), 2.0 * fa * n / (n - fa)],
            [0.0, 0.0, -1.0, 0.0],
        ])
        self.world_matrix = np.eye(4)
        self.world_matrix[:3, 3] = self.position
        self.view_matrix = np.linalg.inv(self.world_matrix)
        self.projection_inverse = np.linalg.inv(self.projection_matrix)

    def unproject(self, ndc: Sequence[float]) -> np.ndarray:
        """Maps a point in normalized device coordinates to world space."""
        clip = np.array([ndc[0], ndc[1], ndc[2], 1.0])
        world = self.world_matrix @ (self.projection_inverse @ clip)
        return world[:3] / world[3]

    def project(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Projects world points to normalized device coordinates.

        Args:
            points (np.ndarray): Array of shape (N, 3).

        Returns:
            Tuple[np.ndarray, np.ndarray]: NDC array of shape (N, 3) and the
            view-space depth (distance in front of the camera) of shape (N,).
        """
        homogeneous = np.empty((points.shape[0], 4), dtype=np.float64)
        homogeneous[:, :3] = points
        homogeneous[:, 3] = 1.0
        view = homogeneous @ self.view_matrix.T
        clip = view @ self.projection_matrix.T
        w = clip[:, 3:4]
        w = np.where(np.abs(w) < EPSILON, EPSILON, w)
        return clip[:, :3] / w, -view[:, 2]


@dataclass(frozen=True)
class InteractionRay:
    origin: np.ndarray
    direction: np.ndarray


@dataclass
class PointerState:
    """
    Pointer position in normalized device coordinates.

    Velocity and speed are refreshed only by motion events and keep their
    last value between events.
    """
    x: float = 0.0
    y: float = 0.0
    prev_x: float = 0.0
    prev_y: float = 0.0
    velocity_x: float = 0.0
    velocity_y: float = 0.0
    speed: float = 0.0
    pressed: bool = False

    def update(self, x: float, y: float) -> None:
        self.prev_x, self.prev_y = self.x, self.y
        self.x, self.y = x, y
        self.velocity_x = self.x - self.prev_x
        self.velocity_y = self.y - self.prev_y
        self.speed = math.sqrt(self.velocity_x ** 2 + self.velocity_y ** 2)

    def update_from_screen(self, px: float, py: float, width: int, height: int) -> None:
        """Converts a pixel position (origin top-left) and applies it."""
        self.update((px / width) * 2 - 1, -(py / height) * 2 + 1)

    def update_from_touch(self, tx: float, ty: float, sim_fraction: float = 1.0) -> None:
        """
        Applies a touch position given in window-normalized [0, 1] coordinates.

        `sim_fraction` is the share of the window width covered by the
        simulation area, which starts at the left edge.
        """
        self.update_from_screen(tx, ty, sim_fraction, 1.0)

    @property
    def ndc(self) -> Tuple[float, float]:
        return self.x, self.y


def compute_interaction_ray(pointer_ndc: Tuple[float, float], camera: PerspectiveCamera) -> InteractionRay:
    """
    Builds the ray from the camera through the pointer.

    Falls back to the camera's forward axis if the unprojected point
    coincides with the camera position.
    """
    target = camera.unproject((pointer_ndc[0], pointer_ndc[1], 0.5))
    direction = target - camera.position
    length = np.linalg.norm(direction)
    if not np.isfinite(length) or length < EPSILON:
        logging.warning("Degenerate pointer ray. Using the camera forward axis.")
        direction = np.array([0.0, 0.0, -1.0])
    else:
        direction = direction / length
    return InteractionRay(origin=camera.position.copy(), direction=direction)


def unproject_to_world_at_depth(
    pointer_ndc: Tuple[float, float], camera: PerspectiveCamera, depth: float
) -> np.ndarray:
    """
    Intersects the pointer ray with the plane z = depth.

    The ray direction's z component is clamped away from zero, keeping its
    sign, so rays nearly parallel to the plane land far away instead of at
    infinity.
    """
    ray = compute_interaction_ray(pointer_ndc, camera)
    dz = ray.direction[2]
    if abs(dz) < EPSILON:
        dz = EPSILON if dz >= 0 else -EPSILON
    distance = (depth - camera.position[2]) / dz
    return ray.origin + ray.direction * distance
