"""Primitive geometry, materials and quaternion math for scene description.

Coordinate convention:
    - Y-up, right handed
    - Cameras and directional lights look along their local -Z axis
    - Quaternions are (w, x, y, z), the same order MuJoCo uses

Size convention:
    - PLANE: (half_x, 0, half_z)   -- lies in XZ, normal +Y
    - CUBOID: (half_x, half_y, half_z)
    - QUAD: (half_x, half_y, 0)    -- lies in XY, normal +Z
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

Vec3 = tuple[float, float, float]
Quat = tuple[float, float, float, float]

IDENTITY_QUAT: Quat = (1.0, 0.0, 0.0, 0.0)
X_AXIS: Vec3 = (1.0, 0.0, 0.0)
Y_AXIS: Vec3 = (0.0, 1.0, 0.0)
Z_AXIS: Vec3 = (0.0, 0.0, 1.0)


class GeomKind(Enum):
    """Primitive mesh shapes understood by the rendering backend."""

    PLANE = "plane"
    CUBOID = "cuboid"
    QUAD = "quad"


@dataclass(frozen=True)
class Geometry:
    """A primitive mesh descriptor.

    Attributes:
        kind: Shape type
        half_extents: Size parameters, meaning depends on kind (see module doc)
    """

    kind: GeomKind
    half_extents: Vec3

    @classmethod
    def plane(cls, size: float) -> Geometry:
        """Square plane of side `size` in the XZ plane."""
        return cls(GeomKind.PLANE, (size / 2, 0.0, size / 2))

    @classmethod
    def cube(cls, size: float) -> Geometry:
        half = size / 2
        return cls(GeomKind.CUBOID, (half, half, half))

    @classmethod
    def quad(cls, width: float, height: float) -> Geometry:
        """Rectangle of width x height in the XY plane."""
        return cls(GeomKind.QUAD, (width / 2, height / 2, 0.0))


@dataclass(frozen=True)
class Material:
    """Physically-based surface parameters.

    Attributes:
        base_color: Linear RGB, values in [0, 1]
        perceptual_roughness: 0 = mirror-smooth, 1 = fully rough
        reflectance: Specular intensity for non-metals, in [0, 1]
        metallic: 0 = dielectric, 1 = metal
        diffuse_transmission: Fraction of diffuse light passing through
        specular_transmission: Fraction of specular light passing through
        thickness: Volume thickness used for refraction, in meters
        ior: Index of refraction
    """

    base_color: Vec3 = (1.0, 1.0, 1.0)
    perceptual_roughness: float = 0.5
    reflectance: float = 0.5
    metallic: float = 0.0
    diffuse_transmission: float = 0.0
    specular_transmission: float = 0.0
    thickness: float = 0.0
    ior: float = 1.5

    @property
    def transmission(self) -> float:
        """Largest of the two transmission factors."""
        return max(self.diffuse_transmission, self.specular_transmission)

    @property
    def is_transmissive(self) -> bool:
        return self.transmission > 0.0


# ---------------------------------------------------------------------------
# Common colors (RGB, [0, 1])
# ---------------------------------------------------------------------------

WHITE = (1.0, 1.0, 1.0)
RED = (1.0, 0.0, 0.0)
GREEN = (0.0, 1.0, 0.0)
AQUAMARINE = (0.5, 1.0, 0.83)
WARM_WHITE = (0.98, 0.95, 0.82)

# ---------------------------------------------------------------------------
# Quaternion utilities
# ---------------------------------------------------------------------------


def quat_multiply(q1, q2) -> np.ndarray:
    """Hamilton product of two quaternions (w, x, y, z)."""
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2
    return np.array(
        [
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        ]
    )


def quat_from_axis_angle(axis, angle: float) -> np.ndarray:
    """Rotation of `angle` radians about a unit axis."""
    x, y, z = axis
    s = np.sin(angle / 2)
    return np.array([np.cos(angle / 2), x * s, y * s, z * s])


def quat_from_euler_xyz(a: float, b: float, c: float) -> np.ndarray:
    """Intrinsic XYZ Euler angles to quaternion: Rx(a) * Ry(b) * Rz(c)."""
    qx = quat_from_axis_angle(X_AXIS, a)
    qy = quat_from_axis_angle(Y_AXIS, b)
    qz = quat_from_axis_angle(Z_AXIS, c)
    return quat_multiply(quat_multiply(qx, qy), qz)


def quat_rotate(q, v) -> np.ndarray:
    """Rotate a 3D vector by a unit quaternion."""
    w, x, y, z = q
    u = np.array([x, y, z])
    v = np.asarray(v, dtype=float)
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def quat_from_matrix(m: np.ndarray) -> np.ndarray:
    """Rotation matrix (3x3, columns are the rotated basis) to quaternion."""
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0:
        s = 2.0 * np.sqrt(trace + 1.0)
        q = [
            0.25 * s,
            (m[2, 1] - m[1, 2]) / s,
            (m[0, 2] - m[2, 0]) / s,
            (m[1, 0] - m[0, 1]) / s,
        ]
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        q = [
            (m[2, 1] - m[1, 2]) / s,
            0.25 * s,
            (m[0, 1] + m[1, 0]) / s,
            (m[0, 2] + m[2, 0]) / s,
        ]
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        q = [
            (m[0, 2] - m[2, 0]) / s,
            (m[0, 1] + m[1, 0]) / s,
            0.25 * s,
            (m[1, 2] + m[2, 1]) / s,
        ]
    else:
        s = 2.0 * np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        q = [
            (m[1, 0] - m[0, 1]) / s,
            (m[0, 2] + m[2, 0]) / s,
            (m[1, 2] + m[2, 1]) / s,
            0.25 * s,
        ]
    q = np.array(q)
    # Canonical sign: w >= 0
    if q[0] < 0:
        q = -q
    return q / np.linalg.norm(q)


def quat_look_at(eye, target, up=Y_AXIS) -> np.ndarray:
    """Orientation whose local -Z points from `eye` to `target`.

    Local +Y is as close to `up` as possible. `eye` must not coincide with
    `target` and the view direction must not be parallel to `up`.
    """
    eye = np.asarray(eye, dtype=float)
    back = eye - np.asarray(target, dtype=float)
    back = back / np.linalg.norm(back)
    right = np.cross(np.asarray(up, dtype=float), back)
    right = right / np.linalg.norm(right)
    true_up = np.cross(back, right)
    return quat_from_matrix(np.column_stack([right, true_up, back]))


def forward_vector(q) -> np.ndarray:
    """The direction a camera or light with orientation q faces (local -Z)."""
    return quat_rotate(q, (0.0, 0.0, -1.0))
