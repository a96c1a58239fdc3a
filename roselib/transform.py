"""Conversion from ROSE axes (Z up) to the target convention (Y up).

Quaternions are handled as (x, y, z, w) tuples throughout.
"""
from typing import Sequence, Tuple

import numpy as np

Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]


def transform_position(p: Sequence[float]) -> Vector3:
    """Swap the two non-vertical axes: (x, y, z) -> (x, z, y)."""
    return (p[0], p[2], p[1])


def transform_rotation(q: Sequence[float]) -> Quaternion:
    """Swap axes like ``transform_position`` and negate w.

    Swapping two axes flips handedness; without the sign change the
    rotation comes out mirrored.
    """
    return (q[0], q[2], q[1], -q[3])


def transform_positions(points: np.ndarray) -> np.ndarray:
    """Vectorised ``transform_position`` over an (n, 3) array."""
    return np.ascontiguousarray(points[:, [0, 2, 1]])


def transform_rotations(quats: np.ndarray) -> np.ndarray:
    """Vectorised ``transform_rotation`` over an (n, 4) array."""
    out = np.ascontiguousarray(quats[:, [0, 2, 1, 3]])
    out[:, 3] = -out[:, 3]
    return out


def rotate_vector(q: Sequence[float], v: Sequence[float]) -> Vector3:
    """Rotate ``v`` by the unit quaternion ``q``."""
    qv = np.array(q[:3], dtype=np.float64)
    vec = np.array(v, dtype=np.float64)
    t = 2.0 * np.cross(qv, vec)
    result = vec + q[3] * t + np.cross(qv, t)
    return tuple(float(c) for c in result)


def quaternion_to_matrix(q: Sequence[float]) -> np.ndarray:
    """3x3 rotation matrix of a unit quaternion (x, y, z, w)."""
    x, y, z, w = q
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ], dtype=np.float64)


def compose_matrix(rotation: Sequence[float], translation: Sequence[float]) -> np.ndarray:
    """4x4 matrix applying ``rotation`` then ``translation``."""
    matrix = np.identity(4, dtype=np.float64)
    matrix[:3, :3] = quaternion_to_matrix(rotation)
    matrix[:3, 3] = translation
    return matrix
