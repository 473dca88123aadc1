"""Quaternion utilities for orientation streams.

Quaternion convention: [w, x, y, z] (scalar-first).
scipy's Rotation uses [x, y, z, w]; convert at that boundary only.
"""

import numpy as np
from typing import Union

ArrayLike = Union[np.ndarray, list, tuple]

IDENTITY = np.array([1.0, 0.0, 0.0, 0.0])


def quaternion_multiply(q1: ArrayLike, q2: ArrayLike) -> np.ndarray:
    """Multiply two quaternions (Hamilton product).

    Args:
        q1: First quaternion [..., 4] in [w, x, y, z] format.
        q2: Second quaternion [..., 4] in [w, x, y, z] format.

    Returns:
        Product quaternion [..., 4].
    """
    w1, x1, y1, z1 = np.moveaxis(np.asarray(q1, dtype=np.float64), -1, 0)
    w2, x2, y2, z2 = np.moveaxis(np.asarray(q2, dtype=np.float64), -1, 0)

    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2

    return np.stack([w, x, y, z], axis=-1)


def quaternion_conjugate(q: ArrayLike) -> np.ndarray:
    """Compute quaternion conjugate (inverse for unit quaternions)."""
    q = np.asarray(q, dtype=np.float64)
    return np.concatenate([q[..., :1], -q[..., 1:]], axis=-1)


def quaternion_normalize(q: ArrayLike, eps: float = 1e-12) -> np.ndarray:
    """Normalize quaternion to unit length."""
    q = np.asarray(q, dtype=np.float64)
    norm = np.linalg.norm(q, axis=-1, keepdims=True)
    return q / np.maximum(norm, eps)


def quaternion_outer(q: ArrayLike) -> np.ndarray:
    """Self outer product q * q^T.

    Args:
        q: Quaternion [4].

    Returns:
        Symmetric rank-1 matrix [4, 4].
    """
    v = np.asarray(q, dtype=np.float64).reshape(4)
    return np.outer(v, v)


def canonicalize_quaternion(q: ArrayLike) -> np.ndarray:
    """Pick the representative with w >= 0 (q and -q are the same rotation)."""
    q = np.asarray(q, dtype=np.float64)
    return np.where(q[..., :1] < 0, -q, q)


def quaternion_angular_distance(q1: ArrayLike, q2: ArrayLike) -> np.ndarray:
    """Compute angular distance between two quaternions in radians.

    Invariant to the sign of either input.

    Args:
        q1: First quaternion [..., 4].
        q2: Second quaternion [..., 4].

    Returns:
        Angular distance [...] in radians.
    """
    q1 = quaternion_normalize(q1)
    q2 = quaternion_normalize(q2)
    dot = np.abs(np.sum(q1 * q2, axis=-1))
    return 2.0 * np.arccos(np.clip(dot, -1.0, 1.0))


def axis_angle_to_quaternion(axis_angle: ArrayLike) -> np.ndarray:
    """Convert axis-angle representation to quaternion.

    Args:
        axis_angle: Rotation vector [..., 3] where magnitude is angle.

    Returns:
        Unit quaternion [..., 4] in [w, x, y, z] format.
    """
    axis_angle = np.asarray(axis_angle, dtype=np.float64)
    angle = np.linalg.norm(axis_angle, axis=-1, keepdims=True)
    half_angle = 0.5 * angle

    w = np.cos(half_angle)
    safe_angle = np.where(angle > 1e-6, angle, 1.0)
    xyz = np.where(
        angle > 1e-6,
        axis_angle / safe_angle * np.sin(half_angle),
        0.5 * axis_angle,
    )

    return quaternion_normalize(np.concatenate([w, xyz], axis=-1))


def to_scipy_quaternion(q: ArrayLike) -> np.ndarray:
    """Reorder [w, x, y, z] -> [x, y, z, w] for scipy.spatial.transform."""
    q = np.asarray(q, dtype=np.float64)
    return np.concatenate([q[..., 1:], q[..., :1]], axis=-1)


def from_scipy_quaternion(q: ArrayLike) -> np.ndarray:
    """Reorder [x, y, z, w] -> [w, x, y, z]."""
    q = np.asarray(q, dtype=np.float64)
    return np.concatenate([q[..., 3:], q[..., :3]], axis=-1)
