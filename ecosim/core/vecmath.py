"""Ground-plane vector helpers.

Positions, velocities and forces are numpy arrays of shape (3,) laid out as
[x, y, z]. The simulation lives on the x/z plane, so y is kept at zero and
every distance is measured on that plane.
"""

import math
from typing import Sequence, Union

import numpy as np

VecLike = Union[np.ndarray, Sequence[float]]

def vec(x: float = 0.0, z: float = 0.0) -> np.ndarray:
    """Builds a ground-plane vector from x/z coordinates."""
    return np.array([x, 0.0, z], dtype=np.float64)

def zero() -> np.ndarray:
    return np.zeros(3, dtype=np.float64)

def to_ground(value: VecLike) -> np.ndarray:
    """Converts (x, z) or (x, y, z) input into a ground-plane vector with y == 0."""
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.shape == (2,):
        return vec(arr[0], arr[1])
    if arr.shape == (3,):
        return vec(arr[0], arr[2])
    raise ValueError(f"Expected a 2D or 3D position, got shape {arr.shape}")

def length(v: np.ndarray) -> float:
    return math.hypot(v[0], v[2])

def distance(a: np.ndarray, b: np.ndarray) -> float:
    return math.hypot(a[0] - b[0], a[2] - b[2])

def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along v; the zero vector maps to the zero vector."""
    norm = math.hypot(v[0], v[2])
    if norm == 0.0:
        return zero()
    return vec(v[0] / norm, v[2] / norm)

def clamp_length(v: np.ndarray, max_length: float) -> np.ndarray:
    norm = math.hypot(v[0], v[2])
    if norm > max_length and norm > 0.0:
        scale = max_length / norm
        return vec(v[0] * scale, v[2] * scale)
    return vec(v[0], v[2])

def heading_of(v: np.ndarray) -> float:
    """Facing angle about the vertical axis, 0 looking down +z."""
    return math.atan2(v[0], v[2])

def from_heading(angle: float, magnitude: float = 1.0) -> np.ndarray:
    return vec(math.sin(angle) * magnitude, math.cos(angle) * magnitude)

def distances_from(origin: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Ground-plane distances from origin to each row of an (n, 3) array."""
    if points.size == 0:
        return np.empty(0, dtype=np.float64)
    deltas = points[:, [0, 2]] - origin[[0, 2]]
    return np.hypot(deltas[:, 0], deltas[:, 1])
