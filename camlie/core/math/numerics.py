"""Precision-dependent thresholds and small shared numeric helpers."""

import numpy as np
from typing import Optional, Tuple

# Near-zero thresholds of the rotation group, per floating point precision.
_EPSILON = {
    np.dtype(np.float64): 1e-10,
    np.dtype(np.float32): 1e-5,
}


def supported_dtype(dtype) -> np.dtype:
    """Return ``dtype`` as a numpy dtype, or raise ValueError unless float32/float64."""
    dtype = np.dtype(dtype)
    if dtype not in _EPSILON:
        raise ValueError(f"Unsupported dtype {dtype}, expected float32 or float64")
    return dtype


def epsilon(dtype=np.float64):
    """Return the near-zero threshold for ``dtype`` as a scalar of that dtype."""
    dtype = supported_dtype(dtype)
    return dtype.type(_EPSILON[dtype])


def epsilon_sqrt(dtype=np.float64):
    """Square root of :func:`epsilon`, used for radius and depth guards."""
    return np.sqrt(epsilon(dtype))


def as_vector(v, size: int, dtype=np.float64, name: str = "vector") -> np.ndarray:
    """Convert ``v`` to a flat array of ``size`` elements or raise ValueError."""
    arr = np.asarray(v, dtype=dtype)
    if arr.shape != (size,):
        raise ValueError(f"{name} must be {size}-element vector, got shape {arr.shape}")
    return arr


def normalize_ray(
    v: np.ndarray,
    jacobian: bool = False
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """Turn an unnormalized 3D direction into a unit homogeneous ray.

    Args:
        v: 3-element direction
        jacobian: Also return d ray / d v

    Returns:
        Tuple of (ray, J) where ray is (x, y, z, 0) with unit norm and J is
        the 4x3 derivative (last row zero), or None if not requested
    """
    norm = np.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
    ray = np.zeros(4, dtype=v.dtype)
    ray[:3] = v / norm

    if not jacobian:
        return ray, None

    J = np.zeros((4, 3), dtype=v.dtype)
    J[:3, :3] = (np.eye(3, dtype=v.dtype) - np.outer(ray[:3], ray[:3])) / norm
    return ray, J


def float_dtype(*arrays) -> np.dtype:
    """Floating dtype to evaluate in: float32 only if every input is float32."""
    dtypes = [np.asarray(a).dtype for a in arrays]
    if dtypes and all(dt == np.float32 for dt in dtypes):
        return np.dtype(np.float32)
    return np.dtype(np.float64)
