"""Unit quaternion helpers backing the SO(3) exponential and logarithm."""

import numpy as np

from .numerics import epsilon, float_dtype


def quat_normalize(q: np.ndarray) -> np.ndarray:
    """Normalize quaternion to unit length."""
    if q.shape != (4,):
        raise ValueError(f"Quaternion must be 4-element vector, got shape {q.shape}")

    norm = np.linalg.norm(q)
    if norm < epsilon(float_dtype(q)):
        raise ValueError("Cannot normalize zero quaternion")

    return q / norm


def quat_from_rotvec(phi: np.ndarray) -> np.ndarray:
    """Create quaternion from a rotation vector (axis * angle).

    Below the rotation-group epsilon the half-angle sine and cosine are
    replaced by their Taylor expansions.

    Args:
        phi: 3D rotation vector

    Returns:
        Unit quaternion [w, x, y, z]
    """
    if phi.shape != (3,):
        raise ValueError(f"phi must be 3-element vector, got shape {phi.shape}")

    theta_sq = phi @ phi
    theta = np.sqrt(theta_sq)

    if theta < epsilon(phi.dtype):
        theta_po4 = theta_sq * theta_sq
        imag_factor = 0.5 - theta_sq / 48 + theta_po4 / 3840
        real_factor = 1 - theta_sq / 8 + theta_po4 / 384
    else:
        half_theta = 0.5 * theta
        imag_factor = np.sin(half_theta) / theta
        real_factor = np.cos(half_theta)

    q = np.empty(4, dtype=phi.dtype)
    q[0] = real_factor
    q[1:] = imag_factor * phi
    return q


def quat_to_matrix(q: np.ndarray) -> np.ndarray:
    """Convert quaternion to rotation matrix.

    Args:
        q: Unit quaternion [w, x, y, z]

    Returns:
        3x3 rotation matrix
    """
    if q.shape != (4,):
        raise ValueError(f"Quaternion must be 4-element vector, got shape {q.shape}")

    q = quat_normalize(q)
    w, x, y, z = q

    return np.array([
        [1 - 2*(y**2 + z**2), 2*(x*y - w*z), 2*(x*z + w*y)],
        [2*(x*y + w*z), 1 - 2*(x**2 + z**2), 2*(y*z - w*x)],
        [2*(x*z - w*y), 2*(y*z + w*x), 1 - 2*(x**2 + y**2)]
    ], dtype=q.dtype)


def quat_from_matrix(R: np.ndarray) -> np.ndarray:
    """Convert rotation matrix to unit quaternion [w, x, y, z].

    Picks the numerically largest component first (Shepperd's method).
    """
    if R.shape != (3, 3):
        raise ValueError(f"R must be 3x3 matrix, got shape {R.shape}")

    trace = np.trace(R)

    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1)
        q = [0.25 / s,
             (R[2, 1] - R[1, 2]) * s,
             (R[0, 2] - R[2, 0]) * s,
             (R[1, 0] - R[0, 1]) * s]
    elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
        s = 2 * np.sqrt(1 + R[0, 0] - R[1, 1] - R[2, 2])
        q = [(R[2, 1] - R[1, 2]) / s,
             0.25 * s,
             (R[0, 1] + R[1, 0]) / s,
             (R[0, 2] + R[2, 0]) / s]
    elif R[1, 1] > R[2, 2]:
        s = 2 * np.sqrt(1 + R[1, 1] - R[0, 0] - R[2, 2])
        q = [(R[0, 2] - R[2, 0]) / s,
             (R[0, 1] + R[1, 0]) / s,
             0.25 * s,
             (R[1, 2] + R[2, 1]) / s]
    else:
        s = 2 * np.sqrt(1 + R[2, 2] - R[0, 0] - R[1, 1])
        q = [(R[1, 0] - R[0, 1]) / s,
             (R[0, 2] + R[2, 0]) / s,
             (R[1, 2] + R[2, 1]) / s,
             0.25 * s]

    return quat_normalize(np.array(q, dtype=R.dtype))


def quat_to_rotvec(q: np.ndarray) -> np.ndarray:
    """Convert unit quaternion [w, x, y, z] to a rotation vector.

    The returned angle lies in [-pi, pi]; both q and -q map to the same
    rotation vector.
    """
    if q.shape != (4,):
        raise ValueError(f"Quaternion must be 4-element vector, got shape {q.shape}")

    eps = epsilon(q.dtype)
    w = q[0]
    vec = q[1:]
    squared_n = vec @ vec
    n = np.sqrt(squared_n)

    if n < eps:
        # atan(n / w) / n expanded around n = 0
        squared_w = w * w
        two_atan_nbyw_by_n = 2 / w - (2 / 3) * squared_n / (w * squared_w)
    elif abs(w) < eps:
        two_atan_nbyw_by_n = np.pi / n if w > 0 else -np.pi / n
    else:
        two_atan_nbyw_by_n = 2 * np.arctan(n / w) / n

    return two_atan_nbyw_by_n * vec
