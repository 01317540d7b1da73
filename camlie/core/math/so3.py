"""SO(3) rotation group: exp/log maps and their right/left Jacobians.

Rotations are parametrized locally by axis-angle vectors ``phi``. The
Jacobians relate additive perturbations of ``phi`` to multiplicative
perturbations of ``exp(phi)``:

    exp(phi + eps) ~= exp(phi) exp(Jr(phi) eps)        right
    exp(phi + eps) ~= exp(Jl(phi) eps) exp(phi)        left
    log(exp(phi) exp(eps)) ~= phi + Jr^-1(phi) eps
    log(exp(eps) exp(phi)) ~= phi + Jl^-1(phi) eps

For ``|phi|`` at or below the rotation-group epsilon every Jacobian is the
identity.
"""

import numpy as np

from .numerics import as_vector, epsilon, float_dtype
from .quaternions import quat_from_matrix, quat_from_rotvec, quat_to_matrix, quat_to_rotvec


def hat(phi: np.ndarray) -> np.ndarray:
    """Create skew-symmetric matrix from 3D vector."""
    if phi.shape != (3,):
        raise ValueError(f"phi must be 3-element vector, got shape {phi.shape}")

    return np.array([
        [0, -phi[2], phi[1]],
        [phi[2], 0, -phi[0]],
        [-phi[1], phi[0], 0]
    ], dtype=phi.dtype)


def vee(Omega: np.ndarray) -> np.ndarray:
    """Inverse of :func:`hat`."""
    if Omega.shape != (3, 3):
        raise ValueError(f"Omega must be 3x3 matrix, got shape {Omega.shape}")

    return np.array([Omega[2, 1], Omega[0, 2], Omega[1, 0]], dtype=Omega.dtype)


def so3_exp(phi) -> np.ndarray:
    """Exponential map: rotation vector -> 3x3 rotation matrix."""
    phi = as_vector(phi, 3, dtype=float_dtype(phi), name="phi")
    return quat_to_matrix(quat_from_rotvec(phi))


def so3_log(R) -> np.ndarray:
    """Logarithm map: 3x3 rotation matrix -> rotation vector."""
    R = np.asarray(R, dtype=float_dtype(R))
    if R.shape != (3, 3):
        raise ValueError(f"R must be 3x3 matrix, got shape {R.shape}")

    return quat_to_rotvec(quat_from_matrix(R))


def _prepare(phi):
    phi = as_vector(phi, 3, dtype=float_dtype(phi), name="phi")
    phi_norm2 = phi @ phi
    phi_norm = np.sqrt(phi_norm2)
    return phi, phi_norm2, phi_norm, np.eye(3, dtype=phi.dtype)


def right_jacobian_so3(phi) -> np.ndarray:
    """Right Jacobian of SO(3).

    Args:
        phi: 3-element rotation vector

    Returns:
        3x3 matrix Jr with exp(phi + eps) ~= exp(phi) exp(Jr eps)
    """
    phi, phi_norm2, phi_norm, J = _prepare(phi)

    if epsilon(phi.dtype) < phi_norm:
        phi_hat = hat(phi)
        phi_hat2 = phi_hat @ phi_hat
        phi_norm3 = phi_norm2 * phi_norm

        J -= phi_hat * (1 - np.cos(phi_norm)) / phi_norm2
        J += phi_hat2 * (phi_norm - np.sin(phi_norm)) / phi_norm3

    return J


def right_jacobian_inv_so3(phi) -> np.ndarray:
    """Inverse of :func:`right_jacobian_so3`.

    log(exp(phi) exp(eps)) ~= phi + J eps
    """
    phi, phi_norm2, phi_norm, J = _prepare(phi)

    if epsilon(phi.dtype) < phi_norm:
        phi_hat = hat(phi)
        phi_hat2 = phi_hat @ phi_hat

        J += phi_hat / 2
        J += phi_hat2 * (1 / phi_norm2 - (1 + np.cos(phi_norm)) /
                         (2 * phi_norm * np.sin(phi_norm)))

    return J


def left_jacobian_so3(phi) -> np.ndarray:
    """Left Jacobian of SO(3).

    exp(phi + eps) ~= exp(J eps) exp(phi). Equals the ``V`` matrix of the
    coupled SE(3) exponential.
    """
    phi, phi_norm2, phi_norm, J = _prepare(phi)

    if epsilon(phi.dtype) < phi_norm:
        phi_hat = hat(phi)
        phi_hat2 = phi_hat @ phi_hat
        phi_norm3 = phi_norm2 * phi_norm

        J += phi_hat * (1 - np.cos(phi_norm)) / phi_norm2
        J += phi_hat2 * (phi_norm - np.sin(phi_norm)) / phi_norm3

    return J


def left_jacobian_inv_so3(phi) -> np.ndarray:
    """Inverse of :func:`left_jacobian_so3`.

    log(exp(eps) exp(phi)) ~= phi + J eps
    """
    phi, phi_norm2, phi_norm, J = _prepare(phi)

    if epsilon(phi.dtype) < phi_norm:
        phi_hat = hat(phi)
        phi_hat2 = phi_hat @ phi_hat

        J -= phi_hat / 2
        J += phi_hat2 * (1 / phi_norm2 - (1 + np.cos(phi_norm)) /
                         (2 * phi_norm * np.sin(phi_norm)))

    return J
