"""SE(3) rigid motions as (R, t) pairs: coupled and decoupled exp/log.

Tangent vectors are 6-element ``[upsilon, omega]``: translation part first,
rotation part second.

The coupled maps are the group's own exponential (translation through the
left Jacobian ``V(omega)``). The decoupled maps treat the two parts
independently: ``expd([upsilon, omega]) = (exp(omega), upsilon)``.
"""

import numpy as np
from typing import Tuple

from .numerics import as_vector, float_dtype
from .so3 import (
    hat,
    left_jacobian_inv_so3,
    left_jacobian_so3,
    right_jacobian_inv_so3,
    right_jacobian_so3,
    so3_exp,
    so3_log,
)


def _check_pose(R: np.ndarray, t: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    dtype = float_dtype(R, t)
    R = np.asarray(R, dtype=dtype)
    if R.shape != (3, 3):
        raise ValueError(f"R must be 3x3 matrix, got shape {R.shape}")
    t = as_vector(t, 3, dtype=dtype, name="t")
    return R, t


def se3_exp(xi) -> Tuple[np.ndarray, np.ndarray]:
    """Convert se(3) algebra element to SE(3) group (R, t).

    Args:
        xi: 6-element vector [rho, phi] where rho is translation, phi is rotation

    Returns:
        Tuple of (R, t) where R is 3x3 rotation matrix, t is 3-element translation
    """
    xi = as_vector(xi, 6, dtype=float_dtype(xi), name="xi")

    rho = xi[:3]
    phi = xi[3:]

    R = so3_exp(phi)
    t = left_jacobian_so3(phi) @ rho
    return R, t


def se3_log(R, t) -> np.ndarray:
    """Convert SE(3) group element (R, t) to se(3) algebra.

    Args:
        R: 3x3 rotation matrix
        t: 3-element translation vector

    Returns:
        6-element se(3) vector [rho, phi]
    """
    R, t = _check_pose(R, t)

    phi = so3_log(R)
    rho = left_jacobian_inv_so3(phi) @ t
    return np.concatenate([rho, phi])


def se3_expd(xi) -> Tuple[np.ndarray, np.ndarray]:
    """Decoupled exponential: translation taken as is, rotation through SO(3) exp."""
    xi = as_vector(xi, 6, dtype=float_dtype(xi), name="xi")
    return so3_exp(xi[3:]), xi[:3].copy()


def se3_logd(R, t) -> np.ndarray:
    """Decoupled logarithm, inverse of :func:`se3_expd`."""
    R, t = _check_pose(R, t)
    return np.concatenate([t, so3_log(R)])


def compose(R1, t1, R2, t2) -> Tuple[np.ndarray, np.ndarray]:
    """Compose two SE(3) transformations: T1 * T2."""
    R1, t1 = _check_pose(R1, t1)
    R2, t2 = _check_pose(R2, t2)

    R = R1 @ R2
    t = R1 @ t2 + t1
    return R, t


def invert(R, t) -> Tuple[np.ndarray, np.ndarray]:
    """Invert SE(3) transformation (R, t) -> (R^T, -R^T t)."""
    R, t = _check_pose(R, t)

    R_inv = R.T
    t_inv = -R_inv @ t
    return R_inv, t_inv


def adjoint(R, t) -> np.ndarray:
    """6x6 adjoint of (R, t) acting on [upsilon, omega] tangent vectors."""
    R, t = _check_pose(R, t)

    Ad = np.zeros((6, 6), dtype=R.dtype)
    Ad[:3, :3] = R
    Ad[:3, 3:] = hat(t) @ R
    Ad[3:, 3:] = R
    return Ad


def right_jacobian_se3_decoupled(xi) -> np.ndarray:
    """Right Jacobian of the decoupled SE(3) exponential.

    expd(xi + eps) ~= expd(xi) expd(J eps). Block diagonal: the translation
    block is exp(omega)^-1, the rotation block the SO(3) right Jacobian.

    Args:
        xi: 6-element vector [upsilon, omega]

    Returns:
        6x6 matrix
    """
    xi = as_vector(xi, 6, dtype=float_dtype(xi), name="xi")
    omega = xi[3:]

    J = np.zeros((6, 6), dtype=xi.dtype)
    J[:3, :3] = so3_exp(omega).T
    J[3:, 3:] = right_jacobian_so3(omega)
    return J


def right_jacobian_inv_se3_decoupled(xi) -> np.ndarray:
    """Inverse of :func:`right_jacobian_se3_decoupled`.

    logd(expd(xi) expd(eps)) ~= xi + J eps
    """
    xi = as_vector(xi, 6, dtype=float_dtype(xi), name="xi")
    omega = xi[3:]

    J = np.zeros((6, 6), dtype=xi.dtype)
    J[:3, :3] = so3_exp(omega)
    J[3:, 3:] = right_jacobian_inv_so3(omega)
    return J
