"""Finite-difference Jacobians for validating analytic derivatives."""

import numpy as np
from dataclasses import dataclass
from typing import Callable, Optional, Tuple


@dataclass
class JacobianCheckOptions:
    """Options for comparing an analytic Jacobian to finite differences."""

    step: float = 1e-8
    rtol: float = 1e-4  # relative to the larger Frobenius norm of the two
    atol: float = 1e-6
    method: str = "central"


def finite_difference_jacobian(
    func: Callable[[np.ndarray], np.ndarray],
    x: np.ndarray,
    h: float = 1e-8,
    method: str = "central"
) -> np.ndarray:
    """Compute Jacobian using finite differences.

    Args:
        func: Function that takes x and returns a vector
        x: Input point
        h: Step size for finite differences
        method: Finite difference method ("forward", "backward", "central")

    Returns:
        Jacobian matrix J where J[i,j] = df_i/dx_j
    """
    x = np.atleast_1d(np.asarray(x, dtype=np.float64))
    f0 = np.atleast_1d(func(x))

    m, n = len(f0), len(x)
    J = np.zeros((m, n))

    if method not in ("forward", "backward", "central"):
        raise ValueError(f"Unknown finite difference method: {method}")

    for j in range(n):
        x_plus = x.copy()
        x_minus = x.copy()
        x_plus[j] += h
        x_minus[j] -= h

        if method == "forward":
            J[:, j] = (np.atleast_1d(func(x_plus)) - f0) / h
        elif method == "backward":
            J[:, j] = (f0 - np.atleast_1d(func(x_minus))) / h
        else:
            J[:, j] = (np.atleast_1d(func(x_plus)) - np.atleast_1d(func(x_minus))) / (2 * h)

    return J


def check_jacobian(
    func: Callable[[np.ndarray], np.ndarray],
    J_analytic: np.ndarray,
    x: np.ndarray,
    options: Optional[JacobianCheckOptions] = None
) -> Tuple[bool, float, np.ndarray]:
    """Check analytic Jacobian against finite differences.

    The comparison is on whole matrices: the Frobenius norm of the difference
    must stay below ``rtol * max(|J_analytic|, |J_numeric|) + atol``, so
    entries that are exactly zero analytically do not fail on rounding noise.

    Args:
        func: Function whose Jacobian at x is J_analytic
        J_analytic: Analytic Jacobian evaluated at x
        x: Input point
        options: Step and tolerances

    Returns:
        Tuple of (is_correct, error_norm, J_numeric)
    """
    options = options or JacobianCheckOptions()

    J_analytic = np.asarray(J_analytic, dtype=np.float64)
    J_numeric = finite_difference_jacobian(func, x, options.step, options.method)

    if J_analytic.shape != J_numeric.shape:
        raise ValueError(
            f"Analytic Jacobian shape {J_analytic.shape} does not match "
            f"numeric shape {J_numeric.shape}"
        )

    error = np.linalg.norm(J_analytic - J_numeric)
    scale = max(np.linalg.norm(J_analytic), np.linalg.norm(J_numeric))
    is_correct = bool(np.all(np.isfinite(J_analytic))) and error <= options.rtol * scale + options.atol

    return is_correct, float(error), J_numeric
