"""Stereographic projection of the unit sphere, without parameters.

Maps the direction of a ray onto the plane z = 0 through the south pole
(0, 0, -1):

    project(p)    = (x, y) / (z + |p|)
    unproject(m)  = (2 mx, 2 my, 1 - |m|^2, 0) / (1 + |m|^2)

Used as a two-dimensional parametrization of bearing vectors.
"""

import numpy as np

from ..math.numerics import as_vector, epsilon, float_dtype
from .base import ProjectionResult, UnprojectionResult


def project(p3d, jacobians: bool = False) -> ProjectionResult:
    """Project the direction of ``p3d`` (4-element, ``w`` ignored).

    The negative z axis has no image; such rays are reported invalid.
    """
    p = as_vector(p3d, 4, dtype=float_dtype(p3d), name="p3d")
    x, y, z = p[0], p[1], p[2]

    sqrt = np.sqrt(x * x + y * y + z * z)
    norm = z + sqrt

    if not norm > epsilon(p.dtype) * sqrt:
        nan2 = np.full(2, np.nan, dtype=p.dtype)
        if not jacobians:
            return ProjectionResult(nan2, False)
        return ProjectionResult(nan2, False, np.full((2, 4), np.nan, dtype=p.dtype))

    norm_inv = 1 / norm
    proj = np.array([x * norm_inv, y * norm_inv], dtype=p.dtype)

    if not jacobians:
        return ProjectionResult(proj, True)

    d_norm_d_p3d = np.array([x / sqrt, y / sqrt, z / sqrt + 1], dtype=p.dtype)

    d_proj_d_p3d = np.zeros((2, 4), dtype=p.dtype)
    d_proj_d_p3d[0, :3] = -proj[0] * norm_inv * d_norm_d_p3d
    d_proj_d_p3d[1, :3] = -proj[1] * norm_inv * d_norm_d_p3d
    d_proj_d_p3d[0, 0] += norm_inv
    d_proj_d_p3d[1, 1] += norm_inv

    return ProjectionResult(proj, True, d_proj_d_p3d)


def unproject(proj, jacobians: bool = False) -> UnprojectionResult:
    """Lift a plane point back to a unit ray; defined on the whole (finite) plane."""
    m = as_vector(proj, 2, dtype=float_dtype(proj), name="proj")
    if not np.isfinite(m).all():
        nan4 = np.full(4, np.nan, dtype=m.dtype)
        if not jacobians:
            return UnprojectionResult(nan4, False)
        return UnprojectionResult(nan4, False, np.full((4, 2), np.nan, dtype=m.dtype))

    x, y = m[0], m[1]

    r2 = x * x + y * y
    norm_inv = 1 / (1 + r2)

    p3d = np.array([2 * x * norm_inv, 2 * y * norm_inv, (1 - r2) * norm_inv, 0], dtype=m.dtype)

    if not jacobians:
        return UnprojectionResult(p3d, True)

    norm_inv2 = norm_inv * norm_inv

    d_p3d_d_proj = np.zeros((4, 2), dtype=m.dtype)
    d_p3d_d_proj[0, 0] = 2 * norm_inv - 4 * x * x * norm_inv2
    d_p3d_d_proj[0, 1] = -4 * x * y * norm_inv2
    d_p3d_d_proj[1, 0] = -4 * x * y * norm_inv2
    d_p3d_d_proj[1, 1] = 2 * norm_inv - 4 * y * y * norm_inv2
    d_p3d_d_proj[2, 0] = -4 * x * norm_inv2
    d_p3d_d_proj[2, 1] = -4 * y * norm_inv2

    return UnprojectionResult(p3d, True, d_p3d_d_proj)
