"""Extended unified camera model (EUCM).

Khomutenko, Garcia, Martinet: "An Enhanced Unified Camera Model", RA-L 2016.
"""

import numpy as np

from ..math.numerics import normalize_ray
from .base import (
    ParameterVector,
    ProjectionResult,
    UnprojectionResult,
    invalid_projection,
    invalid_unprojection,
    normalized_from_pixel,
    projection_from_normalized,
    unprojection_jacobians,
)


def projection_domain_weight(alpha):
    """w such that rays with z > -w * rho are inside the projection domain."""
    if alpha > 0.5:
        return (1 - alpha) / alpha
    return alpha / (1 - alpha)


def lift_to_z(r2, alpha, beta=1.0, jacobians=False):
    """z coordinate of the (unnormalized) lifted point of radius^2 ``r2``.

    mz = (1 - beta alpha^2 r2) / (alpha sqrt(1 - (2 alpha - 1) beta r2) + 1 - alpha)

    Shared by the unified (beta = 1), extended unified and double sphere
    models.

    Returns:
        Tuple (valid, mz, dmz_dr2, dmz_dalpha, dmz_dbeta); derivatives are
        None unless requested, mz is None when invalid
    """
    radicand = 1 - (2 * alpha - 1) * beta * r2
    if not radicand > 0:
        return False, None, None, None, None

    s = np.sqrt(radicand)
    den = alpha * s + 1 - alpha
    num = 1 - beta * alpha * alpha * r2
    mz = num / den

    if not jacobians:
        return True, mz, None, None, None

    den2 = den * den

    ds_dr2 = -(2 * alpha - 1) * beta / (2 * s)
    dmz_dr2 = (-beta * alpha * alpha * den - num * alpha * ds_dr2) / den2

    ds_dalpha = -beta * r2 / s
    dden_dalpha = s + alpha * ds_dalpha - 1
    dnum_dalpha = -2 * alpha * beta * r2
    dmz_dalpha = (dnum_dalpha * den - num * dden_dalpha) / den2

    ds_dbeta = -(2 * alpha - 1) * r2 / (2 * s)
    dden_dbeta = alpha * ds_dbeta
    dnum_dbeta = -alpha * alpha * r2
    dmz_dbeta = (dnum_dbeta * den - num * dden_dbeta) / den2

    return True, mz, dmz_dr2, dmz_dalpha, dmz_dbeta


class ExtendedUnifiedCamera(ParameterVector):
    """Extended unified camera, parameters [fx, fy, cx, cy, alpha, beta].

    rho = sqrt(beta (x^2 + y^2) + z^2)
    u = fx * x / (alpha rho + (1 - alpha) z) + cx

    beta = 1 gives the unified model.
    """

    name = "eucm"
    N = 6
    PARAM_NAMES = ("fx", "fy", "cx", "cy", "alpha", "beta")
    DEFAULT_DISTORTION = (0.5, 1.0)

    def project(self, p3d, jacobians: bool = False) -> ProjectionResult:
        p = self._as_point(p3d)
        if not np.isfinite(p[:3]).all():
            return invalid_projection(self.dtype, self.N, jacobians)
        x, y, z = p[0], p[1], p[2]
        alpha, beta = self.params[4], self.params[5]

        r2 = x * x + y * y
        rho = np.sqrt(beta * r2 + z * z)

        if not z > -projection_domain_weight(alpha) * rho:
            return invalid_projection(self.dtype, self.N, jacobians)

        norm = alpha * rho + (1 - alpha) * z
        mx = x / norm
        my = y / norm

        if not jacobians:
            return projection_from_normalized(self.params, mx, my)

        d_norm_d_p3d = np.array([
            alpha * beta * x / rho,
            alpha * beta * y / rho,
            alpha * z / rho + 1 - alpha
        ], dtype=self.dtype)

        d_m_d_p3d = np.zeros((2, 4), dtype=self.dtype)
        d_m_d_p3d[0, :3] = -mx / norm * d_norm_d_p3d
        d_m_d_p3d[1, :3] = -my / norm * d_norm_d_p3d
        d_m_d_p3d[0, 0] += 1 / norm
        d_m_d_p3d[1, 1] += 1 / norm

        d_norm_d_dist = np.array([rho - z, alpha * r2 / (2 * rho)], dtype=self.dtype)
        d_m_d_dist = -np.array([[mx], [my]], dtype=self.dtype) / norm * d_norm_d_dist

        return projection_from_normalized(self.params, mx, my, d_m_d_p3d, d_m_d_dist)

    def unproject(self, proj, jacobians: bool = False) -> UnprojectionResult:
        uv = self._as_pixel(proj)
        if not np.isfinite(uv).all():
            return invalid_unprojection(self.dtype, self.N, jacobians)
        mx, my = normalized_from_pixel(self.params, uv)
        alpha, beta = self.params[4], self.params[5]

        r2 = mx * mx + my * my
        valid, mz, dmz_dr2, dmz_dalpha, dmz_dbeta = lift_to_z(r2, alpha, beta, jacobians)
        if not valid:
            return invalid_unprojection(self.dtype, self.N, jacobians)

        v = np.array([mx, my, mz], dtype=self.dtype)
        p3d, d_p3d_d_v = normalize_ray(v, jacobians)

        if not jacobians:
            return UnprojectionResult(p3d, True)

        d_v_d_m = np.array([
            [1, 0],
            [0, 1],
            [2 * mx * dmz_dr2, 2 * my * dmz_dr2]
        ], dtype=self.dtype)
        d_p3d_d_m = d_p3d_d_v @ d_v_d_m
        d_p3d_d_dist = np.outer(d_p3d_d_v[:, 2], [dmz_dalpha, dmz_dbeta])

        d_p3d_d_proj, d_p3d_d_param = unprojection_jacobians(self.params, mx, my, d_p3d_d_m, d_p3d_d_dist)
        return UnprojectionResult(p3d, True, d_p3d_d_proj, d_p3d_d_param)

    @classmethod
    def test_projections(cls):
        return [
            cls([460.76, 459.4, 365.8, 249.3, 0.5, 1.0]),
            cls([380, 380, 512, 512, 0.6, 1.1]),
            cls([500, 500, 640, 480, 0.7, 0.9]),
            cls([400, 410, 500, 490, 0.3, 1.2]),
        ]
