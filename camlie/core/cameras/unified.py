"""Unified camera model (UCM) in the alpha parametrization."""

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
from .extended_unified import lift_to_z, projection_domain_weight


class UnifiedCamera(ParameterVector):
    """Unified camera, parameters [fx, fy, cx, cy, alpha].

    u = fx * x / (alpha |p| + (1 - alpha) z) + cx

    Equivalent to the classic xi-parametrized model with xi = alpha / (1 - alpha)
    and focal lengths scaled by 1 / (1 - alpha).
    """

    name = "ucm"
    N = 5
    PARAM_NAMES = ("fx", "fy", "cx", "cy", "alpha")
    DEFAULT_DISTORTION = (0.5,)

    def project(self, p3d, jacobians: bool = False) -> ProjectionResult:
        p = self._as_point(p3d)
        if not np.isfinite(p[:3]).all():
            return invalid_projection(self.dtype, self.N, jacobians)
        x, y, z = p[0], p[1], p[2]
        alpha = self.params[4]

        rho = np.sqrt(x * x + y * y + z * z)

        if not z > -projection_domain_weight(alpha) * rho:
            return invalid_projection(self.dtype, self.N, jacobians)

        norm = alpha * rho + (1 - alpha) * z
        mx = x / norm
        my = y / norm

        if not jacobians:
            return projection_from_normalized(self.params, mx, my)

        d_norm_d_p3d = np.array([
            alpha * x / rho,
            alpha * y / rho,
            alpha * z / rho + 1 - alpha
        ], dtype=self.dtype)

        d_m_d_p3d = np.zeros((2, 4), dtype=self.dtype)
        d_m_d_p3d[0, :3] = -mx / norm * d_norm_d_p3d
        d_m_d_p3d[1, :3] = -my / norm * d_norm_d_p3d
        d_m_d_p3d[0, 0] += 1 / norm
        d_m_d_p3d[1, 1] += 1 / norm

        d_m_d_dist = np.array([[-mx * (rho - z) / norm],
                               [-my * (rho - z) / norm]], dtype=self.dtype)

        return projection_from_normalized(self.params, mx, my, d_m_d_p3d, d_m_d_dist)

    def unproject(self, proj, jacobians: bool = False) -> UnprojectionResult:
        uv = self._as_pixel(proj)
        if not np.isfinite(uv).all():
            return invalid_unprojection(self.dtype, self.N, jacobians)
        mx, my = normalized_from_pixel(self.params, uv)
        alpha = self.params[4]

        r2 = mx * mx + my * my
        valid, mz, dmz_dr2, dmz_dalpha, _ = lift_to_z(r2, alpha, jacobians=jacobians)
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
        d_p3d_d_dist = d_p3d_d_v[:, 2:3] * dmz_dalpha

        d_p3d_d_proj, d_p3d_d_param = unprojection_jacobians(self.params, mx, my, d_p3d_d_m, d_p3d_d_dist)
        return UnprojectionResult(p3d, True, d_p3d_d_proj, d_p3d_d_param)

    @classmethod
    def test_projections(cls):
        return [
            cls([0.5 * 500, 0.5 * 500, 319.5, 239.5, 0.51231234]),
            cls([0.5 * 500, 0.5 * 500, 319.5, 239.5, 0.9]),
            cls([0.5 * 500, 0.5 * 500, 319.5, 239.5, 0.5]),
            cls([0.5 * 500, 0.5 * 500, 319.5, 239.5, 0.3]),
            cls([0.5 * 500, 0.5 * 500, 319.5, 239.5, 0.0]),
        ]
