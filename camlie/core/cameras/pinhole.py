"""Pinhole camera model."""

import numpy as np

from ..math.numerics import epsilon_sqrt, normalize_ray
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


class PinholeCamera(ParameterVector):
    """Pinhole camera, parameters [fx, fy, cx, cy].

    u = fx * x / z + cx
    v = fy * y / z + cy

    Only rays with z >= sqrt(eps) project.
    """

    name = "pinhole"
    N = 4
    PARAM_NAMES = ("fx", "fy", "cx", "cy")

    def project(self, p3d, jacobians: bool = False) -> ProjectionResult:
        p = self._as_point(p3d)
        if not np.isfinite(p[:3]).all():
            return invalid_projection(self.dtype, self.N, jacobians)
        x, y, z = p[0], p[1], p[2]

        if not z >= epsilon_sqrt(self.dtype):
            return invalid_projection(self.dtype, self.N, jacobians)

        mx = x / z
        my = y / z

        if not jacobians:
            return projection_from_normalized(self.params, mx, my)

        d_m_d_p3d = np.zeros((2, 4), dtype=self.dtype)
        d_m_d_p3d[0, 0] = 1 / z
        d_m_d_p3d[0, 2] = -mx / z
        d_m_d_p3d[1, 1] = 1 / z
        d_m_d_p3d[1, 2] = -my / z

        return projection_from_normalized(self.params, mx, my, d_m_d_p3d)

    def unproject(self, proj, jacobians: bool = False) -> UnprojectionResult:
        uv = self._as_pixel(proj)
        if not np.isfinite(uv).all():
            return invalid_unprojection(self.dtype, self.N, jacobians)
        mx, my = normalized_from_pixel(self.params, uv)

        v = np.array([mx, my, 1], dtype=self.dtype)
        p3d, d_p3d_d_v = normalize_ray(v, jacobians)

        if not jacobians:
            return UnprojectionResult(p3d, True)

        d_p3d_d_proj, d_p3d_d_param = unprojection_jacobians(self.params, mx, my, d_p3d_d_v[:, :2])
        return UnprojectionResult(p3d, True, d_p3d_d_proj, d_p3d_d_param)

    @classmethod
    def test_projections(cls):
        return [
            cls([500, 500, 320, 240]),
            cls([600, 600, 352, 240]),
            cls([190.978, 190.973, 254.932, 256.897]),
        ]
