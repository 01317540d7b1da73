"""Field-of-view (FOV) camera model.

Devernay, Faugeras: "Straight lines have to be straight", MVA 2001.
"""

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


class FovCamera(ParameterVector):
    """FOV camera, parameters [fx, fy, cx, cy, w].

    r = sqrt(x^2 + y^2)
    rd = atan2(2 tan(w / 2) r, z) / (w r)
    u = fx * rd * x + cx

    Defined for rays in front of the camera (z >= sqrt(eps)).
    """

    name = "fov"
    N = 5
    PARAM_NAMES = ("fx", "fy", "cx", "cy", "w")
    DEFAULT_DISTORTION = (1.0,)

    def project(self, p3d, jacobians: bool = False) -> ProjectionResult:
        p = self._as_point(p3d)
        if not np.isfinite(p[:3]).all():
            return invalid_projection(self.dtype, self.N, jacobians)
        x, y, z = p[0], p[1], p[2]
        w = self.params[4]

        if not z >= epsilon_sqrt(self.dtype):
            return invalid_projection(self.dtype, self.N, jacobians)

        r2 = x * x + y * y
        r = np.sqrt(r2)
        tan_w_half = np.tan(w / 2)
        d_tan_d_w = (1 + tan_w_half * tan_w_half) / 2

        if r > epsilon_sqrt(self.dtype):
            atan_wrd = np.arctan2(2 * tan_w_half * r, z)
            rd = atan_wrd / (w * r)

            if jacobians:
                denom = z * z + 4 * tan_w_half * tan_w_half * r2
                d_atan_d_r = 2 * tan_w_half * z / denom
                d_atan_d_z = -2 * tan_w_half * r / denom
                d_atan_d_w = 2 * r * z * d_tan_d_w / denom

                d_rd_d_r_by_r = (d_atan_d_r * r - atan_wrd) / (w * r2 * r)
                d_rd_d_z = d_atan_d_z / (w * r)
                d_rd_d_w = (d_atan_d_w - atan_wrd / w) / (w * r)
        else:
            # Limits of the expressions above for r -> 0
            rd = 2 * tan_w_half / (w * z)

            if jacobians:
                d_rd_d_r_by_r = -16 * tan_w_half ** 3 / (3 * w * z ** 3)
                d_rd_d_z = -2 * tan_w_half / (w * z * z)
                d_rd_d_w = (2 * d_tan_d_w * w - 2 * tan_w_half) / (w * w * z)

        mx = x * rd
        my = y * rd

        if not jacobians:
            return projection_from_normalized(self.params, mx, my)

        d_m_d_p3d = np.zeros((2, 4), dtype=self.dtype)
        d_m_d_p3d[0, 0] = rd + x * x * d_rd_d_r_by_r
        d_m_d_p3d[0, 1] = x * y * d_rd_d_r_by_r
        d_m_d_p3d[0, 2] = x * d_rd_d_z
        d_m_d_p3d[1, 0] = y * x * d_rd_d_r_by_r
        d_m_d_p3d[1, 1] = rd + y * y * d_rd_d_r_by_r
        d_m_d_p3d[1, 2] = y * d_rd_d_z

        d_m_d_dist = np.array([[x * d_rd_d_w], [y * d_rd_d_w]], dtype=self.dtype)

        return projection_from_normalized(self.params, mx, my, d_m_d_p3d, d_m_d_dist)

    def unproject(self, proj, jacobians: bool = False) -> UnprojectionResult:
        uv = self._as_pixel(proj)
        if not np.isfinite(uv).all():
            return invalid_unprojection(self.dtype, self.N, jacobians)
        mx, my = normalized_from_pixel(self.params, uv)
        w = self.params[4]

        rd = np.sqrt(mx * mx + my * my)
        if not rd * w < np.pi / 2:
            return invalid_unprojection(self.dtype, self.N, jacobians)

        tan_w_half = np.tan(w / 2)
        d_tan_d_w = (1 + tan_w_half * tan_w_half) / 2
        sin_rd_w = np.sin(rd * w)
        cos_rd_w = np.cos(rd * w)

        if rd > epsilon_sqrt(self.dtype):
            ru = sin_rd_w / (2 * tan_w_half * rd)
            if jacobians:
                d_ru_d_rd_by_rd = (w * cos_rd_w * rd - sin_rd_w) / (2 * tan_w_half * rd ** 3)
                d_ru_d_w = cos_rd_w / (2 * tan_w_half) - sin_rd_w * d_tan_d_w / (2 * tan_w_half ** 2 * rd)
                d_cos_d_rd_by_rd = -w * sin_rd_w / rd
        else:
            # sin(rd w) / rd -> w
            ru = w / (2 * tan_w_half)
            if jacobians:
                d_ru_d_rd_by_rd = -w ** 3 / (6 * tan_w_half)
                d_ru_d_w = 1 / (2 * tan_w_half) - w * d_tan_d_w / (2 * tan_w_half ** 2)
                d_cos_d_rd_by_rd = -w * w

        v = np.array([mx * ru, my * ru, cos_rd_w], dtype=self.dtype)
        p3d, d_p3d_d_v = normalize_ray(v, jacobians)

        if not jacobians:
            return UnprojectionResult(p3d, True)

        d_v_d_m = np.array([
            [ru + mx * mx * d_ru_d_rd_by_rd, mx * my * d_ru_d_rd_by_rd],
            [my * mx * d_ru_d_rd_by_rd, ru + my * my * d_ru_d_rd_by_rd],
            [mx * d_cos_d_rd_by_rd, my * d_cos_d_rd_by_rd]
        ], dtype=self.dtype)
        d_v_d_w = np.array([[mx * d_ru_d_w], [my * d_ru_d_w], [-rd * sin_rd_w]], dtype=self.dtype)

        d_p3d_d_m = d_p3d_d_v @ d_v_d_m
        d_p3d_d_dist = d_p3d_d_v @ d_v_d_w

        d_p3d_d_proj, d_p3d_d_param = unprojection_jacobians(self.params, mx, my, d_p3d_d_m, d_p3d_d_dist)
        return UnprojectionResult(p3d, True, d_p3d_d_proj, d_p3d_d_param)

    @classmethod
    def test_projections(cls):
        return [
            cls([379.045, 379.008, 505.512, 509.969, 0.9259487501905697]),
            cls([300, 300, 512, 512, 1.2]),
            cls([450, 450, 640, 480, 0.5]),
        ]
