"""Double sphere camera model.

Usenko, Demmel, Cremers: "The Double Sphere Camera Model", 3DV 2018.
"""

import numpy as np

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


class DoubleSphereCamera(ParameterVector):
    """Double sphere camera, parameters [fx, fy, cx, cy, xi, alpha].

    d1 = |p|
    d2 = |(x, y, xi d1 + z)|
    u = fx * x / (alpha d2 + (1 - alpha) (xi d1 + z)) + cx
    """

    name = "ds"
    N = 6
    PARAM_NAMES = ("fx", "fy", "cx", "cy", "xi", "alpha")
    DEFAULT_DISTORTION = (0.0, 0.5)

    def project(self, p3d, jacobians: bool = False) -> ProjectionResult:
        p = self._as_point(p3d)
        if not np.isfinite(p[:3]).all():
            return invalid_projection(self.dtype, self.N, jacobians)
        x, y, z = p[0], p[1], p[2]
        xi, alpha = self.params[4], self.params[5]

        r2 = x * x + y * y
        d1 = np.sqrt(r2 + z * z)

        w1 = projection_domain_weight(alpha)
        w2 = (w1 + xi) / np.sqrt(2 * w1 * xi + xi * xi + 1)
        if not z > -w2 * d1:
            return invalid_projection(self.dtype, self.N, jacobians)

        k = xi * d1 + z
        d2 = np.sqrt(r2 + k * k)
        norm = alpha * d2 + (1 - alpha) * k

        mx = x / norm
        my = y / norm

        if not jacobians:
            return projection_from_normalized(self.params, mx, my)

        d_d1_d_p3d = np.array([x, y, z], dtype=self.dtype) / d1
        d_k_d_p3d = xi * d_d1_d_p3d
        d_k_d_p3d[2] += 1
        d_d2_d_p3d = (np.array([x, y, 0], dtype=self.dtype) + k * d_k_d_p3d) / d2
        d_norm_d_p3d = alpha * d_d2_d_p3d + (1 - alpha) * d_k_d_p3d

        d_m_d_p3d = np.zeros((2, 4), dtype=self.dtype)
        d_m_d_p3d[0, :3] = -mx / norm * d_norm_d_p3d
        d_m_d_p3d[1, :3] = -my / norm * d_norm_d_p3d
        d_m_d_p3d[0, 0] += 1 / norm
        d_m_d_p3d[1, 1] += 1 / norm

        d_norm_d_dist = np.array([
            alpha * k * d1 / d2 + (1 - alpha) * d1,
            d2 - k
        ], dtype=self.dtype)
        d_m_d_dist = -np.array([[mx], [my]], dtype=self.dtype) / norm * d_norm_d_dist

        return projection_from_normalized(self.params, mx, my, d_m_d_p3d, d_m_d_dist)

    def unproject(self, proj, jacobians: bool = False) -> UnprojectionResult:
        uv = self._as_pixel(proj)
        if not np.isfinite(uv).all():
            return invalid_unprojection(self.dtype, self.N, jacobians)
        mx, my = normalized_from_pixel(self.params, uv)
        xi, alpha = self.params[4], self.params[5]

        r2 = mx * mx + my * my
        valid, mz, dmz_dr2, dmz_dalpha, _ = lift_to_z(r2, alpha, jacobians=jacobians)
        if not valid:
            return invalid_unprojection(self.dtype, self.N, jacobians)

        mz2 = mz * mz
        radicand = mz2 + (1 - xi * xi) * r2
        if not radicand > 0:
            return invalid_unprojection(self.dtype, self.N, jacobians)

        t = np.sqrt(radicand)
        q = mz2 + r2
        scale = (mz * xi + t) / q

        p3d = np.array([scale * mx, scale * my, scale * mz - xi, 0], dtype=self.dtype)

        if not jacobians:
            return UnprojectionResult(p3d, True)

        q2 = q * q
        d_scale_d_mz = ((xi + mz / t) * q - (mz * xi + t) * 2 * mz) / q2
        d_scale_d_r2 = ((1 - xi * xi) / (2 * t) * q - (mz * xi + t)) / q2 + d_scale_d_mz * dmz_dr2
        d_z_d_r2 = d_scale_d_r2 * mz + scale * dmz_dr2

        d_p3d_d_m = np.zeros((4, 2), dtype=self.dtype)
        d_p3d_d_m[0, 0] = scale + 2 * mx * mx * d_scale_d_r2
        d_p3d_d_m[0, 1] = 2 * mx * my * d_scale_d_r2
        d_p3d_d_m[1, 0] = 2 * my * mx * d_scale_d_r2
        d_p3d_d_m[1, 1] = scale + 2 * my * my * d_scale_d_r2
        d_p3d_d_m[2, 0] = 2 * mx * d_z_d_r2
        d_p3d_d_m[2, 1] = 2 * my * d_z_d_r2

        d_scale_d_xi = (mz - xi * r2 / t) / q
        d_scale_d_alpha = d_scale_d_mz * dmz_dalpha

        d_p3d_d_dist = np.zeros((4, 2), dtype=self.dtype)
        d_p3d_d_dist[0, 0] = mx * d_scale_d_xi
        d_p3d_d_dist[1, 0] = my * d_scale_d_xi
        d_p3d_d_dist[2, 0] = mz * d_scale_d_xi - 1
        d_p3d_d_dist[0, 1] = mx * d_scale_d_alpha
        d_p3d_d_dist[1, 1] = my * d_scale_d_alpha
        d_p3d_d_dist[2, 1] = (d_scale_d_mz * mz + scale) * dmz_dalpha

        d_p3d_d_proj, d_p3d_d_param = unprojection_jacobians(self.params, mx, my, d_p3d_d_m, d_p3d_d_dist)
        return UnprojectionResult(p3d, True, d_p3d_d_proj, d_p3d_d_param)

    @classmethod
    def test_projections(cls):
        return [
            cls([158.28600034966977, 158.2743455478755, 254.96116578191653,
                 256.9399222802073, -0.17867433224045377, 0.5883967769632435]),
            cls([300, 300, 512, 512, 0.2, 0.6]),
            cls([350, 340, 640, 480, 0.0, 0.5]),
            cls([250, 250, 400, 400, -0.2, 0.4]),
        ]
