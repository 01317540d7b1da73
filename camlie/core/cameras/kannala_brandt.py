"""Kannala-Brandt (equidistant) camera model with four distortion coefficients."""

import logging

import numpy as np

from ..math.numerics import epsilon, epsilon_sqrt
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

logger = logging.getLogger(__name__)


def _distorted_angle(theta, k):
    """Return r(theta) = theta + k1 theta^3 + ... + k4 theta^9 and dr/dtheta."""
    k1, k2, k3, k4 = k
    theta2 = theta * theta
    r_theta = theta * (1 + theta2 * (k1 + theta2 * (k2 + theta2 * (k3 + theta2 * k4))))
    d_r_d_theta = 1 + theta2 * (3 * k1 + theta2 * (5 * k2 + theta2 * (7 * k3 + 9 * theta2 * k4)))
    return r_theta, d_r_d_theta


class KannalaBrandtCamera4(ParameterVector):
    """Kannala-Brandt camera, parameters [fx, fy, cx, cy, k1, k2, k3, k4].

    theta = atan2(sqrt(x^2 + y^2), z)
    r(theta) = theta + k1 theta^3 + k2 theta^5 + k3 theta^7 + k4 theta^9
    u = fx * r(theta) * x / sqrt(x^2 + y^2) + cx

    Rays project while r(theta) is still increasing; unprojection inverts
    r(theta) on that range with Newton iterations.
    """

    name = "kb4"
    N = 8
    PARAM_NAMES = ("fx", "fy", "cx", "cy", "k1", "k2", "k3", "k4")
    DEFAULT_DISTORTION = (0.0, 0.0, 0.0, 0.0)

    MAX_ITERATIONS = 20

    def project(self, p3d, jacobians: bool = False) -> ProjectionResult:
        p = self._as_point(p3d)
        if not np.isfinite(p[:3]).all():
            return invalid_projection(self.dtype, self.N, jacobians)
        x, y, z = p[0], p[1], p[2]
        k = self.params[4:]

        r2 = x * x + y * y
        r = np.sqrt(r2)

        if not r > epsilon_sqrt(self.dtype):
            # On the optical axis the model degenerates to a pinhole.
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
            d_m_d_dist = np.zeros((2, 4), dtype=self.dtype)
            return projection_from_normalized(self.params, mx, my, d_m_d_p3d, d_m_d_dist)

        theta = np.arctan2(r, z)
        r_theta, d_r_d_theta = _distorted_angle(theta, k)
        if not d_r_d_theta > 0:
            # r(theta) has to be increasing for unproject to invert it
            return invalid_projection(self.dtype, self.N, jacobians)

        scale = r_theta / r
        mx = x * scale
        my = y * scale

        if not jacobians:
            return projection_from_normalized(self.params, mx, my)

        denom = r2 + z * z
        d_theta_d_r = z / denom
        d_theta_d_z = -r / denom

        d_scale_d_r_by_r = (d_r_d_theta * d_theta_d_r * r - r_theta) / (r2 * r)
        d_scale_d_z = d_r_d_theta * d_theta_d_z / r

        d_m_d_p3d = np.zeros((2, 4), dtype=self.dtype)
        d_m_d_p3d[0, 0] = scale + x * x * d_scale_d_r_by_r
        d_m_d_p3d[0, 1] = x * y * d_scale_d_r_by_r
        d_m_d_p3d[0, 2] = x * d_scale_d_z
        d_m_d_p3d[1, 0] = y * x * d_scale_d_r_by_r
        d_m_d_p3d[1, 1] = scale + y * y * d_scale_d_r_by_r
        d_m_d_p3d[1, 2] = y * d_scale_d_z

        theta_powers = theta ** np.array([3, 5, 7, 9], dtype=self.dtype)
        d_m_d_dist = np.outer([x / r, y / r], theta_powers).astype(self.dtype)

        return projection_from_normalized(self.params, mx, my, d_m_d_p3d, d_m_d_dist)

    def _solve_theta(self, r_theta):
        """Newton solve of r(theta) = r_theta starting at theta = r_theta."""
        k = self.params[4:]
        eps = epsilon(self.dtype)

        theta = r_theta
        for _ in range(self.MAX_ITERATIONS):
            f, d_f_d_theta = _distorted_angle(theta, k)
            step = (f - r_theta) / d_f_d_theta
            theta = theta - step
            if abs(step) <= eps * max(1, abs(theta)):
                return theta, True

        logger.debug("kb4 unprojection did not converge for r=%g (theta=%g)", r_theta, theta)
        return theta, False

    def unproject(self, proj, jacobians: bool = False) -> UnprojectionResult:
        uv = self._as_pixel(proj)
        if not np.isfinite(uv).all():
            return invalid_unprojection(self.dtype, self.N, jacobians)
        mx, my = normalized_from_pixel(self.params, uv)
        k = self.params[4:]

        r_theta = np.sqrt(mx * mx + my * my)

        if not r_theta > epsilon_sqrt(self.dtype):
            # theta ~= r_theta and sin(theta) / r_theta ~= 1 near the axis
            cos_theta = np.cos(r_theta)
            p3d = np.array([mx, my, cos_theta, 0], dtype=self.dtype)
            if not jacobians:
                return UnprojectionResult(p3d, True)

            d_p3d_d_m = np.zeros((4, 2), dtype=self.dtype)
            d_p3d_d_m[0, 0] = 1
            d_p3d_d_m[1, 1] = 1
            d_p3d_d_m[2, 0] = -mx
            d_p3d_d_m[2, 1] = -my
            d_p3d_d_dist = np.zeros((4, 4), dtype=self.dtype)

            d_p3d_d_proj, d_p3d_d_param = unprojection_jacobians(self.params, mx, my, d_p3d_d_m, d_p3d_d_dist)
            return UnprojectionResult(p3d, True, d_p3d_d_proj, d_p3d_d_param)

        theta, converged = self._solve_theta(r_theta)
        _, d_r_d_theta = _distorted_angle(theta, k)

        if not (converged and 0 <= theta <= np.pi and d_r_d_theta > 0):
            return invalid_unprojection(self.dtype, self.N, jacobians)

        sin_theta = np.sin(theta)
        cos_theta = np.cos(theta)
        scale = sin_theta / r_theta

        p3d = np.array([mx * scale, my * scale, cos_theta, 0], dtype=self.dtype)

        if not jacobians:
            return UnprojectionResult(p3d, True)

        d_theta_d_r = 1 / d_r_d_theta
        d_scale_d_r_by_r = (cos_theta * d_theta_d_r * r_theta - sin_theta) / (r_theta * r_theta * r_theta)
        d_cos_d_r_by_r = -sin_theta * d_theta_d_r / r_theta

        d_p3d_d_m = np.zeros((4, 2), dtype=self.dtype)
        d_p3d_d_m[0, 0] = scale + mx * mx * d_scale_d_r_by_r
        d_p3d_d_m[0, 1] = mx * my * d_scale_d_r_by_r
        d_p3d_d_m[1, 0] = my * mx * d_scale_d_r_by_r
        d_p3d_d_m[1, 1] = scale + my * my * d_scale_d_r_by_r
        d_p3d_d_m[2, 0] = mx * d_cos_d_r_by_r
        d_p3d_d_m[2, 1] = my * d_cos_d_r_by_r

        # Implicit function theorem on r(theta, k) = r_theta
        d_theta_d_k = -theta ** np.array([3, 5, 7, 9], dtype=self.dtype) * d_theta_d_r
        d_p3d_d_theta = np.array([
            mx * cos_theta / r_theta,
            my * cos_theta / r_theta,
            -sin_theta,
            0
        ], dtype=self.dtype)
        d_p3d_d_dist = np.outer(d_p3d_d_theta, d_theta_d_k).astype(self.dtype)

        d_p3d_d_proj, d_p3d_d_param = unprojection_jacobians(self.params, mx, my, d_p3d_d_m, d_p3d_d_dist)
        return UnprojectionResult(p3d, True, d_p3d_d_proj, d_p3d_d_param)

    @classmethod
    def test_projections(cls):
        return [
            cls([379.045, 379.008, 505.512, 509.969,
                 0.00693023, -0.0013828, -0.000272596, -0.000452646]),
            cls([300, 300, 640, 480, 0.1, -0.05, 0.01, -0.001]),
            cls([400, 400, 512, 512, 0, 0, 0, 0]),
        ]
