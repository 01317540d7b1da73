"""Tests for SO(3) exp/log and the right/left Jacobians."""

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from camlie.core.math.jacobians import finite_difference_jacobian
from camlie.core.math.numerics import epsilon
from camlie.core.math.so3 import (
    hat,
    left_jacobian_inv_so3,
    left_jacobian_so3,
    right_jacobian_inv_so3,
    right_jacobian_so3,
    so3_exp,
    so3_log,
    vee,
)

ROTATIONS = [
    np.array([0.1, 0.2, 0.3]),
    np.array([1.0, -0.5, 2.0]),
    np.array([-0.7, 0.0, 0.2]),
    np.array([1e-4, -2e-4, 3e-4]),
]


class TestExpLog:
    """Test the SO(3) exponential and logarithm."""

    def test_hat_vee(self):
        """Test skew-symmetric matrix construction."""
        v = np.array([1.0, 2.0, 3.0])
        S = hat(v)

        expected = np.array([[0, -3, 2], [3, 0, -1], [-2, 1, 0]])
        np.testing.assert_allclose(S, expected)
        np.testing.assert_allclose(S, -S.T)
        np.testing.assert_allclose(vee(S), v)

    def test_hat_is_cross_product(self):
        """hat(a) @ b equals a x b."""
        a = np.array([0.3, -1.2, 0.5])
        b = np.array([2.0, 0.1, -0.4])

        np.testing.assert_allclose(hat(a) @ b, np.cross(a, b))

    def test_exp_matches_scipy(self):
        """Exponential agrees with scipy's rotation vector conversion."""
        for phi in ROTATIONS:
            np.testing.assert_allclose(
                so3_exp(phi), Rotation.from_rotvec(phi).as_matrix(), atol=1e-12
            )

    def test_exp_is_rotation(self):
        """Exponential yields an orthogonal matrix with unit determinant."""
        R = so3_exp([1.5, 2.5, 3.5])

        assert abs(np.linalg.det(R) - 1.0) < 1e-10
        np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-10)

    def test_log_round_trip(self):
        """log(exp(phi)) recovers phi for angles below pi."""
        for phi in ROTATIONS:
            np.testing.assert_allclose(so3_log(so3_exp(phi)), phi, atol=1e-12)

    def test_identity(self):
        """Zero rotation maps to the identity and back."""
        np.testing.assert_allclose(so3_exp(np.zeros(3)), np.eye(3))
        np.testing.assert_allclose(so3_log(np.eye(3)), np.zeros(3))

    def test_invalid_shapes(self):
        """Test error handling for invalid input shapes."""
        with pytest.raises(ValueError):
            so3_exp([1.0, 2.0])

        with pytest.raises(ValueError):
            so3_log(np.eye(4))

        with pytest.raises(ValueError):
            hat(np.zeros(4))

        with pytest.raises(ValueError):
            vee(np.zeros((2, 2)))


class TestSO3Jacobians:
    """Test the SO(3) right and left Jacobians and their inverses."""

    def setup_method(self):
        """Set up derivative check tolerances."""
        self.h = 1e-8
        self.atol = 1e-6

    def test_right_jacobian_numeric(self):
        """exp(phi + eps) ~= exp(phi) exp(Jr eps)."""
        for phi in ROTATIONS:
            R_inv = so3_exp(phi).T

            def func(eps):
                return so3_log(R_inv @ so3_exp(phi + eps))

            J_numeric = finite_difference_jacobian(func, np.zeros(3), self.h)
            np.testing.assert_allclose(right_jacobian_so3(phi), J_numeric, atol=self.atol)

    def test_left_jacobian_numeric(self):
        """exp(phi + eps) ~= exp(Jl eps) exp(phi)."""
        for phi in ROTATIONS:
            R_inv = so3_exp(phi).T

            def func(eps):
                return so3_log(so3_exp(phi + eps) @ R_inv)

            J_numeric = finite_difference_jacobian(func, np.zeros(3), self.h)
            np.testing.assert_allclose(left_jacobian_so3(phi), J_numeric, atol=self.atol)

    def test_right_jacobian_inv_numeric(self):
        """log(exp(phi) exp(eps)) ~= phi + Jr^-1 eps."""
        for phi in ROTATIONS:
            R = so3_exp(phi)

            def func(eps):
                return so3_log(R @ so3_exp(eps))

            J_numeric = finite_difference_jacobian(func, np.zeros(3), self.h)
            np.testing.assert_allclose(right_jacobian_inv_so3(phi), J_numeric, atol=self.atol)

    def test_left_jacobian_inv_numeric(self):
        """log(exp(eps) exp(phi)) ~= phi + Jl^-1 eps."""
        for phi in ROTATIONS:
            R = so3_exp(phi)

            def func(eps):
                return so3_log(so3_exp(eps) @ R)

            J_numeric = finite_difference_jacobian(func, np.zeros(3), self.h)
            np.testing.assert_allclose(left_jacobian_inv_so3(phi), J_numeric, atol=self.atol)

    def test_inverse_products(self):
        """Each Jacobian times its inverse is the identity."""
        for phi in ROTATIONS:
            np.testing.assert_allclose(
                right_jacobian_so3(phi) @ right_jacobian_inv_so3(phi), np.eye(3), atol=1e-10
            )
            np.testing.assert_allclose(
                left_jacobian_so3(phi) @ left_jacobian_inv_so3(phi), np.eye(3), atol=1e-10
            )

    def test_left_is_right_of_negated(self):
        """Jl(phi) = Jr(-phi) = Jr(phi)^T."""
        for phi in ROTATIONS:
            np.testing.assert_allclose(left_jacobian_so3(phi), right_jacobian_so3(-phi), atol=1e-14)
            np.testing.assert_allclose(left_jacobian_so3(phi), right_jacobian_so3(phi).T, atol=1e-14)
            np.testing.assert_allclose(
                left_jacobian_inv_so3(phi), right_jacobian_inv_so3(-phi), atol=1e-14
            )

    def test_exact_identity_at_small_angles(self):
        """At or below epsilon every Jacobian is exactly the identity."""
        small = [np.zeros(3), np.array([1e-11, 0.0, 0.0]), np.array([0.0, 0.0, 1e-10])]
        jacobians = [
            right_jacobian_so3,
            right_jacobian_inv_so3,
            left_jacobian_so3,
            left_jacobian_inv_so3,
        ]
        for phi in small:
            for jacobian in jacobians:
                np.testing.assert_array_equal(jacobian(phi), np.eye(3))

    def test_continuous_above_epsilon(self):
        """Just above epsilon the closed forms stay close to the identity."""
        phi = np.array([2e-10, -1e-10, 1e-10])
        assert np.linalg.norm(phi) > epsilon(np.float64)

        for jacobian in (right_jacobian_so3, right_jacobian_inv_so3,
                         left_jacobian_so3, left_jacobian_inv_so3):
            J = jacobian(phi)
            assert np.all(np.isfinite(J))
            np.testing.assert_allclose(J, np.eye(3), atol=1e-9)

    def test_float32(self):
        """Single precision input gives single precision Jacobians."""
        phi = np.array([0.1, 0.2, 0.3], dtype=np.float32)
        J = right_jacobian_so3(phi)

        assert J.dtype == np.float32
        np.testing.assert_allclose(J, right_jacobian_so3(phi.astype(np.float64)), atol=1e-6)

    def test_float32_small_angle_threshold(self):
        """The single precision threshold is larger than the double one."""
        phi = np.array([5e-6, 0.0, 0.0], dtype=np.float32)

        np.testing.assert_array_equal(right_jacobian_so3(phi), np.eye(3, dtype=np.float32))
        assert not np.array_equal(right_jacobian_so3(phi.astype(np.float64)), np.eye(3))
