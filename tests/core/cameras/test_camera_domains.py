"""Model specific behaviour: domains, special cases and limiting branches."""

import numpy as np

from camlie.core.cameras import (
    DoubleSphereCamera,
    ExtendedUnifiedCamera,
    FovCamera,
    KannalaBrandtCamera4,
    PinholeCamera,
    UnifiedCamera,
)


def sphere_directions(n):
    """n roughly uniform unit rays (Fibonacci lattice), w = 0."""
    i = np.arange(n) + 0.5
    z = 1 - 2 * i / n
    azimuth = np.pi * (1 + np.sqrt(5)) * i
    rho = np.sqrt(1 - z * z)
    return np.stack([rho * np.cos(azimuth), rho * np.sin(azimuth), z, np.zeros(n)], axis=1)


def assert_invalid_unprojection(cam, proj):
    res = cam.unproject(proj, jacobians=True)

    assert not res.valid
    assert np.all(np.isnan(res.p3d))
    assert res.d_p3d_d_proj.shape == (4, 2)
    assert res.d_p3d_d_param.shape == (4, cam.N)
    assert np.all(np.isnan(res.d_p3d_d_param))


class TestPinhole:
    """Test the pinhole model on hand-computed values."""

    def setup_method(self):
        """Set up test camera."""
        self.cam = PinholeCamera([500, 500, 320, 240])

    def test_project_known_point(self):
        """Test projection of a known point."""
        res = self.cam.project([1.0, 1.0, 5.0, 1.0], jacobians=True)

        assert res.valid
        np.testing.assert_allclose(res.proj, [420.0, 340.0])

        expected = np.array([[100.0, 0.0, -20.0, 0.0], [0.0, 100.0, -20.0, 0.0]])
        np.testing.assert_allclose(res.d_proj_d_p3d, expected)
        np.testing.assert_allclose(res.d_proj_d_param, [[0.2, 0.0, 1.0, 0.0], [0.0, 0.2, 0.0, 1.0]])

    def test_unproject_known_pixel(self):
        """Unprojection returns the unit ray through the pixel."""
        res = self.cam.unproject([420.0, 340.0])

        assert res.valid
        np.testing.assert_allclose(res.p3d, np.array([1.0, 1.0, 5.0, 0.0]) / np.sqrt(27), atol=1e-9)

    def test_depth_threshold(self):
        """Rays with z below sqrt(eps) do not project."""
        assert not self.cam.project([1.0, 0.0, 0.0, 1.0]).valid
        assert not self.cam.project([1.0, 0.0, 1e-6, 1.0]).valid
        assert self.cam.project([1.0, 0.0, 1e-4, 1.0]).valid

    def test_unproject_everywhere(self):
        """Every pixel has a ray."""
        assert self.cam.unproject([-1e5, 1e5]).valid

    def test_repr(self):
        """Parameters are listed by name."""
        assert repr(self.cam) == "PinholeCamera(fx=500, fy=500, cx=320, cy=240)"


class TestUnifiedFamily:
    """Unified, extended unified and double sphere special cases."""

    def test_unified_alpha_zero_is_pinhole(self):
        """alpha = 0 reduces the unified model to a pinhole."""
        pinhole = PinholeCamera([250, 250, 319.5, 239.5])
        unified = UnifiedCamera([250, 250, 319.5, 239.5, 0.0])
        p = np.array([2.0, -3.0, 5.0, 0.0])

        np.testing.assert_allclose(unified.project(p).proj, pinhole.project(p).proj, rtol=1e-12)

    def test_eucm_beta_one_is_unified(self):
        """beta = 1 reduces the extended model to the unified one."""
        unified = UnifiedCamera([400, 410, 500, 490, 0.6])
        eucm = ExtendedUnifiedCamera([400, 410, 500, 490, 0.6, 1.0])

        for p in ([2.0, -3.0, 5.0, 0.0], [-4.0, 1.0, 0.5, 0.0]):
            np.testing.assert_allclose(eucm.project(p).proj, unified.project(p).proj, rtol=1e-12)

        pixel = [650.0, 300.0]
        np.testing.assert_allclose(eucm.unproject(pixel).p3d, unified.unproject(pixel).p3d, atol=1e-12)

    def test_double_sphere_xi_zero_is_unified(self):
        """xi = 0 collapses the two spheres into one."""
        unified = UnifiedCamera([300, 300, 512, 512, 0.6])
        ds = DoubleSphereCamera([300, 300, 512, 512, 0.0, 0.6])

        p = [1.0, 2.0, 3.0, 0.0]
        np.testing.assert_allclose(ds.project(p).proj, unified.project(p).proj, rtol=1e-12)

        pixel = [700.0, 400.0]
        np.testing.assert_allclose(ds.unproject(pixel).p3d, unified.unproject(pixel).p3d, atol=1e-12)

    def test_wide_angle_rays_project(self):
        """Rays past 90 degrees stay in the domain for large alpha."""
        cam = UnifiedCamera([250, 250, 319.5, 239.5, 0.3])
        assert cam.project([1.0, 0.0, -0.2, 1.0]).valid

        ds = DoubleSphereCamera([300, 300, 512, 512, 0.2, 0.6])
        assert ds.project([1.0, 0.0, -0.2, 1.0]).valid

    def test_projection_domain_boundary(self):
        """For alpha > 0.5 the domain ends at z = -w |p|."""
        cam = UnifiedCamera([250, 250, 319.5, 239.5, 0.9])
        w = (1 - 0.9) / 0.9

        angle_inside = np.arccos(-w) - 1e-3
        angle_outside = np.arccos(-w) + 1e-3
        inside = [np.sin(angle_inside), 0.0, np.cos(angle_inside), 1.0]
        outside = [np.sin(angle_outside), 0.0, np.cos(angle_outside), 1.0]

        assert cam.project(inside).valid
        assert not cam.project(outside).valid

    def test_unified_unproject_outside_image_circle(self):
        """Pixels beyond r^2 = 1 / (2 alpha - 1) have no ray."""
        cam = UnifiedCamera([250, 250, 319.5, 239.5, 0.9])
        assert_invalid_unprojection(cam, [319.5 + 2 * 250, 239.5])

    def test_eucm_unproject_outside_image_circle(self):
        """Pixels beyond r^2 = 1 / (beta (2 alpha - 1)) have no ray."""
        cam = ExtendedUnifiedCamera([380, 380, 512, 512, 0.6, 1.1])
        assert_invalid_unprojection(cam, [512 + 3 * 380, 512])

    def test_double_sphere_unproject_outside_image_circle(self):
        """Double sphere shares the unified lifting domain."""
        cam = DoubleSphereCamera([300, 300, 512, 512, 0.2, 0.6])
        assert_invalid_unprojection(cam, [512, 512 + 3 * 300])

    def test_unified_small_alpha_unprojects_everywhere(self):
        """For alpha <= 0.5 every pixel lifts to a ray."""
        cam = UnifiedCamera([250, 250, 319.5, 239.5, 0.3])
        assert cam.unproject([319.5 + 1e4, 239.5 - 1e4]).valid


class TestKannalaBrandt:
    """Kannala-Brandt specifics."""

    def test_zero_distortion_is_equidistant(self):
        """Without distortion the image radius equals the incidence angle."""
        cam = KannalaBrandtCamera4([400, 400, 512, 512, 0, 0, 0, 0])
        p = np.array([3.0, 4.0, 5.0, 0.0])
        theta = np.arctan2(5.0, 5.0)

        np.testing.assert_allclose(
            cam.project(p).proj, [512 + 400 * theta * 0.6, 512 + 400 * theta * 0.8]
        )

    def test_back_hemisphere(self):
        """Rays behind the image plane still project and lift back."""
        cam = KannalaBrandtCamera4([400, 400, 512, 512, 0, 0, 0, 0])
        p = np.array([1.0, 0.0, -5.0, 0.0])

        res = cam.project(p)
        assert res.valid

        back = cam.unproject(res.proj)
        assert back.valid
        np.testing.assert_allclose(back.p3d, p / np.linalg.norm(p), atol=1e-10)

    def test_rays_past_maximum_radius_invalid(self):
        """Where r(theta) stops increasing, projection is rejected."""
        cam = KannalaBrandtCamera4.test_projections()[0]
        res = cam.project([0.0, 0.5, -1.0, 0.0], jacobians=True)

        assert not res.valid
        assert np.all(np.isnan(res.proj))
        assert np.all(np.isnan(res.d_proj_d_param))

    def test_round_trip_over_sphere(self):
        """Every ray that projects lifts back to itself, also past 90 degrees."""
        cam = KannalaBrandtCamera4.test_projections()[0]
        accepted = 0

        for p in sphere_directions(400):
            res = cam.project(p)
            if not res.valid:
                continue
            accepted += 1

            back = cam.unproject(res.proj)
            assert back.valid, f"{p} projected to {res.proj} but did not lift back"
            np.testing.assert_allclose(back.p3d, p, atol=1e-8)

        assert accepted > 200
        assert accepted < 400
        assert cam.project([0.0, 1.0, -0.2, 0.0]).valid

    def test_non_monotonic_distortion_invalid(self):
        """Radii beyond the maximum of r(theta) have no solution."""
        cam = KannalaBrandtCamera4([400, 400, 512, 512, -0.5, 0, 0, 0])
        assert_invalid_unprojection(cam, [512 + 400, 512])

    def test_axis_branch_continuity(self):
        """Jacobians agree on both sides of the near-axis threshold."""
        cam = KannalaBrandtCamera4.test_projections()[1]
        below = cam.project([0.999999e-5, 0.0, 1.0, 0.0], jacobians=True)
        above = cam.project([1.000001e-5, 0.0, 1.0, 0.0], jacobians=True)

        np.testing.assert_allclose(below.d_proj_d_p3d, above.d_proj_d_p3d, atol=1e-6)
        np.testing.assert_allclose(below.d_proj_d_param, above.d_proj_d_param, atol=1e-6)


class TestFov:
    """FOV specifics."""

    def test_unproject_beyond_half_turn_invalid(self):
        """Pixels with rd * w >= pi / 2 have no ray."""
        cam = FovCamera([300, 300, 512, 512, 1.2])
        assert_invalid_unprojection(cam, [512 + 1.5 * 300, 512])

    def test_axis_branch_continuity(self):
        """Projection Jacobians agree on both sides of the near-axis threshold."""
        cam = FovCamera([300, 300, 512, 512, 1.2])
        below = cam.project([0.999999e-5, 0.0, 1.0, 0.0], jacobians=True)
        above = cam.project([1.000001e-5, 0.0, 1.0, 0.0], jacobians=True)

        np.testing.assert_allclose(below.d_proj_d_p3d, above.d_proj_d_p3d, atol=1e-6)
        np.testing.assert_allclose(below.d_proj_d_param, above.d_proj_d_param, atol=1e-6)

    def test_unproject_branch_continuity(self):
        """Unprojection Jacobians agree on both sides of the near-axis threshold."""
        cam = FovCamera([300, 300, 512, 512, 1.2])
        below = cam.unproject([512 + 300 * 0.999999e-5, 512.0], jacobians=True)
        above = cam.unproject([512 + 300 * 1.000001e-5, 512.0], jacobians=True)

        np.testing.assert_allclose(below.p3d, above.p3d, atol=1e-8)
        np.testing.assert_allclose(below.d_p3d_d_proj, above.d_p3d_d_proj, atol=1e-8)
        np.testing.assert_allclose(below.d_p3d_d_param, above.d_p3d_d_param, atol=1e-8)
