"""Unit tests for the thin-lens camera.

Tests cover:
- Parameter validation
- Orthonormal basis and viewport on the focus plane
- Pinhole behaviour with zero aperture
- Ray origins on the lens disk with a finite aperture
- Jittered rays for single-pixel images
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestThinLensCameraValidation:
    """Tests for ThinLensCamera parameter checks."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"vfov": 0.0},
            {"vfov": 180.0},
            {"aspect_ratio": 0.0},
            {"aperture": -0.1},
            {"focus_dist": 0.0},
            {"lookat": (0.0, 0.0, 0.0)},
            {"vup": (0.0, 0.0, 1.0)},
        ],
    )
    def test_invalid_parameters(self, kwargs):
        """Test out-of-range or degenerate parameters are rejected."""
        from weekend_tracer.camera.thin_lens import ThinLensCamera
        from weekend_tracer.core.config import ConfigurationError

        params = {"lookfrom": (0.0, 0.0, 0.0), "lookat": (0.0, 0.0, -1.0)}
        params.update(kwargs)
        with pytest.raises(ConfigurationError):
            ThinLensCamera(**params)

    def test_defaults(self):
        """Test default camera parameters."""
        from weekend_tracer.camera.thin_lens import ThinLensCamera

        camera = ThinLensCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0))
        assert camera.vup == (0.0, 1.0, 0.0)
        assert camera.vfov == 90.0
        assert camera.aperture == 0.0
        assert camera.focus_dist == 1.0


class TestSetupCamera:
    """Tests for the basis and viewport computed by setup_camera."""

    def test_basis_is_orthonormal(self):
        """Test u, v, w are unit length and mutually perpendicular."""
        from weekend_tracer.camera.thin_lens import ThinLensCamera, get_camera_info, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(13.0, 2.0, 3.0),
                lookat=(0.0, 0.0, 0.0),
                vfov=20.0,
                aspect_ratio=1.5,
                aperture=0.1,
                focus_dist=10.0,
            )
        )
        info = get_camera_info()
        u, v, w = (np.array(info[name]) for name in ("u", "v", "w"))

        for vec in (u, v, w):
            assert abs(np.linalg.norm(vec) - 1.0) < 1e-5
        assert abs(np.dot(u, v)) < 1e-5
        assert abs(np.dot(v, w)) < 1e-5
        assert abs(np.dot(u, w)) < 1e-5

        expected_w = np.array([13.0, 2.0, 3.0]) / math.sqrt(13.0**2 + 2.0**2 + 3.0**2)
        np.testing.assert_allclose(w, expected_w, atol=1e-5)
        assert abs(info["lens_radius"] - 0.05) < 1e-6

    def test_viewport_scaled_to_focus_plane(self):
        """Test the viewport spans 2 * tan(vfov / 2) * focus_dist vertically."""
        from weekend_tracer.camera.thin_lens import ThinLensCamera, get_camera_info, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vfov=90.0,
                aspect_ratio=2.0,
                focus_dist=3.0,
            )
        )
        info = get_camera_info()

        np.testing.assert_allclose(info["vertical"], (0.0, 6.0, 0.0), atol=1e-5)
        np.testing.assert_allclose(info["horizontal"], (12.0, 0.0, 0.0), atol=1e-5)
        np.testing.assert_allclose(info["lower_left"], (-6.0, -3.0, -3.0), atol=1e-5)


class TestRayGeneration:
    """Tests for primary ray generation."""

    def test_pinhole_center_ray(self):
        """Test zero aperture gives a deterministic ray toward lookat."""
        from weekend_tracer.camera.thin_lens import ThinLensCamera, get_ray, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(1.0, 2.0, 3.0),
                lookat=(1.0, 2.0, -1.0),
                vfov=40.0,
                aspect_ratio=1.0,
            )
        )

        origins = ti.Vector.field(3, dtype=ti.f32, shape=8)
        directions = ti.Vector.field(3, dtype=ti.f32, shape=8)

        @ti.kernel
        def test_kernel():
            for k in range(8):
                ray = get_ray(0.5, 0.5)
                origins[k] = ray.origin
                directions[k] = ti.math.normalize(ray.direction)

        test_kernel()
        np.testing.assert_allclose(origins.to_numpy(), np.tile([1.0, 2.0, 3.0], (8, 1)), atol=1e-5)
        np.testing.assert_allclose(
            directions.to_numpy(), np.tile([0.0, 0.0, -1.0], (8, 1)), atol=1e-5
        )

    def test_corner_rays(self):
        """Test (0, 0) and (1, 1) hit the lower-left and upper-right viewport corners."""
        from weekend_tracer.camera.thin_lens import ThinLensCamera, get_ray, setup_camera

        setup_camera(
            ThinLensCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0), aspect_ratio=2.0)
        )
        targets = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            low = get_ray(0.0, 0.0)
            high = get_ray(1.0, 1.0)
            targets[0] = low.origin + low.direction
            targets[1] = high.origin + high.direction

        test_kernel()
        np.testing.assert_allclose(targets[0].to_numpy(), (-2.0, -1.0, -1.0), atol=1e-5)
        np.testing.assert_allclose(targets[1].to_numpy(), (2.0, 1.0, -1.0), atol=1e-5)

    def test_aperture_origins_on_lens_disk(self):
        """Test origins lie within the lens radius and rays converge on the focus plane."""
        from weekend_tracer.camera.thin_lens import ThinLensCamera, get_ray, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                aperture=2.0,
                focus_dist=5.0,
            )
        )

        n = 500
        origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
        targets = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for k in range(n):
                ray = get_ray(0.5, 0.5)
                origins[k] = ray.origin
                targets[k] = ray.origin + ray.direction

        test_kernel()
        o = origins.to_numpy()
        radii = np.linalg.norm(o[:, :2], axis=1)
        assert (radii < 1.0 + 1e-5).all()
        assert radii.max() > 0.5
        np.testing.assert_allclose(o[:, 2], 0.0, atol=1e-6)
        # Every ray passes through the same point on the focus plane
        np.testing.assert_allclose(targets.to_numpy(), np.tile([0.0, 0.0, -5.0], (n, 1)), atol=1e-4)

    def test_jittered_ray_single_pixel_image(self):
        """Test a 1x1 image produces finite rays."""
        from weekend_tracer.camera.thin_lens import (
            ThinLensCamera,
            get_ray_jittered,
            setup_camera,
        )

        setup_camera(ThinLensCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0)))
        directions = ti.Vector.field(3, dtype=ti.f32, shape=16)

        @ti.kernel
        def test_kernel():
            for k in range(16):
                directions[k] = get_ray_jittered(0, 0, 1, 1).direction

        test_kernel()
        d = directions.to_numpy()
        assert np.isfinite(d).all()
        assert (d[:, 2] < 0.0).all()

    def test_jittered_rays_stay_within_pixel(self):
        """Test jitter keeps the viewport coordinates within [i, i + 1) / (w - 1)."""
        from weekend_tracer.camera.thin_lens import (
            ThinLensCamera,
            get_ray_jittered,
            setup_camera,
        )

        # Viewport spans x in [-1, 1] at z = -1
        setup_camera(
            ThinLensCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0), aspect_ratio=1.0)
        )
        n = 256
        xs = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for k in range(n):
                ray = get_ray_jittered(2, 0, 5, 5)
                xs[k] = ray.origin.x + ray.direction.x

        test_kernel()
        s = (xs.to_numpy() + 1.0) / 2.0
        assert (s >= 2.0 / 4.0 - 1e-5).all()
        assert (s <= 3.0 / 4.0 + 1e-5).all()


def test_get_camera_origin():
    """Test the origin lookup returns lookfrom."""
    from weekend_tracer.camera.thin_lens import ThinLensCamera, get_camera_origin, setup_camera

    setup_camera(ThinLensCamera(lookfrom=(3.0, 3.0, 2.0), lookat=(0.0, 0.0, -1.0)))
    result = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel():
        result[None] = get_camera_origin()

    test_kernel()
    np.testing.assert_allclose(result[None].to_numpy(), (3.0, 3.0, 2.0), atol=1e-6)


def test_camera_initialized_flag():
    """Test setup_camera marks the camera ready and reset_camera clears it."""
    from weekend_tracer.camera.thin_lens import (
        ThinLensCamera,
        is_camera_initialized,
        reset_camera,
        setup_camera,
    )

    assert not is_camera_initialized()
    setup_camera(ThinLensCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0)))
    assert is_camera_initialized()
    reset_camera()
    assert not is_camera_initialized()
