"""Unit tests for the pinhole camera module.

Tests cover:
- Camera validation
- Viewport frame computation
- Ray generation through pixel centres, in image row order
- Kernel-side pixel ray generation
"""

import math

import numpy as np
import pytest
import taichi as ti


def _camera(**kwargs):
    from raycaster.camera.pinhole import PinholeCamera

    values = {
        "lookfrom": (0.0, 0.0, 200.0),
        "lookat": (0.0, 0.0, 0.0),
        "vup": (0.0, 1.0, 0.0),
        "vfov": 90.0,
        "aspect_ratio": 1.0,
    }
    values.update(kwargs)
    return PinholeCamera(**values)


class TestCameraSetup:
    """Tests for camera validation and frame computation."""

    def test_default_camera(self):
        from raycaster.camera.pinhole import DEFAULT_LOOKFROM, DEFAULT_VFOV, default_camera

        camera = default_camera()
        assert camera.lookfrom == DEFAULT_LOOKFROM
        assert camera.vfov == DEFAULT_VFOV
        assert camera.aspect_ratio == pytest.approx(640.0 / 480.0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"vfov": 0.0},
            {"vfov": 180.0},
            {"aspect_ratio": 0.0},
            {"lookat": (0.0, 0.0, 200.0)},
            {"vup": (0.0, 0.0, 1.0)},
        ],
    )
    def test_invalid_camera(self, kwargs):
        with pytest.raises(ValueError):
            _camera(**kwargs)

    def test_frame_looking_down_negative_z(self):
        """90 degree square viewport at unit distance is 2 x 2."""
        from raycaster.camera.pinhole import compute_frame

        frame = compute_frame(_camera())
        np.testing.assert_allclose(frame.origin, [0.0, 0.0, 200.0], atol=1e-5)
        np.testing.assert_allclose(frame.lower_left, [-1.0, -1.0, 199.0], atol=1e-5)
        np.testing.assert_allclose(frame.horizontal, [2.0, 0.0, 0.0], atol=1e-5)
        np.testing.assert_allclose(frame.vertical, [0.0, 2.0, 0.0], atol=1e-5)

    def test_frame_aspect_ratio(self):
        from raycaster.camera.pinhole import compute_frame

        frame = compute_frame(_camera(aspect_ratio=2.0))
        assert np.linalg.norm(frame.horizontal) == pytest.approx(4.0, abs=1e-5)
        assert np.linalg.norm(frame.vertical) == pytest.approx(2.0, abs=1e-5)

    def test_frame_field_of_view(self):
        from raycaster.camera.pinhole import compute_frame

        frame = compute_frame(_camera(vfov=60.0))
        expected = 2.0 * math.tan(math.radians(30.0))
        assert np.linalg.norm(frame.vertical) == pytest.approx(expected, abs=1e-5)


class TestGenerateRays:
    """Tests for Python-side ray generation."""

    def test_shapes_and_unit_directions(self):
        from raycaster.camera.pinhole import default_camera, generate_rays

        origins, directions = generate_rays(default_camera(), 8, 6)
        assert origins.shape == (48, 3)
        assert directions.shape == (48, 3)
        assert origins.dtype == np.float32
        np.testing.assert_allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-5)
        np.testing.assert_allclose(origins, np.tile([0.0, 0.0, 200.0], (48, 1)))

    def test_centre_pixel_looks_at_target(self):
        from raycaster.camera.pinhole import generate_rays

        _, directions = generate_rays(_camera(), 3, 3)
        np.testing.assert_allclose(directions[4], [0.0, 0.0, -1.0], atol=1e-6)

    def test_top_row_first(self):
        """First ray goes through the top-left pixel, last through bottom-right."""
        from raycaster.camera.pinhole import generate_rays

        _, directions = generate_rays(_camera(), 2, 2)
        expected = np.array([-0.5, 0.5, -1.0]) / math.sqrt(1.5)
        np.testing.assert_allclose(directions[0], expected, atol=1e-5)
        assert directions[1][0] > 0.0 and directions[1][1] > 0.0
        assert directions[3][0] > 0.0 and directions[3][1] < 0.0

    @pytest.mark.parametrize("size", [(0, 4), (4, 0), (-1, 2)])
    def test_invalid_size(self, size):
        from raycaster.camera.pinhole import generate_rays

        with pytest.raises(ValueError):
            generate_rays(_camera(), *size)


class TestKernelRays:
    """Tests for ray generation inside kernels."""

    def test_get_pixel_ray_centre(self):
        from raycaster.camera.pinhole import compute_frame, get_pixel_ray, vec3

        frame = compute_frame(_camera())
        origin_result = ti.field(dtype=ti.math.vec3, shape=())
        dir_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(origin: vec3, lower_left: vec3, horizontal: vec3, vertical: vec3):
            ray = get_pixel_ray(origin, lower_left, horizontal, vertical, 1, 1, 3, 3)
            origin_result[None] = ray.origin
            dir_result[None] = ray.direction

        test_kernel(
            vec3(*frame.origin.tolist()),
            vec3(*frame.lower_left.tolist()),
            vec3(*frame.horizontal.tolist()),
            vec3(*frame.vertical.tolist()),
        )
        o = origin_result[None]
        d = dir_result[None]
        assert abs(o[2] - 200.0) < 1e-4
        assert abs(d[0]) < 1e-6
        assert abs(d[1]) < 1e-6
        assert abs(d[2] + 1.0) < 1e-6

    def test_get_ray_corners(self):
        """(s, t) = (0, 0) is the bottom-left viewport corner."""
        from raycaster.camera.pinhole import compute_frame, get_ray, vec3

        frame = compute_frame(_camera())
        dir_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(origin: vec3, lower_left: vec3, horizontal: vec3, vertical: vec3):
            dir_result[None] = get_ray(origin, lower_left, horizontal, vertical, 0.0, 0.0).direction

        test_kernel(
            vec3(*frame.origin.tolist()),
            vec3(*frame.lower_left.tolist()),
            vec3(*frame.horizontal.tolist()),
            vec3(*frame.vertical.tolist()),
        )
        d = dir_result[None]
        inv = 1.0 / math.sqrt(3.0)
        assert abs(d[0] + inv) < 1e-5
        assert abs(d[1] + inv) < 1e-5
        assert abs(d[2] + inv) < 1e-5
