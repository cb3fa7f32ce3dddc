"""Unit tests for axis-aligned box intersection."""

import pytest
import taichi as ti


def _hit(origin, direction, corner0=(-1.0, -1.0, -1.0), corner1=(1.0, 1.0, 1.0)):
    """Run hit_box in a kernel and return (hit, t, point, normal)."""
    from raycaster.geometry.box import AxisAlignedBox, hit_box, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c0: vec3, c1: vec3):
        record = hit_box(o, d, AxisAlignedBox(corner0=c0, corner1=c1))
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal

    test_kernel(vec3(*origin), vec3(*direction), vec3(*corner0), vec3(*corner1))
    return hit[None], t_val[None], point[None], normal[None]


def _assert_normal(normal, expected):
    for k in range(3):
        assert normal[k] == pytest.approx(expected[k], abs=1e-6)


class TestBoxIntersection:
    """Tests for ray-box intersection."""

    def test_front_face_hit(self):
        hit, t, p, n = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(4.0, abs=1e-5)
        assert p[2] == pytest.approx(1.0, abs=1e-5)
        _assert_normal(n, (0.0, 0.0, 1.0))

    def test_corner_order_does_not_matter(self):
        hit, t, _, n = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (1.0, 1.0, 1.0), (-1.0, -1.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(4.0, abs=1e-5)
        _assert_normal(n, (0.0, 0.0, 1.0))

    def test_mixed_corners(self):
        hit, t, _, _ = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (1.0, -1.0, 1.0), (-1.0, 1.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(4.0, abs=1e-5)

    @pytest.mark.parametrize(
        "origin, direction, expected_normal",
        [
            ((-5.0, 0.5, 0.0), (1.0, 0.0, 0.0), (-1.0, 0.0, 0.0)),
            ((5.0, 0.0, -0.5), (-1.0, 0.0, 0.0), (1.0, 0.0, 0.0)),
            ((0.2, -5.0, 0.3), (0.0, 1.0, 0.0), (0.0, -1.0, 0.0)),
            ((0.0, 5.0, 0.0), (0.0, -1.0, 0.0), (0.0, 1.0, 0.0)),
            ((0.0, 0.0, -5.0), (0.0, 0.0, 1.0), (0.0, 0.0, -1.0)),
        ],
    )
    def test_each_face_outward_normal(self, origin, direction, expected_normal):
        hit, t, _, n = _hit(origin, direction)
        assert hit == 1
        assert t == pytest.approx(4.0, abs=1e-5)
        _assert_normal(n, expected_normal)

    def test_miss_beside_box(self):
        hit, _, _, _ = _hit((3.0, 0.0, 5.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_box_behind_origin(self):
        hit, _, _, _ = _hit((0.0, 0.0, 5.0), (0.0, 0.0, 1.0))
        assert hit == 0

    def test_origin_inside_hits_far_face(self):
        """From inside, the far face is hit and its normal points back into the box."""
        hit, t, _, n = _hit((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert hit == 1
        assert t == pytest.approx(1.0, abs=1e-5)
        _assert_normal(n, (-1.0, 0.0, 0.0))

    @pytest.mark.parametrize(
        "direction, normal",
        [
            ((0.0, -1.0, 0.0), (0.0, 1.0, 0.0)),
            ((0.0, 0.0, 1.0), (0.0, 0.0, -1.0)),
            ((0.0, 0.0, -1.0), (0.0, 0.0, 1.0)),
        ],
    )
    def test_inside_normal_faces_the_ray(self, direction, normal):
        hit, _, _, n = _hit((0.2, -0.3, 0.1), direction)
        assert hit == 1
        _assert_normal(n, normal)

    def test_oblique_hit_picks_nearest_face(self):
        """A diagonal ray entering through +z must not report a farther face."""
        hit, t, p, n = _hit((0.5, 0.5, 3.0), (-0.1, -0.1, -1.0))
        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert p[2] == pytest.approx(1.0, abs=1e-5)
        _assert_normal(n, (0.0, 0.0, 1.0))

    def test_large_coordinates(self):
        """Face containment tolerance scales with the coordinate magnitude."""
        hit, t, _, n = _hit(
            (-35.0, -35.0, 200.0),
            (0.0, 0.0, -1.0),
            (-50.0, -50.0, 100.0),
            (-20.0, -20.0, 70.0),
        )
        assert hit == 1
        assert t == pytest.approx(100.0, abs=1e-3)
        _assert_normal(n, (0.0, 0.0, 1.0))
