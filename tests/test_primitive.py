"""Tests for primitive kind dispatch."""

import pytest
import taichi as ti


def _dispatch(kind, p0, p1, p2, normal, radius, origin, direction):
    from raycaster.geometry.primitive import hit_primitive, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    hit_normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(k: ti.i32, a: vec3, b: vec3, c: vec3, n: vec3, r: ti.f32, o: vec3, d: vec3):
        record = hit_primitive(k, a, b, c, n, r, o, d)
        hit[None] = record.hit
        t_val[None] = record.t
        hit_normal[None] = record.normal

    test_kernel(
        int(kind),
        vec3(*p0),
        vec3(*p1),
        vec3(*p2),
        vec3(*normal),
        radius,
        vec3(*origin),
        vec3(*direction),
    )
    return hit[None], t_val[None], hit_normal[None]


ZERO = (0.0, 0.0, 0.0)
DOWN = (0.0, 0.0, -1.0)


class TestPrimitiveKind:
    """Tests for the PrimitiveKind tags."""

    def test_tag_values(self):
        from raycaster.geometry.primitive import PrimitiveKind

        assert [int(k) for k in PrimitiveKind] == [0, 1, 2, 3]
        assert PrimitiveKind(3) is PrimitiveKind.BOX


class TestHitPrimitive:
    """Tests for hit_primitive dispatching on the kind tag."""

    def test_sphere(self):
        from raycaster.geometry.primitive import PrimitiveKind

        hit, t, n = _dispatch(PrimitiveKind.SPHERE, ZERO, ZERO, ZERO, ZERO, 1.0, (0.0, 0.0, 5.0), DOWN)
        assert hit == 1
        assert t == pytest.approx(4.0, abs=1e-5)
        assert n[2] == pytest.approx(1.0, abs=1e-5)

    def test_plane(self):
        from raycaster.geometry.primitive import PrimitiveKind

        hit, t, n = _dispatch(PrimitiveKind.PLANE, ZERO, ZERO, ZERO, (0.0, 0.0, 1.0), 0.0, (0.0, 0.0, 5.0), DOWN)
        assert hit == 1
        assert t == pytest.approx(5.0, abs=1e-5)
        assert n[2] == pytest.approx(1.0, abs=1e-6)

    def test_triangle(self):
        from raycaster.geometry.primitive import PrimitiveKind

        hit, t, _ = _dispatch(
            PrimitiveKind.TRIANGLE,
            (0.0, 0.0, 0.0),
            (1.0, 0.0, 0.0),
            (0.0, 1.0, 0.0),
            (0.0, 0.0, 1.0),
            0.0,
            (0.25, 0.25, 1.0),
            DOWN,
        )
        assert hit == 1
        assert t == pytest.approx(1.0, abs=1e-6)

    def test_box(self):
        from raycaster.geometry.primitive import PrimitiveKind

        hit, t, n = _dispatch(
            PrimitiveKind.BOX, (-1.0, -1.0, -1.0), (1.0, 1.0, 1.0), ZERO, ZERO, 0.0, (0.0, 0.0, 5.0), DOWN
        )
        assert hit == 1
        assert t == pytest.approx(4.0, abs=1e-5)
        assert n[2] == pytest.approx(1.0, abs=1e-6)

    def test_unknown_kind_misses(self):
        hit, t, _ = _dispatch(99, ZERO, ZERO, ZERO, (0.0, 0.0, 1.0), 1.0, (0.0, 0.0, 5.0), DOWN)
        assert hit == 0
        assert t == float("inf")
