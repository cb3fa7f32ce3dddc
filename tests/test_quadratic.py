"""Unit tests for the numerically stable quadratic solver.

Tests cover:
- Two distinct roots, returned in ascending order
- Repeated root
- No real roots
- Degenerate leading coefficient
- Large linear coefficient where the textbook formula cancels
"""

import pytest
import taichi as ti


def _solve(a: float, b: float, c: float):
    from raycaster.core.quadratic import solve_quadratic

    found = ti.field(dtype=ti.i32, shape=())
    roots = ti.field(dtype=ti.f32, shape=2)

    @ti.kernel
    def test_kernel(a: ti.f32, b: ti.f32, c: ti.f32):
        f, r0, r1 = solve_quadratic(a, b, c)
        found[None] = f
        roots[0] = r0
        roots[1] = r1

    test_kernel(a, b, c)
    return found[None], roots[0], roots[1]


class TestSolveQuadratic:
    """Tests for solve_quadratic."""

    def test_two_roots_ascending(self):
        # (t - 2)(t - 6) = t^2 - 8t + 12
        found, r0, r1 = _solve(1.0, -8.0, 12.0)
        assert found == 1
        assert r0 == pytest.approx(2.0, abs=1e-5)
        assert r1 == pytest.approx(6.0, abs=1e-5)

    def test_two_roots_positive_b(self):
        # (t + 1)(t + 3) = t^2 + 4t + 3
        found, r0, r1 = _solve(1.0, 4.0, 3.0)
        assert found == 1
        assert r0 == pytest.approx(-3.0, abs=1e-5)
        assert r1 == pytest.approx(-1.0, abs=1e-5)

    def test_repeated_root(self):
        # (t - 3)^2 = t^2 - 6t + 9
        found, r0, r1 = _solve(1.0, -6.0, 9.0)
        assert found == 1
        assert r0 == pytest.approx(3.0, abs=1e-5)
        assert r1 == pytest.approx(3.0, abs=1e-5)

    def test_no_real_roots(self):
        found, r0, r1 = _solve(1.0, 0.0, 1.0)
        assert found == 0
        assert r0 == 0.0
        assert r1 == 0.0

    def test_degenerate_leading_coefficient(self):
        """a == 0 (zero-length direction) reports no roots instead of dividing by zero."""
        found, _, _ = _solve(0.0, 2.0, -4.0)
        assert found == 0

    def test_small_root_keeps_precision(self):
        """t^2 - 10000t + 1: the small root 1e-4 survives in f32."""
        found, r0, r1 = _solve(1.0, -10000.0, 1.0)
        assert found == 1
        assert r0 == pytest.approx(1e-4, rel=1e-3)
        assert r1 == pytest.approx(10000.0, rel=1e-5)
