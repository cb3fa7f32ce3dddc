"""Double-sided triangle primitive with barycentric containment test.

Ray-triangle intersection runs in two steps:
1. Intersect the ray with the plane containing the triangle.
2. Check that the plane hit point lies inside the triangle.

For step 2 the hit point P is written as P = A + s*u + t*v with edges
u = B - A and v = C - A. Taking dot products of w = P - A with u and v gives
a 2x2 system in (s, t) whose matrix is the Gram matrix of the edges:

    uu = u.u   uv = u.v   vv = v.v   wu = w.u   wv = w.v
    denom = uv^2 - uu*vv
    s = (uv*wv - vv*wu) / denom
    t = (uv*wu - uu*wv) / denom

P is inside the triangle when s >= 0, t >= 0 and s + t <= 1.

The normal is precomputed at construction. Its orientation does not matter:
the triangle is hit from both sides and the shader flips the normal toward
the light.
"""

import taichi as ti
import taichi.math as tm

from .plane import PARALLEL_EPSILON
from .sphere import HitRecord, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Triangle:
    """A triangle given by its three vertices.

    Attributes:
        a: First vertex (vec3).
        b: Second vertex (vec3).
        c: Third vertex (vec3).
        normal: normalize(cross(b - a, c - a)), computed at construction.
    """

    a: vec3
    b: vec3
    c: vec3
    normal: vec3


@ti.func
def triangle_normal(a: vec3, b: vec3, c: vec3) -> vec3:
    """Compute the unit normal of triangle abc (right-hand rule)."""
    return tm.normalize(tm.cross(b - a, c - a))


@ti.func
def barycentric_coordinates(point: vec3, a: vec3, b: vec3, c: vec3):
    """Compute the (s, t) barycentric coordinates of a point in triangle abc.

    The point is assumed to lie in the triangle's plane.

    Returns:
        Tuple (s, t) with point = a + s * (b - a) + t * (c - a).
    """
    u = b - a
    v = c - a
    w = point - a

    uu = tm.dot(u, u)
    uv = tm.dot(u, v)
    vv = tm.dot(v, v)
    wu = tm.dot(w, u)
    wv = tm.dot(w, v)

    # Shared denominator between s and t
    denom = uv * uv - uu * vv

    s = (uv * wv - vv * wu) / denom
    t = (uv * wu - uu * wv) / denom
    return s, t


@ti.func
def hit_triangle(ray_origin: vec3, ray_direction: vec3, triangle: Triangle) -> HitRecord:
    """Test for ray-triangle intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        triangle: The triangle to test intersection against.

    Returns:
        A HitRecord whose normal is the triangle's precomputed normal.
    """
    result = make_miss_record()

    n = triangle.normal
    collision_dot = tm.dot(n, ray_direction)

    # Near-parallel rays graze the triangle's plane and are misses
    if ti.abs(collision_dot) >= PARALLEL_EPSILON:
        # Plane equation N . P + d = 0 with d = -N . A
        t_hit = -tm.dot(n, ray_origin - triangle.a) / collision_dot

        if t_hit >= 0.0:
            point = ray_origin + t_hit * ray_direction
            s, t = barycentric_coordinates(point, triangle.a, triangle.b, triangle.c)

            inside = 1
            if s < 0.0 or s > 1.0:
                inside = 0
            if t < 0.0 or s + t > 1.0:
                inside = 0

            if inside == 1:
                result = HitRecord(hit=1, t=t_hit, point=point, normal=n)

    return result
