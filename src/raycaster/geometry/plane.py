"""Infinite plane primitive.

A plane is defined by a point p0 lying on it and a unit normal n. The ray
parameter of the intersection is:

    t = dot(p0 - ray_origin, n) / dot(ray_direction, n)

When the denominator is close to zero the ray is (almost) parallel to the
surface and is reported as a miss before the division is attempted.
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Rays whose direction is this close to perpendicular to the normal miss
PARALLEL_EPSILON = 1e-6


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        point: Any point lying on the plane (vec3).
        normal: The unit normal of the plane (vec3).
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> HitRecord:
    """Test for ray-plane intersection.

    Only intersections strictly in front of the ray origin (t > 0) count.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        plane: The plane to test intersection against.

    Returns:
        A HitRecord whose normal is the plane's stored normal.
    """
    result = make_miss_record()

    denom = tm.dot(ray_direction, plane.normal)

    if ti.abs(denom) >= PARALLEL_EPSILON:
        t = tm.dot(plane.point - ray_origin, plane.normal) / denom
        if t > 0.0:
            result = HitRecord(
                hit=1,
                t=t,
                point=ray_origin + t * ray_direction,
                normal=plane.normal,
            )

    return result
