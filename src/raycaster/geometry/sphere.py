"""Sphere primitive with stable ray-sphere intersection.

This module provides the HitRecord shared by all primitives, the Sphere
dataclass and the ray-sphere intersection routine.

The ray-sphere intersection is found by solving:
    |ray_origin + t * ray_direction - center|^2 = radius^2

which expands to the quadratic a*t^2 + b*t + c = 0 with:
    a = dot(direction, direction)
    b = 2 * dot(direction, oc)
    c = dot(oc, oc) - radius^2
    oc = origin - center

The roots come from the cancellation-free solver in core.quadratic.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, radius_squared=0.25)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from raycaster.core.quadratic import solve_quadratic

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        radius_squared: radius * radius, stored once at construction.
    """

    center: vec3
    radius: ti.f32
    radius_squared: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Every intersection routine returns one of these on every code path; a
    miss is an explicit record with hit == 0 rather than untouched fields.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: The ray parameter of the intersection. +inf on a miss, so any real
            hit compares as closer.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal at the intersection point.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=tm.inf,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test for ray-sphere intersection.

    The nearer root is used unless it lies behind the ray origin, in which
    case the farther root is tried (ray starting inside the sphere). If both
    roots are negative the sphere is behind the ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.

    Returns:
        A HitRecord; the normal always points away from the sphere center.
    """
    result = make_miss_record()

    # Vector from sphere center to ray origin
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    b = 2.0 * tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius_squared

    found, root0, root1 = solve_quadratic(a, b, c)

    if found == 1:
        t = root0
        if t < 0.0:
            # Root 0 is behind the origin, try root 1
            t = root1
        if t >= 0.0:
            point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=tm.normalize(point - sphere.center),
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a kernel."""
    return Sphere(center=center, radius=radius, radius_squared=radius * radius)
