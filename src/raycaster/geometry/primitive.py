"""Tagged primitive variant and intersection dispatch.

Every primitive in a scene is stored in the same slot layout: a kind tag,
three point/vector slots, a normal slot and a scalar. The meaning of the
slots depends on the kind:

    kind      p0        p1        p2      normal        radius
    SPHERE    center    -         -       -             radius
    PLANE     point     -         -       unit normal   -
    TRIANGLE  vertex a  vertex b  vertex c unit normal  -
    BOX       corner 0  corner 1  -       -             -

hit_primitive decodes a slot and forwards to the shape's own test.
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from .box import AxisAlignedBox, hit_box
from .plane import Plane, hit_plane
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record
from .triangle import Triangle, hit_triangle

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class PrimitiveKind(IntEnum):
    """Closed set of primitive shapes a scene can hold."""

    SPHERE = 0
    PLANE = 1
    TRIANGLE = 2
    BOX = 3


# Plain int tags, captured as compile-time constants in kernels
_SPHERE = PrimitiveKind.SPHERE.value
_PLANE = PrimitiveKind.PLANE.value
_TRIANGLE = PrimitiveKind.TRIANGLE.value
_BOX = PrimitiveKind.BOX.value


@ti.func
def hit_primitive(
    kind: ti.i32,
    p0: vec3,
    p1: vec3,
    p2: vec3,
    normal: vec3,
    radius: ti.f32,
    ray_origin: vec3,
    ray_direction: vec3,
) -> HitRecord:
    """Intersect a ray with one primitive slot.

    Args:
        kind: The PrimitiveKind tag of the slot.
        p0, p1, p2: Point slots, see the module docstring.
        normal: Normal slot.
        radius: Scalar slot.
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        The shape's HitRecord, or a miss record for an unknown tag.
    """
    result = make_miss_record()

    if kind == _SPHERE:
        sphere = Sphere(center=p0, radius=radius, radius_squared=radius * radius)
        result = hit_sphere(ray_origin, ray_direction, sphere)
    elif kind == _PLANE:
        result = hit_plane(ray_origin, ray_direction, Plane(point=p0, normal=normal))
    elif kind == _TRIANGLE:
        triangle = Triangle(a=p0, b=p1, c=p2, normal=normal)
        result = hit_triangle(ray_origin, ray_direction, triangle)
    elif kind == _BOX:
        result = hit_box(ray_origin, ray_direction, AxisAlignedBox(corner0=p0, corner1=p1))

    return result
