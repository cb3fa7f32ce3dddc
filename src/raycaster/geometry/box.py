"""Axis-aligned box primitive.

The box is stored as two opposite corners in any order; the per-axis minimum
and maximum are derived on every test. Each of the six faces is intersected
independently as a bounded plane and the nearest accepted face wins. This
gives the face normal directly, without the separate normal lookup a slab
test needs. The normal is turned to face the incoming ray, so a ray starting
inside the box sees the inward normal and biased secondary rays stay inside.

A face hit is accepted when the hit point lies within the face rectangle and
on the face's fixed coordinate, both up to FACE_TOLERANCE scaled by the
magnitude of the coordinate. Exact float comparison would reject almost every
hit at f32 precision.
"""

import taichi as ti
import taichi.math as tm

from .plane import PARALLEL_EPSILON
from .sphere import HitRecord, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Relative tolerance for the face containment test
FACE_TOLERANCE = 1e-4


@ti.dataclass
class AxisAlignedBox:
    """An axis-aligned box given by two opposite corners.

    Attributes:
        corner0: One corner of the box (vec3).
        corner1: The opposite corner (vec3).
    """

    corner0: vec3
    corner1: vec3


@ti.func
def hit_box(ray_origin: vec3, ray_direction: vec3, box: AxisAlignedBox) -> HitRecord:
    """Test for ray-box intersection.

    Faces are numbered 2*axis for the minimum side and 2*axis + 1 for the
    maximum side. A face is skipped when the ray runs parallel to it, and
    only intersections strictly in front of the origin (t > 0) count.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        box: The box to test intersection against.

    Returns:
        A HitRecord for the nearest accepted face. Its normal is the face's
        axis normal, pointing against the ray direction.
    """
    result = make_miss_record()

    lo = tm.min(box.corner0, box.corner1)
    hi = tm.max(box.corner0, box.corner1)

    for face in ti.static(range(6)):
        axis = face // 2
        u_axis = (axis + 1) % 3
        v_axis = (axis + 2) % 3

        coord = hi[axis]
        sign = 1.0
        if ti.static(face % 2 == 0):
            coord = lo[axis]
            sign = -1.0

        denom = ray_direction[axis]
        if ti.abs(denom) >= PARALLEL_EPSILON:
            t = (coord - ray_origin[axis]) / denom
            if t > 0.0 and t < result.t:
                point = ray_origin + t * ray_direction
                tol = FACE_TOLERANCE * tm.max(1.0, ti.abs(coord))

                on_face = 1
                if ti.abs(point[axis] - coord) > tol:
                    on_face = 0
                if point[u_axis] < lo[u_axis] - tol or point[u_axis] > hi[u_axis] + tol:
                    on_face = 0
                if point[v_axis] < lo[v_axis] - tol or point[v_axis] > hi[v_axis] + tol:
                    on_face = 0

                if on_face == 1:
                    normal = vec3(0.0, 0.0, 0.0)
                    normal[axis] = sign
                    if denom * sign > 0.0:
                        normal = -normal
                    result = HitRecord(hit=1, t=t, point=point, normal=normal)

    return result
