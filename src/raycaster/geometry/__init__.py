"""Geometry module for shape primitives.

This module provides the geometric primitives and their intersection
algorithms:

Components:
    sphere: Sphere primitive and the HitRecord shared by all shapes
    plane: Infinite plane primitive
    triangle: Double-sided triangle with barycentric containment test
    box: Axis-aligned box intersected face by face
    primitive: PrimitiveKind tag and the hit_primitive dispatcher

All intersection routines are Taichi functions (@ti.func) that always return
an explicit HitRecord, hit or miss:
    rec = hit_<shape>(ray_origin, ray_direction, shape)
"""

from .box import FACE_TOLERANCE, AxisAlignedBox, hit_box
from .plane import PARALLEL_EPSILON, Plane, hit_plane
from .primitive import PrimitiveKind, hit_primitive
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere
from .triangle import Triangle, barycentric_coordinates, hit_triangle, triangle_normal

__all__ = [
    "HitRecord",
    "make_miss_record",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "Plane",
    "hit_plane",
    "PARALLEL_EPSILON",
    "Triangle",
    "hit_triangle",
    "triangle_normal",
    "barycentric_coordinates",
    "AxisAlignedBox",
    "hit_box",
    "FACE_TOLERANCE",
    "PrimitiveKind",
    "hit_primitive",
]
