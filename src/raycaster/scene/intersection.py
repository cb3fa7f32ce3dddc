"""Scene storage and nearest-hit intersection.

The Scene owns every primitive of a render, together with the point light
and the shading switches, in Taichi fields. Primitives share one slot layout
(see geometry.primitive) and each slot carries its own copy of a material, so
the kernels never chase material references.

Scene intersection is a linear scan over all primitives that keeps the
strictly nearest hit. When two primitives report the same time, the one
added first wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.materials.phong import MaterialParams
    >>> from raycaster.scene.intersection import Scene
    >>> scene = Scene()
    >>> scene.add_sphere((0, 0, 0), 1.0, MaterialParams())
    0
    >>> info = scene.intersect((0, 0, 5), (0, 0, -1))
    >>> round(info.time, 4)
    4.0
"""

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raycaster.core.settings import RenderSettings
from raycaster.geometry.primitive import PrimitiveKind, hit_primitive
from raycaster.materials.phong import Material, MaterialParams

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Default number of primitive slots allocated per scene
MAX_PRIMITIVES = 1024

# Vectors shorter than this cannot be normalized
_MIN_VECTOR_LENGTH = 1e-12


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: The ray parameter of the nearest hit, +inf on a miss.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The unit surface normal at the intersection point, as reported
            by the primitive. Only valid if hit == 1.
        primitive: Index of the hit primitive, -1 on a miss.
        material: Copy of the hit primitive's material. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    primitive: ti.i32
    material: Material


@dataclass
class IntersectInfo:
    """Python-side result of a single scene intersection.

    Attributes:
        time: Ray parameter of the hit.
        hit_point: World-space hit point.
        normal: Unit surface normal at the hit point.
        primitive_index: Index of the hit primitive in the scene.
        material: The material of the hit primitive.
    """

    time: float
    hit_point: tuple[float, float, float]
    normal: tuple[float, float, float]
    primitive_index: int
    material: MaterialParams


def _as_point(value: Any, name: str) -> npt.NDArray[np.float64]:
    arr = np.asarray(value, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have exactly 3 components, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} components must be finite, got {arr.tolist()}")
    return arr


def _unit(value: npt.NDArray[np.float64], name: str) -> npt.NDArray[np.float64]:
    length = float(np.linalg.norm(value))
    if length < _MIN_VECTOR_LENGTH:
        raise ValueError(f"{name} must have non-zero length")
    return value / length


@ti.data_oriented
class Scene:
    """Primitive, material and lighting storage for one render.

    Geometry uses a Structure of Arrays layout. Materials are stored by value
    per primitive slot. The point light and the feature switches live in
    0-d fields so kernels read them without recompilation.

    Attributes:
        capacity: Number of allocated primitive slots.
        settings: The RenderSettings most recently applied.
        materials: Python-side material of each primitive, by index.
        kinds: PrimitiveKind tag of each slot.
        num_primitives: Number of used slots (0-d field).
    """

    def __init__(self, capacity: int = MAX_PRIMITIVES, settings: RenderSettings | None = None) -> None:
        """Allocate storage for up to `capacity` primitives.

        Raises:
            ValueError: If capacity is not positive.
        """
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.materials: list[MaterialParams] = []

        # Geometry slots, see geometry.primitive for their meaning per kind
        self.kinds = ti.field(dtype=ti.i32, shape=capacity)
        self.p0 = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.p1 = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.p2 = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.normals = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.radii = ti.field(dtype=ti.f32, shape=capacity)

        # Per-primitive material copies
        self.ambient = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.diffuse = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.specular = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.specular_exponents = ti.field(dtype=ti.f32, shape=capacity)
        self.k_local = ti.field(dtype=ti.f32, shape=capacity)
        self.k_reflectivity = ti.field(dtype=ti.f32, shape=capacity)

        self.num_primitives = ti.field(dtype=ti.i32, shape=())

        # Light and feature switches
        self.light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.shadows = ti.field(dtype=ti.i32, shape=())
        self.phong = ti.field(dtype=ti.i32, shape=())
        self.reflections = ti.field(dtype=ti.i32, shape=())
        self.max_reflections = ti.field(dtype=ti.i32, shape=())

        self.settings = RenderSettings()
        self.apply_settings(settings if settings is not None else RenderSettings())

    # =========================================================================
    # Configuration
    # =========================================================================

    def apply_settings(self, settings: RenderSettings) -> None:
        """Upload the light position and feature switches.

        Args:
            settings: Validated render settings.
        """
        self.light_position[None] = list(settings.light_position)
        self.shadows[None] = int(settings.shadows)
        self.phong[None] = int(settings.phong)
        self.reflections[None] = int(settings.reflections)
        self.max_reflections[None] = settings.max_reflections
        self.settings = settings
        logger.debug("Applied render settings: %s", settings)

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def clear(self) -> None:
        """Remove all primitives.

        The field data is not cleared but will be overwritten when new
        primitives are added. Settings are kept.
        """
        self.num_primitives[None] = 0
        self.materials.clear()

    def count(self) -> int:
        """Get the number of primitives in the scene."""
        return int(self.num_primitives[None])

    def _store(
        self,
        kind: PrimitiveKind,
        material: MaterialParams,
        p0: npt.NDArray[np.float64],
        p1: npt.NDArray[np.float64] | None = None,
        p2: npt.NDArray[np.float64] | None = None,
        normal: npt.NDArray[np.float64] | None = None,
        radius: float = 0.0,
    ) -> int:
        idx = self.count()
        if idx >= self.capacity:
            raise RuntimeError(f"Maximum number of primitives ({self.capacity}) exceeded")
        zero = [0.0, 0.0, 0.0]

        self.kinds[idx] = int(kind)
        self.p0[idx] = p0.tolist()
        self.p1[idx] = p1.tolist() if p1 is not None else zero
        self.p2[idx] = p2.tolist() if p2 is not None else zero
        self.normals[idx] = normal.tolist() if normal is not None else zero
        self.radii[idx] = radius

        self.ambient[idx] = list(material.ambient)
        self.diffuse[idx] = list(material.diffuse)
        self.specular[idx] = list(material.specular)
        self.specular_exponents[idx] = material.specular_exponent
        self.k_local[idx] = material.k_local
        self.k_reflectivity[idx] = material.k_reflectivity

        self.materials.append(material)
        self.num_primitives[None] = idx + 1
        logger.debug("Added %s primitive at index %d", kind.name.lower(), idx)
        return idx

    def add_sphere(self, center: Any, radius: float, material: MaterialParams) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.
            material: The sphere's material.

        Returns:
            The index of the added primitive.

        Raises:
            ValueError: If the center is malformed or the radius is not positive.
            RuntimeError: If the scene is full.
        """
        c = _as_point(center, "center")
        radius = float(radius)
        if not np.isfinite(radius) or radius <= 0.0:
            raise ValueError(f"radius must be positive, got {radius}")
        return self._store(PrimitiveKind.SPHERE, material, c, radius=radius)

    def add_plane(self, point: Any, normal: Any, material: MaterialParams) -> int:
        """Add an infinite plane to the scene.

        The normal is normalized before it is stored.

        Raises:
            ValueError: If a vector is malformed or the normal has zero length.
            RuntimeError: If the scene is full.
        """
        p = _as_point(point, "point")
        n = _unit(_as_point(normal, "normal"), "normal")
        return self._store(PrimitiveKind.PLANE, material, p, normal=n)

    def add_triangle(self, a: Any, b: Any, c: Any, material: MaterialParams) -> int:
        """Add a double-sided triangle to the scene.

        The unit normal normalize((b - a) x (c - a)) is computed here once.

        Raises:
            ValueError: If a vertex is malformed or the vertices are collinear.
            RuntimeError: If the scene is full.
        """
        va = _as_point(a, "a")
        vb = _as_point(b, "b")
        vc = _as_point(c, "c")
        n = np.cross(vb - va, vc - va)
        if float(np.linalg.norm(n)) < _MIN_VECTOR_LENGTH:
            raise ValueError("Triangle vertices are collinear")
        return self._store(PrimitiveKind.TRIANGLE, material, va, vb, vc, normal=_unit(n, "normal"))

    def add_box(self, corner0: Any, corner1: Any, material: MaterialParams) -> int:
        """Add an axis-aligned box given by two opposite corners in any order.

        Raises:
            ValueError: If a corner is malformed or the box is flat along an axis.
            RuntimeError: If the scene is full.
        """
        c0 = _as_point(corner0, "corner0")
        c1 = _as_point(corner1, "corner1")
        if np.any(np.abs(c1 - c0) < _MIN_VECTOR_LENGTH):
            raise ValueError("Box must have non-zero extent along every axis")
        return self._store(PrimitiveKind.BOX, material, c0, c1)

    # =========================================================================
    # Queries
    # =========================================================================

    def intersect(self, origin: Any, direction: Any) -> IntersectInfo | None:
        """Find the nearest primitive hit by a single ray.

        Args:
            origin: Ray origin as (x, y, z).
            direction: Ray direction as (x, y, z).

        Returns:
            IntersectInfo for the nearest hit, or None if nothing is hit.
        """
        result = intersect_rays(self, np.asarray([origin]), np.asarray([direction]))
        if not result["hit"][0]:
            return None
        idx = int(result["primitive"][0])
        return IntersectInfo(
            time=float(result["time"][0]),
            hit_point=tuple(float(x) for x in result["point"][0]),  # type: ignore[arg-type]
            normal=tuple(float(x) for x in result["normal"][0]),  # type: ignore[arg-type]
            primitive_index=idx,
            material=self.materials[idx],
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"Scene(primitives={self.count()}, capacity={self.capacity})"


# =============================================================================
# Taichi Scope
# =============================================================================


@ti.func
def _material_at(scene: ti.template(), i: ti.i32) -> Material:
    return Material(
        ambient=scene.ambient[i],
        diffuse=scene.diffuse[i],
        specular=scene.specular[i],
        specular_exponent=scene.specular_exponents[i],
        k_local=scene.k_local[i],
        k_reflectivity=scene.k_reflectivity[i],
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=tm.inf,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        primitive=-1,
        material=Material(
            ambient=vec3(0.0, 0.0, 0.0),
            diffuse=vec3(0.0, 0.0, 0.0),
            specular=vec3(0.0, 0.0, 0.0),
            specular_exponent=0.0,
            k_local=0.0,
            k_reflectivity=0.0,
        ),
    )


@ti.func
def intersect_scene(scene: ti.template(), ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Test ray against all primitives in the scene.

    Iterates through every primitive in insertion order, keeping the hit
    with the strictly smallest t.

    Args:
        scene: The Scene to query.
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if no intersection was found.
    """
    result = _make_miss_record()

    for i in range(scene.num_primitives[None]):
        rec = hit_primitive(
            scene.kinds[i],
            scene.p0[i],
            scene.p1[i],
            scene.p2[i],
            scene.normals[i],
            scene.radii[i],
            ray_origin,
            ray_direction,
        )
        if rec.hit == 1 and rec.t < result.t:
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                primitive=i,
                material=_material_at(scene, i),
            )

    return result


@ti.kernel
def _intersect_rays_kernel(
    scene: ti.template(),
    origins: ti.types.ndarray(),
    directions: ti.types.ndarray(),
    hits: ti.types.ndarray(),
    times: ti.types.ndarray(),
    points: ti.types.ndarray(),
    normals: ti.types.ndarray(),
    primitives: ti.types.ndarray(),
):
    for k in range(origins.shape[0]):
        o = vec3(origins[k, 0], origins[k, 1], origins[k, 2])
        d = vec3(directions[k, 0], directions[k, 1], directions[k, 2])
        rec = intersect_scene(scene, o, d)
        hits[k] = rec.hit
        times[k] = rec.t
        primitives[k] = rec.primitive
        for c in ti.static(range(3)):
            points[k, c] = rec.point[c]
            normals[k, c] = rec.normal[c]


def as_ray_batch(origins: Any, directions: Any) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32]]:
    """Validate and convert ray origins and directions to (N, 3) float32 arrays.

    Raises:
        ValueError: If the arrays are not (N, 3) or their lengths differ.
    """
    o = np.ascontiguousarray(origins, dtype=np.float32)
    d = np.ascontiguousarray(directions, dtype=np.float32)
    if o.ndim != 2 or o.shape[1] != 3:
        raise ValueError(f"origins must have shape (N, 3), got {o.shape}")
    if d.shape != o.shape:
        raise ValueError(f"directions must have shape {o.shape}, got {d.shape}")
    return o, d


def intersect_rays(scene: Scene, origins: Any, directions: Any) -> dict[str, npt.NDArray[Any]]:
    """Intersect a batch of rays with the scene.

    Args:
        scene: The Scene to query.
        origins: Ray origins, shape (N, 3).
        directions: Ray directions, shape (N, 3).

    Returns:
        Dictionary of arrays: "hit" (N,) bool, "time" (N,) float32 (inf on a
        miss), "point" and "normal" (N, 3) float32, "primitive" (N,) int32
        (-1 on a miss).
    """
    o, d = as_ray_batch(origins, directions)
    n = o.shape[0]
    hits = np.zeros(n, dtype=np.int32)
    times = np.zeros(n, dtype=np.float32)
    points = np.zeros((n, 3), dtype=np.float32)
    normals = np.zeros((n, 3), dtype=np.float32)
    primitives = np.zeros(n, dtype=np.int32)
    if n > 0:
        _intersect_rays_kernel(scene, o, d, hits, times, points, normals, primitives)
    return {
        "hit": hits.astype(bool),
        "time": times,
        "point": points,
        "normal": normals,
        "primitive": primitives,
    }
