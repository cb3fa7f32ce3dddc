"""Whitted-style recursive ray caster.

This module implements the shading core: a ray is intersected with the
scene, the hit point is tested for shadow against the point light, coloured
with the Phong local illumination model and, for reflective materials, a
mirror reflection ray is cast recursively and its colour blended in.

Key features:
    - Hard shadows from a single shadow ray per hit
    - Phong or flat (ambient) local colouring
    - Recursive mirror reflection bounded by max_reflections
    - Self-intersection avoidance by biasing hit points along the normal

Each reflection level spawns at most one reflected ray, so the recursion is
evaluated as a loop: the local colour of every level is added with the
product of the reflectivities above it, until a ray misses, a surface is not
reflective, or the bounce counter passes max_reflections. The limit is read
at run time, so changing it never recompiles a kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.materials.phong import MaterialParams
    >>> from raycaster.scene.intersection import Scene
    >>> from raycaster.core.integrator import cast_single_ray
    >>> scene = Scene()
    >>> scene.add_sphere((0, 0, 0), 1.0, MaterialParams())
    0
    >>> result = cast_single_ray(scene, (0, 0, 5), (0, 0, -1))
    >>> round(result.time, 4)
    4.0
"""

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raycaster.core.ray import reflect
from raycaster.materials.phong import shade_flat, shade_phong
from raycaster.scene.intersection import Scene, as_ray_batch, intersect_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Distance hit points are pushed along the normal before casting shadow and
# reflection rays. Scene units are large (the demo room is 160 wide), so this
# is much bigger than a typical epsilon.
HIT_POINT_BIAS = 0.1

__all__ = [
    "HIT_POINT_BIAS",
    "Payload",
    "CastResult",
    "cast_ray",
    "cast_rays",
    "cast_single_ray",
]


@ti.dataclass
class Payload:
    """Per-ray accumulator.

    Attributes:
        color: Accumulated colour of the ray (RGB).
        shadowed: 1 if the ray's hit point is occluded from the light.
        num_bounces: Reflection bounces taken to reach this ray, counting the
            one about to be taken once the hit is shaded.
    """

    color: vec3
    shadowed: ti.i32
    num_bounces: ti.i32


@dataclass
class CastResult:
    """Python-side result of casting a single ray.

    Attributes:
        time: Ray parameter of the first hit, 0.0 when nothing is hit.
        color: Shaded colour (R, G, B); black when nothing is hit.
        shadowed: Whether the first hit point is in shadow.
    """

    time: float
    color: tuple[float, float, float]
    shadowed: bool

    @property
    def hit(self) -> bool:
        """Whether the ray hit anything."""
        return self.time > 0.0


# =============================================================================
# Ray Casting Core
# =============================================================================


@ti.func
def _is_shadowed(scene: ti.template(), hit_fix: vec3, light_dir: vec3) -> ti.i32:
    """Cast a shadow ray and report whether the light is occluded.

    Args:
        scene: The Scene to query.
        hit_fix: The biased hit point the shadow ray starts from.
        light_dir: Unit direction toward the light.

    Returns:
        1 if something is hit strictly closer than the light, 0 otherwise.
    """
    shadowed = 0
    rec = intersect_scene(scene, hit_fix, light_dir)
    if rec.hit == 1:
        collision_dist = tm.length(rec.point - hit_fix)
        light_dist = tm.length(scene.light_position[None] - hit_fix)
        if collision_dist < light_dist:
            shadowed = 1
    return shadowed


@ti.func
def cast_ray(scene: ti.template(), ray_origin: vec3, ray_direction: vec3, num_bounces: ti.i32):
    """Cast a ray into the scene, shade its first hit and follow its reflections.

    Args:
        scene: The Scene to render.
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        num_bounces: Reflection bounces already taken by this ray's ancestors.

    Returns:
        Tuple (hit_time, payload). hit_time is 0.0 on a miss, in which case
        the payload colour stays black and the caller substitutes its own
        background. A reflected ray that misses contributes black.
    """
    payload = Payload(color=vec3(0.0, 0.0, 0.0), shadowed=0, num_bounces=num_bounces)
    hit_time = 0.0

    origin = ray_origin
    direction = ray_direction
    weight = 1.0  # product of the reflectivities above the current level
    first = 1
    active = 1

    while active == 1:
        rec = intersect_scene(scene, origin, direction)

        if rec.hit == 0:
            active = 0
        else:
            material = rec.material

            # Move the hit point off the surface so secondary rays do not hit it again
            hit_fix = rec.point + HIT_POINT_BIAS * rec.normal
            light_dir = tm.normalize(scene.light_position[None] - hit_fix)

            shadowed = 0
            if scene.shadows[None] == 1:
                shadowed = _is_shadowed(scene, hit_fix, light_dir)

            local = vec3(0.0, 0.0, 0.0)
            if scene.phong[None] == 1:
                eye_dir = tm.normalize(origin - hit_fix)
                local = shade_phong(material, rec.normal, light_dir, eye_dir, shadowed)
            else:
                local = shade_flat(material, shadowed)
            payload.color += weight * local

            if first == 1:
                hit_time = rec.t
                payload.shadowed = shadowed
                first = 0

            active = 0
            if scene.reflections[None] == 1:
                payload.num_bounces += 1
                if material.k_reflectivity > 0.0 and payload.num_bounces <= scene.max_reflections[None]:
                    weight *= material.k_reflectivity
                    origin = hit_fix
                    direction = tm.normalize(reflect(direction, rec.normal))
                    active = 1

    return hit_time, payload


# =============================================================================
# Batched Casting Kernels
# =============================================================================


@ti.kernel
def _cast_rays_kernel(
    scene: ti.template(),
    origins: ti.types.ndarray(),
    directions: ti.types.ndarray(),
    times: ti.types.ndarray(),
    colors: ti.types.ndarray(),
    shadowed: ti.types.ndarray(),
):
    for k in range(origins.shape[0]):
        o = vec3(origins[k, 0], origins[k, 1], origins[k, 2])
        d = tm.normalize(vec3(directions[k, 0], directions[k, 1], directions[k, 2]))
        hit_time, payload = cast_ray(scene, o, d, 0)
        times[k] = hit_time
        shadowed[k] = payload.shadowed
        for c in ti.static(range(3)):
            colors[k, c] = payload.color[c]


def cast_rays(scene: Scene, origins: Any, directions: Any) -> dict[str, npt.NDArray[Any]]:
    """Cast a batch of rays and shade their first hits.

    Directions are normalized before casting.

    Args:
        scene: The Scene to render.
        origins: Ray origins, shape (N, 3).
        directions: Ray directions, shape (N, 3).

    Returns:
        Dictionary of arrays: "time" (N,) float32 (0.0 on a miss),
        "color" (N, 3) float32 (black on a miss) and "shadowed" (N,) bool.

    Raises:
        ValueError: If the arrays are not (N, 3) or their lengths differ.
    """
    o, d = as_ray_batch(origins, directions)
    n = o.shape[0]
    if np.any(np.linalg.norm(d, axis=1) == 0.0):
        raise ValueError("Ray directions must have non-zero length")

    times = np.zeros(n, dtype=np.float32)
    colors = np.zeros((n, 3), dtype=np.float32)
    shadowed = np.zeros(n, dtype=np.int32)
    if n > 0:
        _cast_rays_kernel(scene, o, d, times, colors, shadowed)
    return {"time": times, "color": colors, "shadowed": shadowed.astype(bool)}


def cast_single_ray(scene: Scene, origin: Any, direction: Any) -> CastResult:
    """Cast one ray and shade its first hit.

    This is a Python-callable function for testing and inspecting scenes. For
    whole images use the Renderer, which casts all pixels in one kernel.

    Args:
        scene: The Scene to render.
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z).

    Returns:
        CastResult with the hit time, colour and shadow flag.
    """
    result = cast_rays(scene, [origin], [direction])
    color = result["color"][0]
    return CastResult(
        time=float(result["time"][0]),
        color=(float(color[0]), float(color[1]), float(color[2])),
        shadowed=bool(result["shadowed"][0]),
    )
