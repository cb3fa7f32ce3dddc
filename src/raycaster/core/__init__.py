"""Core rendering module.

Components:
    ray: Ray data structure and mirror reflection
    quadratic: Numerically stable quadratic solver
    settings: RenderSettings (light position and feature switches)
    integrator: Whitted-style ray caster
    renderer: Whole-image renderer

All compute-intensive operations use Taichi kernels.
"""

from .quadratic import DEGENERATE_A_EPSILON, solve_quadratic
from .ray import Ray, make_ray, ray_at, reflect, vec3
from .settings import RenderSettings

# Note: integrator and renderer are NOT imported here to avoid circular imports
# with the scene package. Import them directly:
#   from raycaster.core.integrator import cast_rays
#   from raycaster.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "reflect",
    "solve_quadratic",
    "DEGENERATE_A_EPSILON",
    "RenderSettings",
]
