"""Phong material with local/reflection blending weights.

A material describes how a surface responds to the single point light:
ambient, diffuse and specular colours feed the Phong local illumination
model, the specular exponent controls highlight size, and two scalar weights
blend the locally computed colour with the colour gathered by a mirror
reflection ray.

Colours are conceptually in [0, 1] per channel but are not clamped at
construction; the shader clamps the combined local colour instead.

Two representations exist:
    - MaterialParams: immutable Python-side description used to build scenes,
      validate input and serialize to JSON.
    - Material: Taichi struct copied into every primitive's storage slot and
      carried in hit records inside kernels.

Example:
    >>> from raycaster.materials.phong import MaterialParams
    >>> mirror = MaterialParams(k_local=0.0, k_reflectivity=1.0, specular_exponent=50.0)
    >>> mirror.to_dict()["k_reflectivity"]
    1.0
"""

import math
from dataclasses import asdict, dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]


@ti.dataclass
class Material:
    """Material values as seen by Taichi kernels.

    Attributes:
        ambient: Ambient colour (vec3).
        diffuse: Diffuse colour (vec3).
        specular: Specular highlight colour (vec3).
        specular_exponent: Phong shininess exponent.
        k_local: Weight of the locally computed colour.
        k_reflectivity: Weight of the colour returned by the reflection ray.
    """

    ambient: vec3
    diffuse: vec3
    specular: vec3
    specular_exponent: ti.f32
    k_local: ti.f32
    k_reflectivity: ti.f32


def _as_color(value: Any, name: str) -> Color:
    """Convert a 3-sequence to a float tuple, rejecting malformed input."""
    try:
        components = tuple(float(c) for c in value)
    except TypeError as e:
        raise ValueError(f"{name} must be a sequence of 3 numbers, got {value!r}") from e
    if len(components) != 3:
        raise ValueError(f"{name} must have exactly 3 components, got {len(components)}")
    if not all(math.isfinite(c) for c in components):
        raise ValueError(f"{name} components must be finite, got {components}")
    return components  # type: ignore[return-value]


@dataclass(frozen=True)
class MaterialParams:
    """Python-side material description.

    Defaults match the demo scenes: white ambient, diffuse and
    specular colours, exponent 10, fully local and non-reflective.

    Attributes:
        ambient: Ambient colour as (R, G, B).
        diffuse: Diffuse colour as (R, G, B).
        specular: Specular colour as (R, G, B).
        specular_exponent: Phong shininess exponent (non-negative).
        k_local: Weight of the local colour (non-negative).
        k_reflectivity: Weight of the reflected colour (non-negative).

    Raises:
        ValueError: If a colour is malformed or a scalar is negative or not finite.
    """

    ambient: Color = (1.0, 1.0, 1.0)
    diffuse: Color = (1.0, 1.0, 1.0)
    specular: Color = (1.0, 1.0, 1.0)
    specular_exponent: float = 10.0
    k_local: float = 1.0
    k_reflectivity: float = 0.0

    def __post_init__(self) -> None:
        # frozen dataclass: normalise through object.__setattr__
        for name in ("ambient", "diffuse", "specular"):
            object.__setattr__(self, name, _as_color(getattr(self, name), name))
        for name in ("specular_exponent", "k_local", "k_reflectivity"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value < 0.0:
                raise ValueError(f"{name} must be a finite non-negative number, got {value}")
            object.__setattr__(self, name, value)

    def to_dict(self) -> dict[str, Any]:
        """Export the material as a JSON-friendly dictionary."""
        data = asdict(self)
        for name in ("ambient", "diffuse", "specular"):
            data[name] = list(data[name])
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MaterialParams":
        """Build a material from a dictionary, using defaults for missing keys.

        Raises:
            ValueError: If the dictionary contains unknown keys or invalid values.
        """
        known = {"ambient", "diffuse", "specular", "specular_exponent", "k_local", "k_reflectivity"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown material keys: {sorted(unknown)}")
        return cls(**data)


@ti.func
def make_material(
    ambient: vec3,
    diffuse: vec3,
    specular: vec3,
    specular_exponent: ti.f32,
    k_local: ti.f32,
    k_reflectivity: ti.f32,
) -> Material:
    """Create a Material struct inside a kernel."""
    return Material(
        ambient=ambient,
        diffuse=diffuse,
        specular=specular,
        specular_exponent=specular_exponent,
        k_local=k_local,
        k_reflectivity=k_reflectivity,
    )


# =============================================================================
# Local Illumination
# =============================================================================

# Global reflectivity constants of the illumination model
LIGHT_SOURCE_INTENSITY = 1.0
DIFFUSE_REFLECTIVITY = 0.6
SPECULAR_REFLECTIVITY = 0.8
AMBIENT_LIGHTING = 0.1


@ti.func
def shade_phong(
    material: Material,
    normal: vec3,
    light_dir: vec3,
    eye_dir: vec3,
    shadowed: ti.i32,
) -> vec3:
    """Evaluate the Phong local illumination model.

    The normal is flipped toward the light when needed, so planes and
    triangles are lit from either side. In shadow only the ambient term
    survives.

    The per-channel colour is:
        diff * diffuse + spec * specular + ambient_lighting * ambient
    clamped to [0, 1] and scaled by the material's k_local weight.

    Args:
        material: The material of the hit surface.
        normal: Unit surface normal at the hit point.
        light_dir: Unit vector from the hit point toward the light.
        eye_dir: Unit vector from the hit point toward the ray origin.
        shadowed: 1 if the hit point is occluded from the light.

    Returns:
        The local colour weighted by k_local.
    """
    n = normal
    if tm.dot(light_dir, n) < 0.0:
        n = -n

    # |light_dir| == |n| == 1, so the dot product is cos(theta)
    cos_theta = tm.max(0.0, ti.abs(tm.dot(light_dir, n)))

    # Mirror of the light direction about the normal: R = 2N(L.N) - L
    reflected_light = 2.0 * n * tm.dot(light_dir, n) - light_dir
    cos_alpha = tm.max(0.0, tm.dot(reflected_light, eye_dir))

    diff = LIGHT_SOURCE_INTENSITY * DIFFUSE_REFLECTIVITY * cos_theta
    spec = LIGHT_SOURCE_INTENSITY * SPECULAR_REFLECTIVITY * (cos_alpha**material.specular_exponent)

    if shadowed == 1:
        diff = 0.0
        spec = 0.0

    color = diff * material.diffuse + spec * material.specular + AMBIENT_LIGHTING * material.ambient
    color = tm.clamp(color, 0.0, 1.0)

    return material.k_local * color


@ti.func
def shade_flat(material: Material, shadowed: ti.i32) -> vec3:
    """Flat ambient colouring used when Phong shading is disabled.

    Args:
        material: The material of the hit surface.
        shadowed: 1 if the hit point is occluded (only ever set when shadow
            rays are enabled).

    Returns:
        Black in shadow, otherwise k_local * ambient.
    """
    color = material.k_local * material.ambient
    if shadowed == 1:
        color = vec3(0.0, 0.0, 0.0)
    return color
