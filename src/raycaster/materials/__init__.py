"""Materials module for surface shading.

Components:
    phong: Material description with ambient, diffuse and specular colours,
        the local/reflection blending weights, and the Phong local
        illumination model evaluated at each hit.
"""

from .phong import (
    AMBIENT_LIGHTING,
    DIFFUSE_REFLECTIVITY,
    LIGHT_SOURCE_INTENSITY,
    SPECULAR_REFLECTIVITY,
    Material,
    MaterialParams,
    make_material,
    shade_flat,
    shade_phong,
)

__all__ = [
    "Material",
    "MaterialParams",
    "make_material",
    "shade_phong",
    "shade_flat",
    "LIGHT_SOURCE_INTENSITY",
    "DIFFUSE_REFLECTIVITY",
    "SPECULAR_REFLECTIVITY",
    "AMBIENT_LIGHTING",
]
