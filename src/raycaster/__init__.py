"""Taichi-based recursive ray caster.

This package renders static scenes by casting one ray per pixel through a
pinhole camera, with support for:
- Sphere, plane, triangle and axis-aligned box primitives
- Phong local illumination from a single point light
- Hard shadows from shadow rays
- Recursive mirror reflection with a bounded bounce count

Subpackages:
    core: Ray utilities, quadratic solver, settings, ray caster and renderer
    geometry: Shape primitives and intersection algorithms
    materials: Phong material model
    scene: Scene storage, intersection, construction and demo scenes
    camera: Pinhole camera with ray generation
    preview: PNG export and preview window
"""

__version__ = "0.1.0"
