"""Scene module for scene storage, construction and ray-scene queries.

Components:
    intersection: Taichi-side Scene storage and nearest-hit intersection
    manager: Scene builder with named materials and JSON serialization
    demo_scenes: Material table and the five demo scenes

Scene data is organized for efficient kernel access:
    - Structure-of-Arrays layout for geometric data
    - Materials copied by value into each primitive slot
    - Light and feature switches in 0-d fields
"""

from .demo_scenes import DEMO_SCENES, MATERIALS, build_demo_scene, list_demo_scenes
from .intersection import (
    MAX_PRIMITIVES,
    IntersectInfo,
    Scene,
    SceneHitRecord,
    intersect_rays,
    intersect_scene,
)
from .manager import PrimitiveInfo, SceneConfig, SceneManager, load_scene_file, save_scene_file

__all__ = [
    # Intersection module
    "Scene",
    "SceneHitRecord",
    "IntersectInfo",
    "intersect_scene",
    "intersect_rays",
    "MAX_PRIMITIVES",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "PrimitiveInfo",
    "load_scene_file",
    "save_scene_file",
    # Demo scenes
    "MATERIALS",
    "DEMO_SCENES",
    "build_demo_scene",
    "list_demo_scenes",
]
