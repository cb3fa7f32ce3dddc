"""Demo scene configuration.

This module provides the material table and the five demo scenes. Every
scene but the fourth uses the same room, a box of five planes 160 units
wide and 120 units high. All are viewed from (0, 0, 200) by
default_camera():

- Scene 1: basic room with a mirror back wall, a shiny green sphere and a
  grey mirror triangle
- Scene 2: white back wall, a large mirror sphere reflecting a red sphere
  in front of it
- Scene 3: a "face" of pink and black spheres hidden behind the camera,
  only visible through the mirror back wall
- Scene 4: a small grey mirror room with the light at the camera, showing
  repeated reflections of the face
- Scene 5: the basic room with a shiny green axis-aligned box

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.scene.demo_scenes import build_demo_scene
    >>> manager = build_demo_scene(2)
    >>> manager.get_primitive_count()
    7
"""

import logging
from collections.abc import Callable

from raycaster.core.settings import RenderSettings
from raycaster.materials.phong import MaterialParams
from raycaster.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Material Table
# =============================================================================

WHITE_SPECULAR = (1.0, 1.0, 1.0)


def _material(color, exponent: float, k_local: float, k_reflectivity: float) -> MaterialParams:
    return MaterialParams(
        ambient=color,
        diffuse=color,
        specular=WHITE_SPECULAR,
        specular_exponent=exponent,
        k_local=k_local,
        k_reflectivity=k_reflectivity,
    )


MATERIALS: dict[str, MaterialParams] = {
    "white": _material((1.0, 1.0, 1.0), 10.0, 0.9, 0.1),
    "white_absorb": _material((1.0, 1.0, 1.0), 1.0, 1.0, 0.0),
    "shiny_green": _material((0.0, 1.0, 0.0), 50.0, 0.8, 0.2),
    "red": _material((1.0, 0.0, 0.0), 10.0, 0.9, 0.1),
    "blue": _material((0.0, 0.0, 1.0), 10.0, 0.9, 0.1),
    "yellow": _material((1.0, 1.0, 0.0), 50.0, 1.0, 0.0),
    "mirror": _material((1.0, 1.0, 1.0), 50.0, 0.0, 1.0),
    "grey_mirror": _material((0.5, 0.5, 0.5), 50.0, 0.4, 0.6),
    "purple": _material((1.0, 0.0, 1.0), 10.0, 1.0, 0.0),
    "black": _material((0.0, 0.0, 0.0), 10.0, 1.0, 0.0),
    "pink": _material((1.0, 0.7, 0.7), 10.0, 1.0, 0.0),
}

# Light position used by every scene except scene 4
DEFAULT_LIGHT_POSITION = (0.0, 50.0, 125.0)


# =============================================================================
# Scene Builders
# =============================================================================


def _register_materials(manager: SceneManager) -> None:
    for name, params in MATERIALS.items():
        manager.add_material(name, params)


def _add_room(manager: SceneManager, back_wall: str = "mirror") -> None:
    """Add the five planes of the demo room."""
    manager.add_plane((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), back_wall)
    manager.add_plane((80.0, 0.0, 0.0), (-1.0, 0.0, 0.0), "red")
    manager.add_plane((-80.0, 0.0, 0.0), (1.0, 0.0, 0.0), "blue")
    manager.add_plane((0.0, -60.0, 0.0), (0.0, 1.0, 0.0), "white")
    manager.add_plane((0.0, 60.0, 0.0), (0.0, -1.0, 0.0), "white_absorb")


def _scene_basic_room(manager: SceneManager) -> None:
    _add_room(manager)
    manager.add_sphere((40.0, -30.0, 70.0), 30.0, "shiny_green")
    manager.add_triangle((-30.0, -60.0, 100.0), (0.0, -60.0, 60.0), (-40.0, -30.0, 80.0), "grey_mirror")


def _scene_mirror_sphere(manager: SceneManager) -> None:
    _add_room(manager, back_wall="white")
    manager.add_sphere((0.0, -40.0, 150.0), 20.0, "red")
    manager.add_sphere((0.0, -20.0, 70.0), 40.0, "mirror")


def _add_face(manager: SceneManager, head_center: tuple[float, float, float], head_radius: float) -> None:
    """Add a face of spheres looking toward -z: head, nose, two eyes with pupils."""
    x, y, z = head_center
    manager.add_sphere((x, y, z), head_radius, "pink")
    manager.add_sphere((x, y, z - head_radius), 5.0, "pink")
    manager.add_sphere((x - 10.0, y + 10.0, z - 20.0), 10.0, "white_absorb")
    manager.add_sphere((x + 10.0, y + 10.0, z - 20.0), 10.0, "white_absorb")
    manager.add_sphere((x - 10.0, y + 10.0, z - 28.0), 5.0, "black")
    manager.add_sphere((x + 10.0, y + 10.0, z - 28.0), 5.0, "black")


def _scene_hidden_face(manager: SceneManager) -> None:
    _add_room(manager)
    # Behind the camera at z = 200, visible only in the back wall
    _add_face(manager, (0.0, 0.0, 250.0), 30.0)
    manager.add_triangle((-30.0, -60.0, 140.0), (0.0, -60.0, 130.0), (-40.0, -30.0, 120.0), "grey_mirror")


def _scene_mirror_room(manager: SceneManager) -> None:
    manager.add_plane((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), "grey_mirror")
    manager.add_plane((40.0, 0.0, 0.0), (-1.0, 0.0, 0.0), "grey_mirror")
    manager.add_plane((-40.0, 0.0, 0.0), (1.0, 0.0, 0.0), "grey_mirror")
    manager.add_plane((0.0, -30.0, 0.0), (0.0, 1.0, 0.0), "grey_mirror")
    manager.add_plane((0.0, 30.0, 0.0), (0.0, -1.0, 0.0), "grey_mirror")
    manager.add_sphere((0.0, -10.0, 100.0), 20.0, "pink")
    manager.add_sphere((0.0, -10.0, 120.0), 5.0, "pink")
    manager.add_sphere((-10.0, 0.0, 110.0), 10.0, "white_absorb")
    manager.add_sphere((10.0, 0.0, 110.0), 10.0, "white_absorb")
    manager.add_sphere((-10.0, 0.0, 118.0), 5.0, "black")
    manager.add_sphere((10.0, 0.0, 118.0), 5.0, "black")


def _scene_box(manager: SceneManager) -> None:
    _add_room(manager)
    manager.add_box((-50.0, -50.0, 100.0), (-20.0, -20.0, 70.0), "shiny_green")


# Scene number -> (description, builder, light position)
DEMO_SCENES: dict[int, tuple[str, Callable[[SceneManager], None], tuple[float, float, float]]] = {
    1: ("Basic room", _scene_basic_room, DEFAULT_LIGHT_POSITION),
    2: ("Mirror sphere reflecting a red sphere", _scene_mirror_sphere, DEFAULT_LIGHT_POSITION),
    3: ("Face behind the camera seen in the mirror wall", _scene_hidden_face, DEFAULT_LIGHT_POSITION),
    4: ("Face inside a grey mirror room", _scene_mirror_room, (0.0, 0.0, 200.0)),
    5: ("Axis-aligned box", _scene_box, DEFAULT_LIGHT_POSITION),
}


def list_demo_scenes() -> list[tuple[int, str]]:
    """Get the (number, description) of every demo scene."""
    return [(number, description) for number, (description, _, _) in sorted(DEMO_SCENES.items())]


def build_demo_scene(number: int, settings: RenderSettings | None = None) -> SceneManager:
    """Create one of the demo scenes.

    Args:
        number: Scene number, 1 to 5.
        settings: Feature switches to use. The light position is always
            replaced by the scene's own light.

    Returns:
        A SceneManager holding the scene, with every material of the
        material table registered.

    Raises:
        ValueError: If the scene number is unknown.
    """
    if number not in DEMO_SCENES:
        raise ValueError(f"Unknown demo scene {number}; choose from {sorted(DEMO_SCENES)}")
    description, builder, light_position = DEMO_SCENES[number]

    base = settings if settings is not None else RenderSettings()
    scene_settings = RenderSettings.from_dict({**base.to_dict(), "light_position": light_position})

    manager = SceneManager(settings=scene_settings)
    _register_materials(manager)
    builder(manager)

    logger.info("Built demo scene %d (%s): %d primitives", number, description, manager.get_primitive_count())
    return manager
