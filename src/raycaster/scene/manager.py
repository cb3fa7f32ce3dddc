"""Scene manager for building, validating and serializing scenes.

This module provides a high-level scene construction API on top of the
Taichi-side Scene storage. The SceneManager maintains:
- A registry of named materials
- A record of every primitive with its construction parameters
- The render settings of the scene
- Scene serialization to and from plain dictionaries and JSON files

Scene description format (JSON):

    {
        "settings": {"light_position": [0, 50, 125], "max_reflections": 5},
        "materials": {"red": {"ambient": [1, 0, 0], "diffuse": [1, 0, 0]}},
        "primitives": [
            {"type": "sphere", "center": [0, 0, 0], "radius": 10, "material": "red"},
            {"type": "plane", "point": [0, -60, 0], "normal": [0, 1, 0], "material": "red"},
            {"type": "triangle", "a": [...], "b": [...], "c": [...], "material": "red"},
            {"type": "box", "corner0": [...], "corner1": [...], "material": "red"}
        ]
    }

A primitive's "material" is either the name of a registered material or an
inline material dictionary.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.scene.manager import SceneManager
    >>> manager = SceneManager()
    >>> manager.add_material("red", ambient=(1, 0, 0), diffuse=(1, 0, 0))
    'red'
    >>> manager.add_sphere((0, 0, 0), 10.0, "red")
    0
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from raycaster.core.settings import RenderSettings
from raycaster.geometry.primitive import PrimitiveKind
from raycaster.materials.phong import MaterialParams
from raycaster.scene.intersection import MAX_PRIMITIVES, Scene

logger = logging.getLogger(__name__)

MaterialRef = str | MaterialParams

# Construction parameters of each primitive type, in serialization order
PRIMITIVE_FIELDS: dict[PrimitiveKind, tuple[str, ...]] = {
    PrimitiveKind.SPHERE: ("center", "radius"),
    PrimitiveKind.PLANE: ("point", "normal"),
    PrimitiveKind.TRIANGLE: ("a", "b", "c"),
    PrimitiveKind.BOX: ("corner0", "corner1"),
}


@dataclass
class PrimitiveInfo:
    """Information about a primitive in the scene.

    Attributes:
        index: The index in the scene's primitive storage.
        kind: The primitive's shape.
        params: Construction parameters, keyed as in PRIMITIVE_FIELDS.
        material: Name of the registered material, or None when the
            material was given inline.
        material_params: The material itself.
    """

    index: int
    kind: PrimitiveKind
    params: dict[str, Any]
    material: str | None
    material_params: MaterialParams

    def to_dict(self) -> dict[str, Any]:
        """Export the primitive in scene-file form."""
        data: dict[str, Any] = {"type": self.kind.name.lower()}
        for key, value in self.params.items():
            data[key] = list(value) if isinstance(value, tuple) else value
        data["material"] = self.material if self.material is not None else self.material_params.to_dict()
        return data


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        settings: Render settings dictionary.
        materials: Named material dictionaries.
        primitives: List of primitive dictionaries.
    """

    settings: dict[str, Any] = field(default_factory=dict)
    materials: dict[str, dict[str, Any]] = field(default_factory=dict)
    primitives: list[dict[str, Any]] = field(default_factory=list)


def _as_tuple(value: Any) -> tuple[float, ...]:
    return tuple(float(c) for c in value)


class SceneManager:
    """Scene builder coordinating primitives, materials and settings.

    Attributes:
        scene: The Taichi-side Scene that kernels render.
        materials: Registered materials by name.
        primitives: PrimitiveInfo for every primitive, in insertion order.

    Example:
        >>> manager = SceneManager(RenderSettings(max_reflections=2))
        >>> manager.add_material("mirror", k_local=0.0, k_reflectivity=1.0)
        'mirror'
        >>> manager.add_plane((0, 0, 0), (0, 0, 1), "mirror")
        0
    """

    def __init__(self, settings: RenderSettings | None = None, capacity: int = MAX_PRIMITIVES) -> None:
        """Initialize an empty scene.

        Args:
            settings: Render settings; defaults to RenderSettings().
            capacity: Maximum number of primitives.
        """
        self.scene = Scene(capacity=capacity, settings=settings)
        self.materials: dict[str, MaterialParams] = {}
        self.primitives: list[PrimitiveInfo] = []

    @property
    def settings(self) -> RenderSettings:
        """The scene's current render settings."""
        return self.scene.settings

    def set_settings(self, settings: RenderSettings) -> None:
        """Replace the render settings and upload them to the scene."""
        self.scene.apply_settings(settings)

    def clear(self) -> None:
        """Remove all primitives and materials. Settings are kept."""
        self.scene.clear()
        self.materials.clear()
        self.primitives.clear()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, name: str, params: MaterialParams | None = None, **kwargs: Any) -> str:
        """Register a named material.

        The material is either given as a MaterialParams or built from
        keyword arguments.

        Args:
            name: Name the material is referenced by.
            params: The material, or None to build one from kwargs.
            **kwargs: MaterialParams fields.

        Returns:
            The material name.

        Raises:
            ValueError: If the name is empty or already registered, both
                params and kwargs are given, or the values are invalid.
        """
        if not name:
            raise ValueError("Material name must be non-empty")
        if name in self.materials:
            raise ValueError(f"Material {name!r} is already registered")
        if params is not None and kwargs:
            raise ValueError("Pass either a MaterialParams or keyword arguments, not both")
        material = params if params is not None else MaterialParams(**kwargs)
        self.materials[name] = material
        logger.debug("Registered material %r", name)
        return name

    def get_material(self, name: str) -> MaterialParams:
        """Look up a registered material.

        Raises:
            ValueError: If no material has that name.
        """
        try:
            return self.materials[name]
        except KeyError:
            raise ValueError(f"Unknown material: {name!r}") from None

    def get_material_count(self) -> int:
        """Get the number of registered materials."""
        return len(self.materials)

    def _resolve(self, material: MaterialRef) -> tuple[str | None, MaterialParams]:
        if isinstance(material, MaterialParams):
            return None, material
        return material, self.get_material(material)

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def _record(self, index: int, kind: PrimitiveKind, params: dict[str, Any], material: MaterialRef) -> int:
        name, material_params = self._resolve(material)
        self.primitives.append(
            PrimitiveInfo(
                index=index,
                kind=kind,
                params=params,
                material=name,
                material_params=material_params,
            )
        )
        return index

    def add_sphere(self, center: Any, radius: float, material: MaterialRef) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (positive).
            material: A registered material name or a MaterialParams.

        Returns:
            The index of the added primitive.

        Raises:
            ValueError: If the material is unknown or the geometry is invalid.
            RuntimeError: If the scene is full.
        """
        _, material_params = self._resolve(material)
        index = self.scene.add_sphere(center, radius, material_params)
        return self._record(
            index, PrimitiveKind.SPHERE, {"center": _as_tuple(center), "radius": float(radius)}, material
        )

    def add_plane(self, point: Any, normal: Any, material: MaterialRef) -> int:
        """Add an infinite plane through point with the given normal."""
        _, material_params = self._resolve(material)
        index = self.scene.add_plane(point, normal, material_params)
        return self._record(
            index, PrimitiveKind.PLANE, {"point": _as_tuple(point), "normal": _as_tuple(normal)}, material
        )

    def add_triangle(self, a: Any, b: Any, c: Any, material: MaterialRef) -> int:
        """Add a double-sided triangle with vertices a, b and c."""
        _, material_params = self._resolve(material)
        index = self.scene.add_triangle(a, b, c, material_params)
        return self._record(
            index,
            PrimitiveKind.TRIANGLE,
            {"a": _as_tuple(a), "b": _as_tuple(b), "c": _as_tuple(c)},
            material,
        )

    def add_box(self, corner0: Any, corner1: Any, material: MaterialRef) -> int:
        """Add an axis-aligned box spanned by two opposite corners."""
        _, material_params = self._resolve(material)
        index = self.scene.add_box(corner0, corner1, material_params)
        return self._record(
            index,
            PrimitiveKind.BOX,
            {"corner0": _as_tuple(corner0), "corner1": _as_tuple(corner1)},
            material,
        )

    def add_primitive(self, data: dict[str, Any]) -> int:
        """Add a primitive from its scene-file dictionary.

        Raises:
            ValueError: If the type is unknown, fields are missing or unexpected,
                or the material is invalid.
        """
        data = dict(data)
        type_name = str(data.pop("type", "")).upper()
        try:
            kind = PrimitiveKind[type_name]
        except KeyError:
            raise ValueError(f"Unknown primitive type: {type_name.lower()!r}") from None

        if "material" not in data:
            raise ValueError(f"{type_name.lower()} is missing its material")
        material = data.pop("material")
        if isinstance(material, dict):
            material = MaterialParams.from_dict(material)

        expected = PRIMITIVE_FIELDS[kind]
        missing = [key for key in expected if key not in data]
        unknown = sorted(set(data) - set(expected))
        if missing or unknown:
            raise ValueError(f"Invalid {type_name.lower()} fields: missing {missing}, unknown {unknown}")

        args = [data[key] for key in expected]
        if kind == PrimitiveKind.SPHERE:
            return self.add_sphere(*args, material)
        if kind == PrimitiveKind.PLANE:
            return self.add_plane(*args, material)
        if kind == PrimitiveKind.TRIANGLE:
            return self.add_triangle(*args, material)
        return self.add_box(*args, material)

    def get_primitive_count(self) -> int:
        """Get the number of primitives in the scene."""
        return len(self.primitives)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene as a SceneConfig."""
        return SceneConfig(
            settings=self.settings.to_dict(),
            materials={name: material.to_dict() for name, material in self.materials.items()},
            primitives=[info.to_dict() for info in self.primitives],
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene as a JSON-friendly dictionary."""
        config = self.to_config()
        return {
            "settings": config.settings,
            "materials": config.materials,
            "primitives": config.primitives,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], capacity: int = MAX_PRIMITIVES) -> "SceneManager":
        """Build a scene from a dictionary.

        Args:
            data: Scene description with optional "settings", "materials" and
                "primitives" keys.
            capacity: Maximum number of primitives.

        Raises:
            ValueError: If the description is malformed.
        """
        unknown = set(data) - {"settings", "materials", "primitives"}
        if unknown:
            raise ValueError(f"Unknown scene keys: {sorted(unknown)}")

        settings = RenderSettings.from_dict(data.get("settings", {}))
        manager = cls(settings=settings, capacity=capacity)
        for name, material in data.get("materials", {}).items():
            manager.add_material(name, MaterialParams.from_dict(material))
        for primitive in data.get("primitives", []):
            manager.add_primitive(primitive)

        logger.info(
            "Loaded scene with %d materials and %d primitives",
            manager.get_material_count(),
            manager.get_primitive_count(),
        )
        return manager

    def __repr__(self) -> str:
        """Return string representation."""
        return f"SceneManager(materials={len(self.materials)}, primitives={len(self.primitives)})"


def load_scene_file(path: str | Path, capacity: int = MAX_PRIMITIVES) -> SceneManager:
    """Load a scene from a JSON file.

    Raises:
        ValueError: If the file is not valid JSON or describes an invalid scene.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid scene file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid scene file {path}: top level must be an object")
    logger.debug("Loading scene file %s", path)
    return SceneManager.from_dict(data, capacity=capacity)


def save_scene_file(manager: SceneManager, path: str | Path) -> None:
    """Save a scene to a JSON file."""
    Path(path).write_text(json.dumps(manager.to_dict(), indent=2))
    logger.debug("Saved scene file %s", path)
