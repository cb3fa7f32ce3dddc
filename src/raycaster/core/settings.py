"""Render settings: the point light and the shading feature switches.

RenderSettings is the configuration surface of the ray caster. It travels
with a scene description (see scene.manager) and is uploaded into the Taichi
scene storage by Scene.apply_settings before rendering.

Example:
    >>> from raycaster.core.settings import RenderSettings
    >>> settings = RenderSettings(shadows=False, max_reflections=2)
    >>> RenderSettings.from_dict(settings.to_dict()) == settings
    True
"""

import math
from dataclasses import dataclass
from typing import Any

Vec3 = tuple[float, float, float]

DEFAULT_LIGHT_POSITION: Vec3 = (0.0, 50.0, 125.0)
DEFAULT_BACKGROUND_COLOR: Vec3 = (1.0, 1.0, 1.0)
DEFAULT_MAX_REFLECTIONS = 5

# Scene storage keeps the limit in an i32 field
_I32_MAX = 2**31 - 1


def _as_vec3(value: Any, name: str) -> Vec3:
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
class RenderSettings:
    """Global lighting and feature configuration for a render.

    Attributes:
        light_position: World-space position of the single point light.
        shadows: Cast shadow rays toward the light.
        phong: Use Phong local illumination; when off, surfaces are coloured
            by k_local * ambient.
        reflections: Trace mirror reflection rays.
        max_reflections: Maximum reflection bounces per camera ray; any
            non-negative integer that fits the 32-bit bounce counter.
        background_color: Colour of pixels whose camera ray hits nothing.

    Raises:
        ValueError: If a vector is malformed, max_reflections is out of range,
            or a background channel lies outside [0, 1].
    """

    light_position: Vec3 = DEFAULT_LIGHT_POSITION
    shadows: bool = True
    phong: bool = True
    reflections: bool = True
    max_reflections: int = DEFAULT_MAX_REFLECTIONS
    background_color: Vec3 = DEFAULT_BACKGROUND_COLOR

    def __post_init__(self) -> None:
        object.__setattr__(self, "light_position", _as_vec3(self.light_position, "light_position"))
        background = _as_vec3(self.background_color, "background_color")
        if not all(0.0 <= c <= 1.0 for c in background):
            raise ValueError(f"background_color components must be in [0, 1], got {background}")
        object.__setattr__(self, "background_color", background)

        if isinstance(self.max_reflections, bool) or int(self.max_reflections) != self.max_reflections:
            raise ValueError(f"max_reflections must be an integer, got {self.max_reflections!r}")
        max_reflections = int(self.max_reflections)
        if max_reflections < 0:
            raise ValueError(f"max_reflections must be non-negative, got {max_reflections}")
        if max_reflections > _I32_MAX:
            raise ValueError(f"max_reflections must fit in a 32-bit integer, got {max_reflections}")
        object.__setattr__(self, "max_reflections", max_reflections)

        for name in ("shadows", "phong", "reflections"):
            object.__setattr__(self, name, bool(getattr(self, name)))

    def to_dict(self) -> dict[str, Any]:
        """Export the settings as a JSON-friendly dictionary."""
        return {
            "light_position": list(self.light_position),
            "shadows": self.shadows,
            "phong": self.phong,
            "reflections": self.reflections,
            "max_reflections": self.max_reflections,
            "background_color": list(self.background_color),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        """Build settings from a dictionary, using defaults for missing keys.

        Raises:
            ValueError: If the dictionary contains unknown keys or invalid values.
        """
        known = {"light_position", "shadows", "phong", "reflections", "max_reflections", "background_color"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown settings keys: {sorted(unknown)}")
        return cls(**data)
