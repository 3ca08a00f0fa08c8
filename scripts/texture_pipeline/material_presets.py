"""
Material presets for common surface types.

Each preset overrides a subset of MapOptions to give a sensible starting
point for a class of material: relief strength, height contrast,
metalness and a light color grade. Fields a preset does not mention keep
their current value, so presets compose with user tweaks.
"""

from dataclasses import dataclass, fields
from typing import Any, Optional

from .config import MapOptions


@dataclass
class MaterialPreset:
    """Partial map options for a material class."""

    name: str
    description: str

    # Metalness
    is_metallic: bool
    metalness_base: float  # 0-1

    # Relief
    intensity: float  # Normal / AO strength
    contrast: float  # Height map contrast, -1 to 1
    invert: bool  # Roughness inversion

    # Color grade
    brightness: float  # -1 to 1
    saturation: float  # -1 to 1

    def overrides(self) -> dict[str, Any]:
        """The MapOptions fields this preset sets."""
        option_names = {f.name for f in fields(MapOptions)}
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name in option_names
        }


# Predefined material presets
PRESETS: dict[str, MaterialPreset] = {
    "gold": MaterialPreset(
        name="Gold",
        description="Polished precious metal, soft relief and a warm lift",
        is_metallic=True,
        metalness_base=1.0,
        intensity=0.3,    # Smooth cast surface
        contrast=0.1,
        invert=False,
        brightness=0.05,
        saturation=0.1,   # Keep the yellow rich
    ),

    "steel": MaterialPreset(
        name="Steel",
        description="Brushed structural metal, mostly desaturated",
        is_metallic=True,
        metalness_base=0.8,  # Some oxide / grime reads as dielectric
        intensity=1.2,
        contrast=0.2,
        invert=False,
        brightness=0.0,
        saturation=-0.5,
    ),

    "concrete": MaterialPreset(
        name="Concrete",
        description="Rough porous aggregate with strong relief",
        is_metallic=False,
        metalness_base=0.0,
        intensity=2.0,    # Deep pores
        contrast=0.4,
        invert=False,
        brightness=-0.05,
        saturation=-0.2,
    ),

    "plastic": MaterialPreset(
        name="Plastic",
        description="Smooth molded dielectric",
        is_metallic=False,
        metalness_base=0.0,
        intensity=0.8,
        contrast=0.1,
        invert=False,
        brightness=0.0,
        saturation=0.0,
    ),

    "wood": MaterialPreset(
        name="Wood",
        description="Grain-driven relief with slightly richer color",
        is_metallic=False,
        metalness_base=0.0,
        intensity=1.5,
        contrast=0.3,
        invert=False,
        brightness=0.0,
        saturation=0.1,
    ),

    "fabric": MaterialPreset(
        name="Fabric",
        description="Soft woven surface, gentle relief",
        is_metallic=False,
        metalness_base=0.0,
        intensity=0.6,
        contrast=0.0,
        invert=False,
        brightness=0.05,
        saturation=0.0,
    ),
}


def get_preset(name: str) -> MaterialPreset:
    """Get a material preset by name.

    Args:
        name: Preset name (case-insensitive)

    Returns:
        MaterialPreset configuration

    Raises:
        KeyError: If preset name not found
    """
    name_lower = name.lower().replace(" ", "_").replace("-", "_")
    if name_lower not in PRESETS:
        available = ", ".join(sorted(PRESETS.keys()))
        raise KeyError(f"Unknown preset '{name}'. Available: {available}")
    return PRESETS[name_lower]


def list_presets() -> list[str]:
    """List all available preset names."""
    return sorted(PRESETS.keys())


def apply_preset(name: str, options: Optional[MapOptions] = None) -> MapOptions:
    """Return ``options`` (or the defaults) with a preset's fields applied."""
    preset = get_preset(name)
    options = options or MapOptions()
    return options.updated(**preset.overrides())
