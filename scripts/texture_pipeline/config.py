"""
Configuration dataclasses for the texture map pipeline.

MapOptions carries every tunable that affects pixel output. Continuous
values are clamped into their documented ranges on construction; values
the generators cannot process safely (non-positive strength, an empty or
oversized tiling blend zone, unknown enum names) are rejected with
InvalidParameterError before any pixels are touched.
"""

import math
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Literal, Optional

from .curves import CURVES, TilingCurve
from .errors import InvalidParameterError


TilingAlgorithm = Literal["crossBlend", "mirror", "patchMatch", "offset"]

TILING_ALGORITHMS: tuple[str, ...] = ("crossBlend", "mirror", "patchMatch", "offset")

MAP_NAMES: tuple[str, ...] = (
    "base",
    "height",
    "normal",
    "roughness",
    "ao",
    "metalness",
    "curvature",
)

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, float(value)))


def parse_hex_color(value: str) -> tuple[int, int, int]:
    """Parse '#rrggbb' (leading '#' optional) into an RGB tuple."""
    match = _HEX_COLOR.match(value.strip())
    if not match:
        raise InvalidParameterError(f"Invalid color '{value}'. Expected #rrggbb")
    digits = match.group(1)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


@dataclass
class MapOptions:
    """Tunable parameters for map generation and tiling."""

    # Normal strength; also drives ambient occlusion strength
    intensity: float = 1.0  # (0, 5]
    # Contrast for both color correction and the height map
    contrast: float = 0.0  # [-1, 1]
    # Roughness inversion
    invert: bool = False

    # Color correction
    brightness: float = 0.0  # [-1, 1]
    color_contrast: Optional[float] = None  # [-1, 1]; None uses contrast
    saturation: float = 0.0  # [-1, 1]
    hue: float = 0.0  # Degrees, [-180, 180]
    delight_amount: float = 0.0  # [0, 1]
    enable_tint: bool = False
    tint_color: str = "#ffffff"

    # Metalness
    is_metallic: bool = False
    metalness_base: float = 1.0  # [0, 1]

    # Seamless tiling
    tiling_algorithm: TilingAlgorithm = "crossBlend"
    tiling_blend: float = 0.15  # (0, 0.5]
    tiling_curve: TilingCurve = "smooth"

    # AO energy scaling constant
    ao_multiplier: float = 1.0
    # Gaussian sigma applied to the height map (0 = off)
    blur: float = 0.0  # [0, 10]

    def __post_init__(self) -> None:
        if not math.isfinite(self.intensity) or self.intensity <= 0:
            raise InvalidParameterError(
                f"intensity must be a positive number, got {self.intensity}"
            )
        if not math.isfinite(self.tiling_blend) or not 0 < self.tiling_blend <= 0.5:
            raise InvalidParameterError(
                f"tiling_blend must be within (0, 0.5], got {self.tiling_blend}"
            )
        if not math.isfinite(self.ao_multiplier) or self.ao_multiplier <= 0:
            raise InvalidParameterError(
                f"ao_multiplier must be a positive number, got {self.ao_multiplier}"
            )
        if self.tiling_algorithm not in TILING_ALGORITHMS:
            raise InvalidParameterError(
                f"Unknown tiling algorithm: {self.tiling_algorithm}. "
                f"Use one of {list(TILING_ALGORITHMS)}"
            )
        if self.tiling_curve not in CURVES:
            raise InvalidParameterError(
                f"Unknown tiling curve: {self.tiling_curve}. Use one of {list(CURVES.keys())}"
            )
        # Validates the format; the parsed value is read through tint_rgb
        parse_hex_color(self.tint_color)

        self.intensity = min(5.0, float(self.intensity))
        self.contrast = _clamp(self.contrast, -1.0, 1.0)
        self.brightness = _clamp(self.brightness, -1.0, 1.0)
        if self.color_contrast is not None:
            self.color_contrast = _clamp(self.color_contrast, -1.0, 1.0)
        self.saturation = _clamp(self.saturation, -1.0, 1.0)
        self.hue = _clamp(self.hue, -180.0, 180.0)
        self.delight_amount = _clamp(self.delight_amount, 0.0, 1.0)
        self.metalness_base = _clamp(self.metalness_base, 0.0, 1.0)
        self.blur = _clamp(self.blur, 0.0, 10.0)

    @property
    def color_contrast_amount(self) -> float:
        """Contrast used by color correction (the override, else contrast)."""
        if self.color_contrast is None:
            return self.contrast
        return self.color_contrast

    @property
    def tint_rgb(self) -> tuple[int, int, int]:
        return parse_hex_color(self.tint_color)

    def updated(self, **overrides: Any) -> "MapOptions":
        """Return a copy with some fields replaced (re-validated)."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise InvalidParameterError(f"Unknown option(s): {sorted(unknown)}")
        return replace(self, **overrides)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class OutputConfig:
    """Where and how generated maps are written."""

    output_dir: Path = field(default_factory=lambda: Path("output/maps"))
    prefix: str = "texture"
    format: Literal["png", "webp"] = "png"
    maps: tuple[str, ...] = MAP_NAMES

    def filename(self, map_name: str) -> str:
        """'{prefix}_{map}.{format}', or '{map}.{format}' without a prefix."""
        stem = f"{self.prefix}_{map_name}" if self.prefix else map_name
        return f"{stem}.{self.format}"


@dataclass
class PipelineConfig:
    """Master configuration for a pipeline run."""

    options: MapOptions = field(default_factory=MapOptions)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Run the tiling stage before color correction
    seamless: bool = False

    # Processing
    workers: int = 4
