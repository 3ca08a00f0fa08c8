"""
PBR Texture Map Pipeline

Derives a physically-based rendering map set from a single photo:
- Color-corrected base color
- Height, roughness, ambient occlusion and metalness maps
- Tangent-space normal map and curvature from its divergence

and makes arbitrary images tile seamlessly with one of four algorithms
(crossBlend, patchMatch, mirror, offset).

Usage:
    # Generate all maps for an image
    python -m texture_pipeline.cli generate brick.jpg

    # Seamless source plus a material preset
    python -m texture_pipeline.cli generate brick.jpg --seamless --preset concrete

    # Only make an image tileable
    python -m texture_pipeline.cli tile brick.jpg --algorithm mirror

    # List presets
    python -m texture_pipeline.cli presets
"""

from .config import MAP_NAMES, MapOptions, OutputConfig, PipelineConfig
from .errors import DimensionMismatchError, InvalidParameterError, TexturePipelineError
from .pixel_buffer import PixelBuffer
from .color_correction import apply_color_correction
from .surface_maps import (
    generate_ao_map,
    generate_height_map,
    generate_metalness_map,
    generate_roughness_map,
    to_grayscale,
)
from .normals import generate_curvature_map, generate_normal_map
from .tiling import process, tile_preview
from .material_presets import MaterialPreset, PRESETS, apply_preset, get_preset, list_presets
from .pipeline import MapSet, generate_batch, generate_maps, process_file, save_map_set

__all__ = [
    # Buffers and configuration
    "PixelBuffer",
    "MapOptions",
    "OutputConfig",
    "PipelineConfig",
    "MAP_NAMES",
    # Errors
    "TexturePipelineError",
    "DimensionMismatchError",
    "InvalidParameterError",
    # Map generators
    "apply_color_correction",
    "to_grayscale",
    "generate_height_map",
    "generate_normal_map",
    "generate_roughness_map",
    "generate_ao_map",
    "generate_metalness_map",
    "generate_curvature_map",
    # Tiling
    "process",
    "tile_preview",
    # Presets
    "MaterialPreset",
    "PRESETS",
    "get_preset",
    "list_presets",
    "apply_preset",
    # Pipeline
    "MapSet",
    "generate_maps",
    "save_map_set",
    "process_file",
    "generate_batch",
]
__version__ = "0.1.0"
