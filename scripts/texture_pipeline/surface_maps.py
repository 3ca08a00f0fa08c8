"""
Per-pixel and local-kernel surface maps derived from a source image.

All generators treat brightness as a proxy for the surface: brighter is
higher, and pixels darker than their surroundings sit in cavities. Each
function reads its input buffer and returns a freshly allocated one.
"""

import math

import numpy as np
from numpy.typing import NDArray
from scipy.ndimage import gaussian_filter, uniform_filter

from .color_correction import contrast_factor
from .compositing import gray_to_rgba
from .errors import InvalidParameterError
from .pixel_buffer import PixelBuffer


# Side length of the ambient occlusion neighborhood
AO_KERNEL_SIZE = 5


def _require_positive(name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameterError(f"{name} must be a positive number, got {value}")


def to_grayscale(buffer: PixelBuffer) -> PixelBuffer:
    """Replace R, G, B with their unweighted mean; alpha passes through.

    Idempotent: a gray buffer maps onto itself.
    """
    mean = buffer.pixels[..., :3].astype(np.float64).sum(axis=-1) / 3
    return PixelBuffer(
        buffer.width, buffer.height, gray_to_rgba(mean, alpha=buffer.alpha)
    )


def gray_values(buffer: PixelBuffer) -> NDArray[np.float64]:
    """Quantized grayscale of a buffer as an (H, W) float array."""
    return to_grayscale(buffer).pixels[..., 0].astype(np.float64)


def generate_height_map(
    buffer: PixelBuffer,
    contrast: float = 0.0,
    blur: float = 0.0,
) -> PixelBuffer:
    """Height map: grayscale with a contrast remap.

    Args:
        buffer: Source image
        contrast: Contrast, clamped to [-1, 1] (scaled ×128 before the factor)
        blur: Optional Gaussian sigma in pixels to smooth the surface

    Returns:
        Grayscale height map, alpha passed through from the source
    """
    contrast = min(1.0, max(-1.0, contrast))
    gray = gray_values(buffer)

    if blur > 0:
        gray = gaussian_filter(gray, sigma=blur, mode="nearest")

    factor = contrast_factor(contrast * 128)
    height = factor * (gray - 128) + 128

    return PixelBuffer(
        buffer.width, buffer.height, gray_to_rgba(height, alpha=buffer.alpha)
    )


def generate_roughness_map(buffer: PixelBuffer, invert: bool = False) -> PixelBuffer:
    """Roughness map: grayscale, optionally inverted (glossy highlights)."""
    gray = to_grayscale(buffer)
    if invert:
        gray.pixels[..., :3] = 255 - gray.pixels[..., :3]
    return gray


def generate_ao_map(
    buffer: PixelBuffer,
    strength: float = 1.0,
    multiplier: float = 1.0,
) -> PixelBuffer:
    """Ambient occlusion from local darkness.

    A pixel darker than the mean of its 5×5 neighborhood is treated as a
    cavity and receives occlusion proportional to the difference. Borders
    are replicated, so even a 1×1 buffer is valid input.

    Args:
        buffer: Source image
        strength: Occlusion strength (> 0)
        multiplier: Additional energy scaling constant (> 0)

    Returns:
        Opaque grayscale AO map (255 = unoccluded)

    Raises:
        InvalidParameterError: If strength or multiplier is not positive
    """
    _require_positive("strength", strength)
    _require_positive("multiplier", multiplier)

    gray = gray_values(buffer)
    neighborhood = uniform_filter(gray, size=AO_KERNEL_SIZE, mode="nearest")

    cavity = np.maximum(0.0, neighborhood - gray)
    ao = np.maximum(0.0, 255 - cavity * (strength * multiplier))

    return PixelBuffer(buffer.width, buffer.height, gray_to_rgba(ao))


def generate_metalness_map(
    buffer: PixelBuffer,
    is_metallic: bool = False,
    base: float = 1.0,
) -> PixelBuffer:
    """Metalness map.

    Dielectric surfaces are uniformly 0. For metallic surfaces the
    normalized metalness is gray × base / 255: bright regions read as bare
    metal, dark ones as dirt or rust.

    Args:
        buffer: Source image
        is_metallic: Whether the material is a metal at all
        base: Overall metalness scale in [0, 1]

    Returns:
        Opaque grayscale metalness map
    """
    if not is_metallic:
        return PixelBuffer(
            buffer.width,
            buffer.height,
            gray_to_rgba(np.zeros((buffer.height, buffer.width))),
        )

    base = min(1.0, max(0.0, base))
    metalness = gray_values(buffer) * base / 255

    return PixelBuffer(buffer.width, buffer.height, gray_to_rgba(metalness * 255))
