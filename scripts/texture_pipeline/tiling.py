"""
Seamless tiling: make an arbitrary image repeat without visible borders.

Four interchangeable algorithms share one trick. Shifting the image by half
its width and height (with wraparound) moves the original left/right and
top/bottom seams to the centre of the canvas, where they sit between
interior pixels and can be hidden:

- offset:     the shifted image as-is, seams exposed for inspection
- crossBlend: fade the unshifted original back in along a cross centred
              on the relocated seams
- patchMatch: crossBlend, with the fade modulated by local gradient energy
              so flat regions of the original absorb most of the blending
- mirror:     reflect a half-scale copy into four quadrants; edges match by
              construction, with an optional soft band masking the mirror
              lines

Blend zones are blend_amount × dimension on each side of a seam, and the
weight across a zone is shaped by one of the curves in curves.py. Every
call is a pure function of its inputs.
"""

import math
from typing import Callable, Union

import numpy as np
from numpy.typing import NDArray
from PIL import Image
from scipy.ndimage import uniform_filter

from .compositing import lerp, luminance, to_channel
from .config import TilingAlgorithm
from .curves import CURVES, TilingCurve, shape
from .errors import InvalidParameterError
from .pixel_buffer import PixelBuffer


# Fraction of the way the mirror band pulls toward local average luminance
MIRROR_SOFTEN_STRENGTH = 0.5

# Window used to estimate local average luminance under the mirror band
MIRROR_SOFTEN_WINDOW = 5


def _validate(blend_amount: float, curve: str) -> None:
    if not math.isfinite(blend_amount) or not 0 < blend_amount <= 0.5:
        raise InvalidParameterError(
            f"blend_amount must be within (0, 0.5], got {blend_amount}"
        )
    if curve not in CURVES:
        raise InvalidParameterError(
            f"Unknown tiling curve: {curve}. Use one of {list(CURVES.keys())}"
        )


# =============================================================================
# WEIGHT MAPS
# =============================================================================

def seam_weight(
    distance: Union[NDArray[np.float64], float],
    zone: float,
    curve: TilingCurve = "linear",
):
    """Blend weight at a distance from a seam.

    1.0 exactly on the seam, falling to 0.0 at ``zone`` and beyond.
    """
    if isinstance(distance, np.ndarray):
        return shape(1.0 - np.abs(distance) / zone, curve)
    return shape(1.0 - abs(distance) / zone, curve)


def _axis_distances(length: int, center: float) -> NDArray[np.float64]:
    """Distance of each pixel centre along an axis from ``center``."""
    return np.abs(np.arange(length, dtype=np.float64) + 0.5 - center)


def cross_weights(
    width: int,
    height: int,
    blend_amount: float,
    curve: TilingCurve = "smooth",
) -> NDArray[np.float64]:
    """Weight of the original image for crossBlend, shape (H, W).

    The relocated vertical seam sits at x = width - width // 2 (between two
    pixel columns), the horizontal seam likewise on y. The two per-axis
    weights are combined with max, giving a cross-shaped mask.
    """
    _validate(blend_amount, curve)

    weight_h = seam_weight(
        _axis_distances(width, width - width // 2), blend_amount * width, curve
    )
    weight_v = seam_weight(
        _axis_distances(height, height - height // 2), blend_amount * height, curve
    )
    return np.maximum(weight_h[np.newaxis, :], weight_v[:, np.newaxis])


def gradient_energy(rgb: NDArray[np.float64]) -> NDArray[np.float64]:
    """Local detail energy: summed absolute central differences over RGB.

    Uses the cross-shaped 1-pixel neighborhood (left/right, up/down) with
    replicated borders.

    Args:
        rgb: (H, W, 3) float array

    Returns:
        (H, W) energy, 0 on perfectly flat regions
    """
    padded = np.pad(rgb, ((1, 1), (1, 1), (0, 0)), mode="edge")
    horizontal = np.abs(padded[1:-1, 2:] - padded[1:-1, :-2])
    vertical = np.abs(padded[2:, 1:-1] - padded[:-2, 1:-1])
    return (horizontal + vertical).sum(axis=-1)


# =============================================================================
# ALGORITHMS
# =============================================================================

def offset_pixels(pixels: NDArray[np.uint8]) -> NDArray[np.uint8]:
    """Wraparound shift: out[y][x] = src[(y + h//2) % h][(x + w//2) % w]."""
    height, width = pixels.shape[:2]
    return np.roll(pixels, shift=(-(height // 2), -(width // 2)), axis=(0, 1))


def process_offset_only(
    buffer: PixelBuffer,
    blend_amount: float = 0.15,
    curve: TilingCurve = "smooth",
) -> PixelBuffer:
    """Shift by half the width and height, exposing the seams at the centre.

    Applying it twice restores the source for even dimensions (a full
    period shift). Odd dimensions are shifted by the floor of the half.
    ``blend_amount`` and ``curve`` keep the signature shared with the
    other algorithms; nothing is blended.
    """
    return PixelBuffer(buffer.width, buffer.height, offset_pixels(buffer.pixels))


def process_cross_blend(
    buffer: PixelBuffer,
    blend_amount: float = 0.15,
    curve: TilingCurve = "smooth",
) -> PixelBuffer:
    """Offset the image and fade the original back in over the seams.

    Near the relocated seams the result is the untouched original; toward
    the outer edges it is the offset image, whose borders wrap cleanly.
    """
    weights = cross_weights(buffer.width, buffer.height, blend_amount, curve)

    original = buffer.pixels.astype(np.float64)
    offset = offset_pixels(buffer.pixels).astype(np.float64)

    blended = lerp(offset, original, weights)
    return PixelBuffer(buffer.width, buffer.height, to_channel(blended))


def process_patch_match(
    buffer: PixelBuffer,
    blend_amount: float = 0.15,
    curve: TilingCurve = "smooth",
) -> PixelBuffer:
    """crossBlend with an energy-aware weight.

    Inside the blend zone the original's weight is scaled by
    0.5 + 0.5 × E_orig / (E_orig + E_offset + 1), so the blend leans on the
    offset image where the original is flat: blending flat areas leaves
    fewer visible artifacts than blending busy edges.
    """
    weights = cross_weights(buffer.width, buffer.height, blend_amount, curve)

    original = buffer.pixels.astype(np.float64)
    offset = offset_pixels(buffer.pixels).astype(np.float64)

    energy_original = gradient_energy(original[..., :3])
    energy_offset = gradient_energy(offset[..., :3])
    energy_factor = energy_original / (energy_original + energy_offset + 1)

    weights = weights * (0.5 + 0.5 * energy_factor)

    blended = lerp(offset, original, weights)
    return PixelBuffer(buffer.width, buffer.height, to_channel(blended))


def _mirror_quadrants(quadrant: NDArray[np.uint8], width: int, height: int) -> NDArray[np.uint8]:
    """Reflect a top-left quadrant into a full width × height canvas.

    Odd sizes drop the duplicated centre column/row, so the canvas stays
    an exact reflection: column 0 equals column width-1, row 0 equals
    row height-1.
    """
    qh, qw = quadrant.shape[:2]
    top = np.concatenate([quadrant, quadrant[:, ::-1][:, 2 * qw - width:]], axis=1)
    return np.concatenate([top, top[::-1][2 * qh - height:]], axis=0)


def _soften_mirror_band(
    pixels: NDArray[np.uint8],
    blend_amount: float,
    curve: TilingCurve,
    strength: float,
) -> NDArray[np.uint8]:
    """Desaturate a soft cross band over the mirror lines.

    Each pixel is pulled toward the local average luminance by
    strength × (1 - min(curve_h, curve_v)), where the per-axis curves are
    0 on the mirror line and 1 at the edge of the blend zone.
    """
    height, width = pixels.shape[:2]
    rgb = pixels[..., :3].astype(np.float64)

    local = uniform_filter(luminance(rgb), size=MIRROR_SOFTEN_WINDOW, mode="wrap")

    curve_h = shape(_axis_distances(width, width / 2) / (blend_amount * width), curve)
    curve_v = shape(_axis_distances(height, height / 2) / (blend_amount * height), curve)
    band = 1.0 - np.minimum(curve_h[np.newaxis, :], curve_v[:, np.newaxis])

    softened = lerp(rgb, local[..., np.newaxis], band * strength)

    out = pixels.copy()
    out[..., :3] = to_channel(softened)
    return out


def process_mirror(
    buffer: PixelBuffer,
    blend_amount: float = 0.15,
    curve: TilingCurve = "smooth",
    soften: bool = True,
    soften_strength: float = MIRROR_SOFTEN_STRENGTH,
) -> PixelBuffer:
    """Mirror tiling.

    A half-scale copy of the source fills the four quadrants as identity,
    horizontal flip, vertical flip and both flips. Opposite edges match
    exactly. With ``soften`` a cross band around the mirror lines is eased
    toward local average luminance to hide the reflection axis.
    """
    _validate(blend_amount, curve)

    width, height = buffer.width, buffer.height
    qw, qh = width - width // 2, height - height // 2

    half = buffer.to_image().resize((qw, qh), Image.Resampling.LANCZOS)
    quadrant = np.array(half, dtype=np.uint8)

    pixels = _mirror_quadrants(quadrant, width, height)

    if soften and soften_strength > 0:
        softened = _soften_mirror_band(pixels, blend_amount, curve, soften_strength)
        # Re-reflect so float noise in the filter cannot break edge symmetry
        pixels = _mirror_quadrants(softened[:qh, :qw], width, height)

    return PixelBuffer(width, height, np.ascontiguousarray(pixels))


ALGORITHMS: dict[str, Callable[..., PixelBuffer]] = {
    "crossBlend": process_cross_blend,
    "mirror": process_mirror,
    "patchMatch": process_patch_match,
    "offset": process_offset_only,
}


def process(
    buffer: PixelBuffer,
    algorithm: TilingAlgorithm = "crossBlend",
    blend_amount: float = 0.15,
    curve: TilingCurve = "smooth",
) -> PixelBuffer:
    """Make a buffer tile seamlessly.

    Args:
        buffer: Source image
        algorithm: One of "crossBlend", "mirror", "patchMatch", "offset"
        blend_amount: Blend zone size as a fraction of each dimension, (0, 0.5]
        curve: Blend curve, one of "linear", "smooth", "cubic"

    Returns:
        New buffer with the same dimensions

    Raises:
        InvalidParameterError: On an unknown algorithm or curve, or a blend
            amount outside (0, 0.5]
    """
    if algorithm not in ALGORITHMS:
        raise InvalidParameterError(
            f"Unknown tiling algorithm: {algorithm}. Use one of {list(ALGORITHMS.keys())}"
        )
    _validate(blend_amount, curve)

    return ALGORITHMS[algorithm](buffer, blend_amount, curve)


def tile_preview(buffer: PixelBuffer, repeat: int = 2) -> PixelBuffer:
    """Repeat a buffer in a repeat × repeat grid to eyeball the seams."""
    if repeat < 1:
        raise InvalidParameterError(f"repeat must be at least 1, got {repeat}")
    pixels = np.tile(buffer.pixels, (repeat, repeat, 1))
    return PixelBuffer(buffer.width * repeat, buffer.height * repeat, pixels)
