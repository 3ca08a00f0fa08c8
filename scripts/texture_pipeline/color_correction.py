"""
Color correction applied to the source before any map is derived.

Stages run in a fixed order on float values, each one consuming the
previous stage's output:

1. Delight - pull channels toward the per-pixel mean (tames highlights)
2. Brightness - additive shift
3. Contrast - polynomial remap around the 128 midpoint
4. Saturation - interpolate against Rec. 601 luma
5. Hue - fixed 3×3 rotation matrix
6. Tint - optional multiply by a flat color

Channels are clamped to 0-255 only after the last stage, so e.g. values
pushed past 255 by brightness are still visible to the contrast stage.

The hue matrix is the usual luminance-preserving approximation, not an
exact HSL round trip. Good enough for stylization; not colorimetric.
"""

import math

import numpy as np
from numpy.typing import NDArray

from .compositing import luminance, multiply, to_channel
from .config import MapOptions
from .pixel_buffer import PixelBuffer


def contrast_factor(amount: float) -> float:
    """Classic polynomial contrast factor.

    Args:
        amount: Contrast offset in 0-255 units (-255 to 255 is meaningful)

    Returns:
        Multiplier applied around the 128 midpoint
    """
    return (259 * (amount + 255)) / (255 * (259 - amount))


def hue_rotation_matrix(degrees: float) -> NDArray[np.float64]:
    """Luminance-preserving hue rotation matrix (rows produce R, G, B)."""
    angle = math.radians(degrees)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return np.array([
        [
            0.213 + cos_a * 0.787 - sin_a * 0.213,
            0.715 - cos_a * 0.715 - sin_a * 0.715,
            0.072 - cos_a * 0.072 + sin_a * 0.928,
        ],
        [
            0.213 - cos_a * 0.213 + sin_a * 0.143,
            0.715 + cos_a * 0.285 + sin_a * 0.140,
            0.072 - cos_a * 0.072 - sin_a * 0.283,
        ],
        [
            0.213 - cos_a * 0.213 - sin_a * 0.787,
            0.715 - cos_a * 0.715 + sin_a * 0.715,
            0.072 + cos_a * 0.928 + sin_a * 0.072,
        ],
    ])


def delight(rgb: NDArray[np.float64], amount: float) -> NDArray[np.float64]:
    """Pull each channel toward the per-pixel mean by amount × 0.5."""
    if amount <= 0:
        return rgb
    mean = rgb.mean(axis=-1, keepdims=True)
    return rgb + (mean - rgb) * (amount * 0.5)


def adjust_brightness(rgb: NDArray[np.float64], amount: float) -> NDArray[np.float64]:
    return rgb + amount * 255


def adjust_contrast(rgb: NDArray[np.float64], amount: float) -> NDArray[np.float64]:
    """Contrast in [-1, 1], scaled to 0-255 units before the factor."""
    amount = min(1.0, max(-1.0, amount))
    factor = contrast_factor(amount * 255)
    return factor * (rgb - 128) + 128


def adjust_saturation(rgb: NDArray[np.float64], amount: float) -> NDArray[np.float64]:
    gray = luminance(rgb)[..., np.newaxis]
    return gray + (rgb - gray) * (1 + amount)


def rotate_hue(rgb: NDArray[np.float64], degrees: float) -> NDArray[np.float64]:
    if abs(degrees) <= 0:
        return rgb
    return rgb @ hue_rotation_matrix(degrees).T


def correct_rgb(rgb: NDArray[np.float64], options: MapOptions) -> NDArray[np.float64]:
    """Run all correction stages on float RGB without clamping."""
    rgb = delight(rgb, options.delight_amount)
    rgb = adjust_brightness(rgb, options.brightness)
    rgb = adjust_contrast(rgb, options.color_contrast_amount)
    rgb = adjust_saturation(rgb, options.saturation)
    rgb = rotate_hue(rgb, options.hue)
    if options.enable_tint:
        rgb = multiply(rgb, np.asarray(options.tint_rgb, dtype=np.float64))
    return rgb


def apply_color_correction(buffer: PixelBuffer, options: MapOptions) -> PixelBuffer:
    """Apply delight, brightness, contrast, saturation, hue and tint.

    Args:
        buffer: Source image
        options: Map options carrying the correction parameters

    Returns:
        New buffer of the same size; alpha is passed through
    """
    rgb = correct_rgb(buffer.rgb_float(), options)

    out = np.empty_like(buffer.pixels)
    out[..., :3] = to_channel(rgb)
    out[..., 3] = buffer.alpha
    return PixelBuffer(buffer.width, buffer.height, out)
