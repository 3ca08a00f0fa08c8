"""
Per-pixel alpha arithmetic over in-memory buffers.

Blend weights are computed analytically as float maps and applied here,
instead of masking through a retained-mode drawing API. All functions are
vectorized with NumPy and work on float64 channel values in the 0-255
range unless noted otherwise.
"""

from typing import Optional

import numpy as np
from numpy.typing import NDArray


def _expand(weight: NDArray[np.float64], target: NDArray[np.float64]) -> NDArray[np.float64]:
    """Broadcast an (H, W) weight map against (H, W, C) channels."""
    if target.ndim > weight.ndim:
        return weight[..., np.newaxis]
    return weight


def lerp(
    base: NDArray[np.float64],
    blend: NDArray[np.float64],
    weight: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Linear interpolation: base × (1 - weight) + blend × weight.

    A weight of 0 keeps ``base`` untouched, 1 replaces it with ``blend``.

    Args:
        base: Base layer, shape (H, W) or (H, W, C)
        blend: Layer drawn over the base, same shape as ``base``
        weight: Per-pixel weight (H, W) or scalar, expected within 0-1

    Returns:
        Blended float array
    """
    weight = np.asarray(weight, dtype=np.float64)
    if weight.ndim:
        weight = _expand(weight, base)
    return base * (1.0 - weight) + blend * weight


def multiply(
    base: NDArray[np.float64],
    color: NDArray[np.float64],
    opacity: float = 1.0,
) -> NDArray[np.float64]:
    """Multiply blend mode on 0-255 channels.

    Formula: result = base × color / 255

    White (255) leaves the base unchanged; darker colors tint toward the
    color. Used for the optional tint stage of color correction.

    Args:
        base: Base channels (H, W, 3), 0-255
        color: Tint color, broadcastable to ``base``, 0-255
        opacity: Blend strength (0-1)

    Returns:
        Blended channels, 0-255 (unclamped)
    """
    result = base * (np.asarray(color, dtype=np.float64) / 255.0)
    return base * (1 - opacity) + result * opacity


def luminance(rgb: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rec. 601 luma of an (H, W, 3) array, as used by the saturation stage."""
    return 0.2989 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]


def to_channel(values: NDArray[np.float64]) -> NDArray[np.uint8]:
    """Round to nearest and clamp float channel values into uint8.

    NaN never reaches this point because parameters that could produce it
    are rejected up front; ``nan_to_num`` keeps the output valid regardless.
    """
    values = np.nan_to_num(values, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def gray_to_rgba(
    gray: NDArray[np.float64],
    alpha: Optional[NDArray[np.uint8]] = None,
) -> NDArray[np.uint8]:
    """Replicate a single-channel map into R, G, B and attach alpha.

    Args:
        gray: (H, W) float values, 0-255
        alpha: Optional (H, W) alpha to pass through; opaque when omitted

    Returns:
        (H, W, 4) uint8 array
    """
    channel = to_channel(gray)
    out = np.empty(gray.shape + (4,), dtype=np.uint8)
    out[..., 0] = channel
    out[..., 1] = channel
    out[..., 2] = channel
    out[..., 3] = 255 if alpha is None else alpha
    return out
