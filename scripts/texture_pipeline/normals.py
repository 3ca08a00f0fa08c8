"""
Tangent-space normal maps and curvature derived from them.

The normal map treats image brightness as elevation and takes its slope
with a 3×3 Sobel operator (the same weighting as Horn's method for
terrain). Curvature is the discrete divergence of the resulting normal
field, stored around a mid-gray of 128 for flat regions.

Encoding: each unit-vector component v is stored as (v × 0.5 + 0.5) × 255,
so a flat surface is (128, 128, 255). This includes Z: the common shortcut
B = nz × 255 is not used, because it breaks the round trip to unit-length
vectors that decode_normals relies on.
"""

import math
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from .compositing import gray_to_rgba, to_channel
from .errors import DimensionMismatchError, InvalidParameterError
from .pixel_buffer import PixelBuffer
from .surface_maps import gray_values


# Largest deviation of a decoded normal's length from 1 still accepted as
# a normal map. 8-bit quantization alone stays well below 0.01.
NORMAL_LENGTH_TOLERANCE = 0.1


def sobel_gradients(
    values: NDArray[np.float64],
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Horizontal and vertical Sobel gradients with replicated borders.

    Args:
        values: (H, W) array

    Returns:
        Tuple of (dx, dy): dx grows to the right, dy grows downward
    """
    # Pad for edge handling: out-of-bounds neighbors reuse the edge pixel
    padded = np.pad(values, 1, mode="edge")

    z1 = padded[:-2, :-2]   # top-left
    z2 = padded[:-2, 1:-1]  # top-center
    z3 = padded[:-2, 2:]    # top-right
    z4 = padded[1:-1, :-2]  # mid-left
    z6 = padded[1:-1, 2:]   # mid-right
    z7 = padded[2:, :-2]    # bottom-left
    z8 = padded[2:, 1:-1]   # bottom-center
    z9 = padded[2:, 2:]     # bottom-right

    dx = (z3 + 2 * z6 + z9) - (z1 + 2 * z4 + z7)
    dy = (z7 + 2 * z8 + z9) - (z1 + 2 * z2 + z3)
    return dx, dy


def encode_normals(
    nx: NDArray[np.float64],
    ny: NDArray[np.float64],
    nz: NDArray[np.float64],
) -> NDArray[np.uint8]:
    """Pack unit-vector components into opaque RGBA8."""
    out = np.empty(nx.shape + (4,), dtype=np.uint8)
    out[..., 0] = to_channel((nx * 0.5 + 0.5) * 255)
    out[..., 1] = to_channel((ny * 0.5 + 0.5) * 255)
    out[..., 2] = to_channel((nz * 0.5 + 0.5) * 255)
    out[..., 3] = 255
    return out


def decode_normals(buffer: PixelBuffer) -> NDArray[np.float64]:
    """Unpack RGB into normal vectors in [-1, 1], shape (H, W, 3)."""
    return buffer.rgb_float() / 255 * 2 - 1


def generate_normal_map(buffer: PixelBuffer, strength: float = 1.0) -> PixelBuffer:
    """Generate a tangent-space normal map from image brightness.

    The Z component is 255 / strength before normalization, so higher
    strength flattens Z and exaggerates relief. Z is always positive, which
    keeps the vector length away from zero.

    Args:
        buffer: Source image
        strength: Relief strength (> 0)

    Returns:
        Opaque normal map

    Raises:
        InvalidParameterError: If strength is not a positive finite number
    """
    if not math.isfinite(strength) or strength <= 0:
        raise InvalidParameterError(f"strength must be a positive number, got {strength}")

    dx, dy = sobel_gradients(gray_values(buffer))
    dz = 255.0 / strength

    length = np.sqrt(dx * dx + dy * dy + dz * dz)
    pixels = encode_normals(dx / length, dy / length, dz / length)

    return PixelBuffer(buffer.width, buffer.height, pixels)


def check_normal_encoding(
    buffer: PixelBuffer,
    tolerance: float = NORMAL_LENGTH_TOLERANCE,
) -> None:
    """Raise if a buffer does not look like an encoded normal map.

    Every decoded vector must have unit length within ``tolerance`` and
    point out of the surface (Z >= 0, allowing for quantization).

    Raises:
        DimensionMismatchError: If any pixel fails the check
    """
    normals = decode_normals(buffer)
    lengths = np.sqrt((normals * normals).sum(axis=-1))

    worst = float(np.abs(lengths - 1).max())
    if worst > tolerance:
        raise DimensionMismatchError(
            f"Buffer is not a normal map: decoded vector length off by {worst:.3f}"
        )
    if float(normals[..., 2].min()) < -2 / 255:
        raise DimensionMismatchError("Buffer is not a normal map: normals point inward")


def generate_curvature_map(
    normal_map: PixelBuffer,
    reference: Optional[PixelBuffer] = None,
    strict: bool = False,
) -> PixelBuffer:
    """Curvature from the divergence of a normal map.

    Uses the X component of the left/right neighbors and the Y component of
    the up/down neighbors (edges clamped):

        curvature = 0.5 × ((nx_right - nx_left) + (ny_down - ny_up))

    Only R and G are read, so maps that store Z differently (e.g. B = nz × 255)
    or hand-painted maps are accepted as-is.

    Args:
        normal_map: Output of generate_normal_map (or a compatible map)
        reference: Optional companion buffer whose size must match
        strict: Also require unit-length, outward-facing decoded normals

    Returns:
        Opaque grayscale curvature map, 128 = flat

    Raises:
        DimensionMismatchError: If sizes disagree, or with ``strict`` if the
            input is not a standard normal map encoding
    """
    if reference is not None and not normal_map.same_size(reference):
        raise DimensionMismatchError(
            f"Normal map is {normal_map.width}x{normal_map.height}, "
            f"expected {reference.width}x{reference.height}"
        )
    if strict:
        check_normal_encoding(normal_map)

    normals = decode_normals(normal_map)
    nx = np.pad(normals[..., 0], 1, mode="edge")
    ny = np.pad(normals[..., 1], 1, mode="edge")

    nx_left = nx[1:-1, :-2]
    nx_right = nx[1:-1, 2:]
    ny_up = ny[:-2, 1:-1]
    ny_down = ny[2:, 1:-1]

    curvature = 0.5 * ((nx_right - nx_left) + (ny_down - ny_up))

    return PixelBuffer(
        normal_map.width,
        normal_map.height,
        gray_to_rgba((curvature * 0.5 + 0.5) * 255),
    )
