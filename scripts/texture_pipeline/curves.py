"""
Blend-weight shaping curves used by the seamless tiling algorithms.

Every curve maps [0, 1] onto [0, 1], is monotonic non-decreasing and fixes
both endpoints (shape(0) = 0, shape(1) = 1). Seam continuity depends on
these properties: a weight of 0 at the edge of a blend zone must mean
"no contribution", and 1 at its centre "full contribution".
"""

from typing import Literal, Union

import numpy as np
from numpy.typing import NDArray

from .errors import InvalidParameterError


TilingCurve = Literal["linear", "smooth", "cubic"]

ArrayOrFloat = Union[float, NDArray[np.float64]]


def linear(t: ArrayOrFloat) -> ArrayOrFloat:
    """Identity."""
    return t


def smoothstep(t: ArrayOrFloat) -> ArrayOrFloat:
    """Hermite smoothstep: t²(3 - 2t). Zero slope at both ends."""
    return t * t * (3 - 2 * t)


def smootherstep(t: ArrayOrFloat) -> ArrayOrFloat:
    """Perlin's smootherstep: t³(t(6t - 15) + 10).

    Zero first and second derivatives at both ends, which hides the blend
    zone boundary better than smoothstep on high-contrast textures.
    """
    return t * t * t * (t * (6 * t - 15) + 10)


CURVES = {
    "linear": linear,
    "smooth": smoothstep,
    "cubic": smootherstep,
}


def shape(t: ArrayOrFloat, curve: TilingCurve = "linear") -> ArrayOrFloat:
    """Shape a normalized distance into a blend weight.

    Args:
        t: Normalized position in [0, 1]; values outside are clamped
        curve: One of "linear", "smooth", "cubic"

    Returns:
        Blend weight in [0, 1], same type and shape as ``t``

    Raises:
        InvalidParameterError: If the curve name is not recognized
    """
    if curve not in CURVES:
        raise InvalidParameterError(
            f"Unknown tiling curve: {curve}. Use one of {list(CURVES.keys())}"
        )

    if isinstance(t, np.ndarray):
        clamped = np.clip(t.astype(np.float64), 0.0, 1.0)
    else:
        clamped = min(1.0, max(0.0, float(t)))

    return CURVES[curve](clamped)


def list_curves() -> list[str]:
    return list(CURVES.keys())
