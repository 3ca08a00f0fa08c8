"""
RGBA8 pixel buffer shared by every stage of the pipeline.

Pixels are stored row-major as a numpy array of shape (height, width, 4)
with uint8 values in R, G, B, A order and straight (non-premultiplied)
alpha. Pillow is used only at the edges to decode and encode image files.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from .errors import DimensionMismatchError


@dataclass
class PixelBuffer:
    """Decoded RGBA8 image."""

    width: int
    height: int
    pixels: NDArray[np.uint8]

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise DimensionMismatchError(
                f"Buffer dimensions must be positive, got {self.width}x{self.height}"
            )

        pixels = np.asarray(self.pixels)
        expected = self.width * self.height * 4
        if pixels.size != expected:
            raise DimensionMismatchError(
                f"Expected {expected} channel values for {self.width}x{self.height} "
                f"RGBA, got {pixels.size}"
            )
        if pixels.dtype != np.uint8:
            if pixels.size and (pixels.min() < 0 or pixels.max() > 255):
                raise DimensionMismatchError("Channel values must be within 0-255")
            pixels = pixels.astype(np.uint8)

        self.pixels = np.ascontiguousarray(pixels.reshape(self.height, self.width, 4))

    @classmethod
    def from_array(cls, array: NDArray) -> "PixelBuffer":
        """Wrap an (H, W, 4) array. (H, W, 3) and (H, W) get an opaque alpha."""
        array = np.asarray(array)
        if array.ndim == 2:
            array = np.repeat(array[..., np.newaxis], 3, axis=-1)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise DimensionMismatchError(
                f"Expected an (H, W, 3) or (H, W, 4) array, got shape {array.shape}"
            )
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=array.dtype)
            array = np.concatenate([array, alpha], axis=-1)
        height, width = array.shape[:2]
        return cls(width, height, array)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: Union[bytes, Sequence[int]]) -> "PixelBuffer":
        """Build from a flat RGBA byte sequence of length width*height*4."""
        if isinstance(data, (bytes, bytearray, memoryview)):
            pixels = np.frombuffer(data, dtype=np.uint8).copy()
        else:
            pixels = np.asarray(data)
        return cls(width, height, pixels)

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        fill: tuple[int, int, int, int] = (0, 0, 0, 255),
    ) -> "PixelBuffer":
        """Create a buffer filled with a single color."""
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = np.asarray(fill, dtype=np.uint8)
        return cls(width, height, pixels)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        """Decode a Pillow image of any mode into RGBA8."""
        rgba = image.convert("RGBA")
        return cls(rgba.width, rgba.height, np.array(rgba, dtype=np.uint8))

    @classmethod
    def load(cls, path: Union[str, Path]) -> "PixelBuffer":
        """Load an image file from disk."""
        with Image.open(path) as img:
            return cls.from_image(img)

    def to_image(self) -> Image.Image:
        """Encode as a Pillow RGBA image."""
        return Image.fromarray(self.pixels)

    def save(self, path: Union[str, Path]) -> Path:
        """Write the buffer to disk; the format follows the file suffix."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_image().save(path)
        return path

    def to_bytes(self) -> bytes:
        """Flat RGBA bytes, row-major."""
        return self.pixels.tobytes()

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.pixels.copy())

    @property
    def size(self) -> tuple[int, int]:
        """(width, height), matching Pillow's convention."""
        return (self.width, self.height)

    @property
    def alpha(self) -> NDArray[np.uint8]:
        return self.pixels[..., 3]

    def rgb_float(self) -> NDArray[np.float64]:
        """RGB channels as float64, shape (H, W, 3)."""
        return self.pixels[..., :3].astype(np.float64)

    def same_size(self, other: "PixelBuffer") -> bool:
        return self.width == other.width and self.height == other.height

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.same_size(other) and np.array_equal(self.pixels, other.pixels)
