#!/usr/bin/env python3
"""Pytest configuration and shared fixtures."""
import pytest
import tempfile
from pathlib import Path
import sys

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from texture_pipeline.pixel_buffer import PixelBuffer


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def gray_buffer():
    """Uniform mid-gray 8x8 image."""
    return PixelBuffer.blank(8, 8, (128, 128, 128, 255))


@pytest.fixture
def black_buffer():
    """Opaque black 4x4 image."""
    return PixelBuffer.blank(4, 4, (0, 0, 0, 255))


@pytest.fixture
def ramp_buffer():
    """16x8 horizontal gray ramp, 0 on the left rising by 16 per column."""
    row = np.arange(16, dtype=np.uint8) * 16
    gray = np.tile(row, (8, 1))
    return PixelBuffer.from_array(gray)


@pytest.fixture
def textured_buffer():
    """16x12 opaque random color image (seeded)."""
    rng = np.random.default_rng(42)
    rgb = rng.integers(0, 256, size=(12, 16, 3), dtype=np.uint8)
    return PixelBuffer.from_array(rgb)


@pytest.fixture
def write_image(temp_dir):
    """Write a PixelBuffer to a PNG in the temp dir and return its path."""
    def _write(buffer, name="source.png"):
        return buffer.save(temp_dir / name)
    return _write
