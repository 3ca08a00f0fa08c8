#!/usr/bin/env python3
"""Tests for grayscale, height, roughness, AO and metalness maps."""
import pytest
from pathlib import Path
import sys

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from texture_pipeline.errors import InvalidParameterError
from texture_pipeline.pixel_buffer import PixelBuffer
from texture_pipeline.surface_maps import (
    generate_ao_map,
    generate_height_map,
    generate_metalness_map,
    generate_roughness_map,
    to_grayscale,
)


def _dark_pit(size=9):
    """White square with a single black pixel in the middle."""
    buffer = PixelBuffer.blank(size, size, (255, 255, 255, 255))
    buffer.pixels[size // 2, size // 2, :3] = 0
    return buffer


class TestGrayscale:
    """Tests for grayscale conversion."""

    def test_unweighted_mean(self):
        """Test gray is the plain mean of R, G, B."""
        buffer = PixelBuffer.blank(1, 1, (30, 60, 90, 255))
        assert to_grayscale(buffer).pixels[0, 0].tolist() == [60, 60, 60, 255]

    def test_idempotent(self, textured_buffer):
        """Test converting twice equals converting once."""
        once = to_grayscale(textured_buffer)
        assert to_grayscale(once) == once

    def test_alpha_passes_through(self, textured_buffer):
        """Test alpha is copied from the source."""
        textured_buffer.pixels[..., 3] = 42
        assert (to_grayscale(textured_buffer).alpha == 42).all()


class TestHeightMap:
    """Tests for height map generation."""

    def test_black_without_contrast(self, black_buffer):
        """Test black input with no contrast stays black."""
        height = generate_height_map(black_buffer, contrast=0)
        assert height.size == (4, 4)
        assert (height.pixels[..., :3] == 0).all()
        assert (height.alpha == 255).all()

    def test_midpoint_fixed_under_contrast(self, gray_buffer):
        """Test mid-gray is unchanged by any contrast."""
        for contrast in (-1.0, -0.3, 0.5, 1.0):
            height = generate_height_map(gray_buffer, contrast=contrast)
            assert (height.pixels[..., :3] == 128).all()

    def test_contrast_spreads_values(self, ramp_buffer):
        """Test positive contrast widens the value range."""
        flat = generate_height_map(ramp_buffer, contrast=0)
        steep = generate_height_map(ramp_buffer, contrast=0.5)
        assert np.ptp(steep.pixels[..., 0]) > np.ptp(flat.pixels[..., 0])

    @pytest.mark.parametrize("contrast", [259 / 128, 3.0, 50.0])
    def test_out_of_range_contrast_clamped(self, ramp_buffer, contrast):
        """Test contrast above 1 acts like 1 (no division by zero or sign flip)."""
        expected = generate_height_map(ramp_buffer, contrast=1.0)
        assert generate_height_map(ramp_buffer, contrast=contrast) == expected

    def test_negative_contrast_clamped(self, ramp_buffer):
        """Test contrast below -1 acts like -1."""
        height = generate_height_map(ramp_buffer, contrast=-4.0)
        assert height == generate_height_map(ramp_buffer, contrast=-1.0)

    def test_blur_smooths(self, textured_buffer):
        """Test blur reduces local variation."""
        sharp = generate_height_map(textured_buffer)
        blurred = generate_height_map(textured_buffer, blur=2.0)
        assert blurred.pixels[..., 0].std() < sharp.pixels[..., 0].std()

    def test_alpha_passes_through(self, gray_buffer):
        """Test source alpha is kept on the height map."""
        gray_buffer.pixels[..., 3] = 7
        assert (generate_height_map(gray_buffer).alpha == 7).all()


class TestRoughnessMap:
    """Tests for roughness map generation."""

    def test_plain_is_grayscale(self, textured_buffer):
        """Test non-inverted roughness equals the grayscale image."""
        assert generate_roughness_map(textured_buffer) == to_grayscale(textured_buffer)

    def test_inverted_black_is_white(self, black_buffer):
        """Test inverting black gives full roughness."""
        roughness = generate_roughness_map(black_buffer, invert=True)
        assert (roughness.pixels[..., :3] == 255).all()
        assert (roughness.alpha == 255).all()

    def test_invert_is_complement(self, textured_buffer):
        """Test inverted plus plain sums to 255."""
        plain = generate_roughness_map(textured_buffer).pixels[..., 0].astype(int)
        inverted = generate_roughness_map(textured_buffer, invert=True).pixels[..., 0].astype(int)
        assert ((plain + inverted) == 255).all()


class TestAOMap:
    """Tests for ambient occlusion generation."""

    def test_flat_is_unoccluded(self, gray_buffer):
        """Test a flat image has no occlusion."""
        ao = generate_ao_map(gray_buffer)
        assert (ao.pixels[..., :3] == 255).all()

    def test_dark_pit_is_occluded(self):
        """Test only the pixel darker than its neighborhood is occluded."""
        ao = generate_ao_map(_dark_pit())
        values = ao.pixels[..., 0]
        # Neighborhood mean 24*255/25 = 244.8, so 255 - 244.8 rounds to 10
        assert values[4, 4] == 10
        mask = np.ones_like(values, dtype=bool)
        mask[4, 4] = False
        assert (values[mask] == 255).all()

    def test_strength_scales_occlusion(self):
        """Test higher strength darkens the pit further, floored at 0."""
        ao = generate_ao_map(_dark_pit(), strength=2.0)
        assert ao.pixels[4, 4, 0] == 0

    def test_multiplier_scales_occlusion(self):
        """Test the energy multiplier acts like extra strength."""
        a = generate_ao_map(_dark_pit(), strength=0.5, multiplier=2.0)
        b = generate_ao_map(_dark_pit(), strength=1.0)
        assert a == b

    def test_output_is_opaque(self, gray_buffer):
        """Test AO is opaque even for transparent input."""
        gray_buffer.pixels[..., 3] = 0
        assert (generate_ao_map(gray_buffer).alpha == 255).all()

    def test_single_pixel(self):
        """Test borders are replicated so a 1x1 buffer works."""
        ao = generate_ao_map(PixelBuffer.blank(1, 1, (50, 50, 50, 255)))
        assert ao.pixels[0, 0].tolist() == [255, 255, 255, 255]

    @pytest.mark.parametrize("strength", [0, -1, float("nan")])
    def test_invalid_strength_raises(self, gray_buffer, strength):
        """Test non-positive strength is rejected."""
        with pytest.raises(InvalidParameterError):
            generate_ao_map(gray_buffer, strength=strength)


class TestMetalnessMap:
    """Tests for metalness map generation."""

    def test_dielectric_is_zero(self, textured_buffer):
        """Test non-metallic surfaces are uniformly 0."""
        metalness = generate_metalness_map(textured_buffer, is_metallic=False)
        assert (metalness.pixels[..., :3] == 0).all()
        assert (metalness.alpha == 255).all()

    def test_full_metal_follows_brightness(self, textured_buffer):
        """Test base 1 reproduces the grayscale image."""
        metalness = generate_metalness_map(textured_buffer, is_metallic=True, base=1.0)
        expected = to_grayscale(textured_buffer).pixels[..., 0]
        assert (metalness.pixels[..., 0] == expected).all()

    def test_base_scales(self):
        """Test base scales metalness linearly."""
        buffer = PixelBuffer.blank(2, 2, (200, 200, 200, 255))
        metalness = generate_metalness_map(buffer, is_metallic=True, base=0.5)
        assert (metalness.pixels[..., :3] == 100).all()
