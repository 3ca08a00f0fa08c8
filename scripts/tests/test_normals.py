#!/usr/bin/env python3
"""Tests for normal and curvature maps."""
import pytest
from pathlib import Path
import sys

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from texture_pipeline.errors import DimensionMismatchError, InvalidParameterError
from texture_pipeline.normals import (
    decode_normals,
    generate_curvature_map,
    generate_normal_map,
    sobel_gradients,
)
from texture_pipeline.pixel_buffer import PixelBuffer


class TestSobel:
    """Tests for the gradient operator."""

    def test_flat_has_no_gradient(self):
        """Test constant input gives zero gradients."""
        dx, dy = sobel_gradients(np.full((5, 5), 80.0))
        assert (dx == 0).all()
        assert (dy == 0).all()

    def test_horizontal_ramp(self):
        """Test a left-to-right ramp yields positive dx and no dy."""
        values = np.tile(np.arange(6, dtype=np.float64) * 10, (4, 1))
        dx, dy = sobel_gradients(values)
        # Interior: weights 1+2+1 times a difference of 20
        assert (dx[:, 1:-1] == 80).all()
        assert (dy == 0).all()

    def test_edges_replicated(self):
        """Test border pixels see their own value outside the image."""
        values = np.tile(np.arange(6, dtype=np.float64) * 10, (4, 1))
        dx, _ = sobel_gradients(values)
        assert (dx[:, 0] == 40).all()
        assert (dx[:, -1] == 40).all()


class TestNormalMap:
    """Tests for normal map generation."""

    def test_flat_surface(self, gray_buffer):
        """Test uniform input encodes the straight-up normal."""
        normal = generate_normal_map(gray_buffer)
        assert (normal.pixels == [128, 128, 255, 255]).all()

    def test_unit_length(self, textured_buffer):
        """Test decoded normals have unit length up to quantization."""
        for strength in (0.5, 1.0, 5.0):
            normals = decode_normals(generate_normal_map(textured_buffer, strength))
            lengths = np.sqrt((normals * normals).sum(axis=-1))
            assert np.abs(lengths - 1).max() < 0.02

    def test_z_points_outward(self, textured_buffer):
        """Test the blue channel never encodes a negative Z."""
        normal = generate_normal_map(textured_buffer, strength=5.0)
        assert (normal.pixels[..., 2] >= 128).all()

    def test_ramp_tilts_along_x(self, ramp_buffer):
        """Test a horizontal ramp tilts normals in X only."""
        normal = generate_normal_map(ramp_buffer)
        interior = normal.pixels[:, 1:-1]
        assert (interior[..., 0] > 128).all()
        assert (interior[..., 1] == 128).all()

    def test_strength_exaggerates_relief(self, ramp_buffer):
        """Test higher strength increases the tilt."""
        soft = generate_normal_map(ramp_buffer, strength=0.5).pixels[4, 8, 0]
        strong = generate_normal_map(ramp_buffer, strength=3.0).pixels[4, 8, 0]
        assert strong > soft

    def test_output_is_opaque(self, gray_buffer):
        """Test normals are opaque regardless of source alpha."""
        gray_buffer.pixels[..., 3] = 0
        assert (generate_normal_map(gray_buffer).alpha == 255).all()

    @pytest.mark.parametrize("strength", [0, -2.0, float("nan"), float("inf")])
    def test_invalid_strength_raises(self, gray_buffer, strength):
        """Test non-positive or non-finite strength is rejected."""
        with pytest.raises(InvalidParameterError):
            generate_normal_map(gray_buffer, strength=strength)


class TestCurvatureMap:
    """Tests for curvature generation."""

    def test_flat_is_mid_gray(self, gray_buffer):
        """Test a flat normal map gives curvature 128."""
        curvature = generate_curvature_map(generate_normal_map(gray_buffer))
        assert (curvature.pixels == [128, 128, 128, 255]).all()

    def test_bump_deviates_from_flat(self):
        """Test a bright bump produces non-neutral curvature at its peak."""
        yy, xx = np.mgrid[0:15, 0:15]
        bump = 255 * np.exp(-((xx - 7) ** 2 + (yy - 7) ** 2) / 8.0)
        source = PixelBuffer.from_array(bump.astype(np.uint8))
        curvature = generate_curvature_map(generate_normal_map(source))
        assert curvature.pixels[7, 7, 0] != 128
        assert curvature.pixels[0, 0, 0] == 128

    def test_reference_size_mismatch_raises(self, gray_buffer, black_buffer):
        """Test a reference of a different size is rejected."""
        normal = generate_normal_map(gray_buffer)
        with pytest.raises(DimensionMismatchError):
            generate_curvature_map(normal, reference=black_buffer)

    def test_matching_reference_accepted(self, gray_buffer):
        """Test a same-size reference passes the check."""
        normal = generate_normal_map(gray_buffer)
        curvature = generate_curvature_map(normal, reference=gray_buffer)
        assert curvature.size == gray_buffer.size

    def test_strict_rejects_non_normal_input(self, black_buffer):
        """Test strict mode rejects a buffer that is not a normal encoding."""
        with pytest.raises(DimensionMismatchError):
            generate_curvature_map(black_buffer, strict=True)

    def test_strict_accepts_generated_normals(self, textured_buffer):
        """Test strict mode passes maps from generate_normal_map."""
        normal = generate_normal_map(textured_buffer, strength=3.0)
        assert generate_curvature_map(normal, strict=True).size == (16, 12)

    def test_hand_built_ramp(self):
        """Test a painted R ramp is accepted and reads as divergence in X."""
        pixels = np.zeros((4, 4, 4), dtype=np.uint8)
        pixels[..., 0] = [128, 160, 192, 224]
        pixels[..., 1] = 128
        pixels[..., 2] = 255
        pixels[..., 3] = 255
        curvature = generate_curvature_map(PixelBuffer(4, 4, pixels))

        values = curvature.pixels[..., 0]
        # Interior: 0.5 * (192 - 128) * 2 / 255 ~ 0.251, encoded ~ 160
        assert abs(int(values[0, 1]) - 160) <= 1
        assert (values[:, 1:3] > 128).all()
        assert (values == values[0]).all()

    def test_alternate_z_encoding(self):
        """Test a map storing B = nz * 255 is read through R and G only."""
        # Normal (0.6, 0, 0.8) with B written as 0.8 * 255
        normal = PixelBuffer.blank(4, 4, (204, 128, 204, 255))
        curvature = generate_curvature_map(normal)
        assert (curvature.pixels[..., :3] == 128).all()
