"""Tests for recognition and detection preprocessing."""

import numpy as np
import pytest

from idphotocrop.services.preprocessing import (
    DETECTION_CONTRAST_FACTOR,
    contrast_factor,
    downscale_to_limit,
    to_detection_ready,
    to_ocr_ready,
)
from idphotocrop.services.raster import RasterImage

from conftest import make_rgba


class TestContrastFactor:
    def test_zero_contrast_is_identity(self):
        assert contrast_factor(0) == pytest.approx(259 * 255 / (255 * 259))

    def test_ocr_contrast_slightly_above_one(self):
        assert contrast_factor(1.3) == pytest.approx(1.01017, abs=1e-4)


class TestOcrReady:
    def test_returns_grayscale_same_size(self, rgba_image):
        out = to_ocr_ready(rgba_image)
        assert out.is_grayscale
        assert out.size == rgba_image.size

    def test_midpoint_is_fixed(self):
        img = RasterImage.blank(4, 4, value=128)
        assert (to_ocr_ready(img).pixels == 128).all()

    def test_clamps_extremes(self):
        white = to_ocr_ready(RasterImage.blank(3, 3, value=255))
        black = to_ocr_ready(RasterImage.blank(3, 3, value=0))
        assert (white.pixels == 255).all()
        assert (black.pixels == 0).all()

    def test_deterministic(self, rgba_image):
        assert to_ocr_ready(rgba_image) == to_ocr_ready(rgba_image)

    def test_input_untouched(self, rgba_image):
        before = rgba_image.pixels.copy()
        to_ocr_ready(rgba_image)
        np.testing.assert_array_equal(rgba_image.pixels, before)


class TestDetectionReady:
    def test_stretches_color_channels(self):
        img = RasterImage.blank(2, 2, value=100)
        out = to_detection_ready(img)
        expected = round(DETECTION_CONTRAST_FACTOR * (100 - 128) + 128)
        assert (out.pixels[:, :, :3] == expected).all()

    def test_alpha_passes_through(self):
        arr = np.full((2, 2, 4), 200, dtype=np.uint8)
        arr[:, :, 3] = 17
        out = to_detection_ready(RasterImage(arr))
        assert (out.pixels[:, :, 3] == 17).all()
        assert (out.pixels[:, :, :3] == 236).all()

    def test_keeps_color(self, rgba_image):
        assert not to_detection_ready(rgba_image).is_grayscale


class TestDownscale:
    def test_small_image_unchanged(self):
        img = make_rgba(100, 80)
        assert downscale_to_limit(img, 1500) is img

    def test_longer_side_capped(self):
        img = RasterImage.blank(3000, 2000)
        out = downscale_to_limit(img, 1500)
        assert out.size == (1500, 1000)

    def test_portrait_capped_on_height(self):
        img = RasterImage.blank(1000, 3000)
        out = downscale_to_limit(img, 1500)
        assert out.height == 1500
        assert out.width == 500
