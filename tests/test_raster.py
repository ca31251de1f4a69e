"""Tests for RasterImage and the geometry types."""

import numpy as np
import pytest

from idphotocrop.services.geometry import Candidate, CropSpec, Rectangle
from idphotocrop.services.raster import RasterImage


class TestRasterImage:
    def test_rgb_is_promoted_to_rgba(self):
        img = RasterImage(np.zeros((5, 7, 3), dtype=np.uint8))
        assert img.pixels.shape == (5, 7, 4)
        assert (img.pixels[:, :, 3] == 255).all()
        assert img.size == (7, 5)

    def test_grayscale_kept_single_channel(self):
        img = RasterImage(np.zeros((4, 6), dtype=np.uint8))
        assert img.is_grayscale
        assert img.width == 6
        assert img.height == 4

    def test_buffer_is_copied_and_read_only(self):
        src = np.zeros((3, 3), dtype=np.uint8)
        img = RasterImage(src)
        src[0, 0] = 99
        assert img.pixels[0, 0] == 0
        with pytest.raises(ValueError):
            img.pixels[0, 0] = 1

    def test_rejects_non_uint8(self):
        with pytest.raises(ValueError):
            RasterImage(np.zeros((3, 3), dtype=np.float32))

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            RasterImage(np.zeros((3, 3, 2), dtype=np.uint8))

    def test_equality_by_pixels(self):
        a = RasterImage.blank(4, 4)
        b = RasterImage.blank(4, 4)
        c = RasterImage.blank(4, 4, value=0)
        assert a == b
        assert a != c

    def test_region_copies_sub_rectangle(self):
        arr = np.arange(20, dtype=np.uint8).reshape(4, 5)
        sub = RasterImage(arr).region(1, 2, 3, 2)
        np.testing.assert_array_equal(sub.pixels, arr[2:4, 1:4])

    def test_to_rgba_from_grayscale(self):
        img = RasterImage(np.full((2, 2), 7, dtype=np.uint8))
        rgba = img.to_rgba()
        assert rgba.shape == (2, 2, 4)
        assert (rgba[:, :, :3] == 7).all()
        assert rgba.flags.writeable

    def test_pil_round_trip_preserves_pixels(self, rgba_image):
        assert RasterImage.from_pil(rgba_image.to_pil()) == rgba_image


class TestRectangle:
    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            Rectangle(0, 0, 0, 10)
        with pytest.raises(ValueError):
            Rectangle(0, 0, 10, -1)

    def test_from_corners_any_direction(self):
        assert Rectangle.from_corners(30, 40, 10, 5) == Rectangle(10, 5, 20, 35)

    def test_contains_is_closed_interval(self):
        r = Rectangle(10, 10, 20, 20)
        assert r.contains(10, 10)
        assert r.contains(30, 30)
        assert not r.contains(30.01, 20)
        assert not r.contains(9.99, 20)

    def test_translated(self):
        assert Rectangle(10, 10, 100, 100).translated(300, 0) == Rectangle(310, 10, 100, 100)

    def test_scaled(self):
        assert Rectangle(1, 2, 3, 4).scaled(2) == Rectangle(2, 4, 6, 8)


class TestCandidate:
    def test_derived_metrics(self):
        c = Candidate(Rectangle(0, 0, 50, 100), region_index=2)
        assert c.area == 5000
        assert c.aspect_ratio == 0.5
        assert c.area_ratio(100, 100) == 0.5

    def test_crop_spec_box_is_integer(self):
        spec = CropSpec(Rectangle(1, 2, 3, 4), 0.5)
        assert spec.box == (1, 2, 3, 4)
