"""Tests for crop computation, extraction and manual selection checks."""

import numpy as np
import pytest

from idphotocrop.services.crop import (
    compute_crop,
    crop,
    crop_manual,
    extract,
    validate_manual_selection,
)
from idphotocrop.services.geometry import Rectangle
from idphotocrop.utils.exceptions import SelectionTooSmall

from conftest import make_rgba


class TestComputeCrop:
    def test_padding_on_every_side(self):
        spec = compute_crop(Rectangle(100, 100, 40, 60), 1000, 1000, 0.5)
        assert spec.box == (80, 70, 80, 120)
        assert spec.padding_ratio == 0.5

    def test_clipped_at_top_left(self):
        spec = compute_crop(Rectangle(10, 10, 100, 100), 150, 150, 0.5)
        assert spec.box == (0, 0, 150, 150)

    def test_clipped_at_right_edge(self, photo_rect):
        spec = compute_crop(photo_rect, 500, 400, 0.5)
        assert spec.box == (260, 0, 200, 200)

    def test_zero_padding_floors_origin(self):
        spec = compute_crop(Rectangle(10.7, 5.2, 20, 20), 100, 100, 0.0)
        assert spec.box == (10, 5, 20, 20)

    @pytest.mark.parametrize(
        "rect",
        [Rectangle(10, 10, 100, 100), Rectangle(450, 350, 60, 60), Rectangle(0.4, 0.6, 499, 399)],
    )
    def test_always_inside_image(self, rect):
        x, y, w, h = compute_crop(rect, 500, 400, 0.5).box
        assert x >= 0 and y >= 0
        assert w > 0 and h > 0
        assert x + w <= 500
        assert y + h <= 400

    def test_outside_image_raises(self):
        with pytest.raises(ValueError):
            compute_crop(Rectangle(600, 600, 10, 10), 500, 400, 0.0)


class TestExtract:
    def test_copies_exact_pixels(self):
        img = make_rgba(100, 80, seed=2)
        spec = compute_crop(Rectangle(10, 20, 25, 30), 100, 80, 0.0)
        out = extract(img, spec)
        np.testing.assert_array_equal(out.pixels, img.pixels[20:50, 10:35])

    def test_crop_uses_padding(self):
        img = make_rgba(100, 80)
        assert crop(img, Rectangle(40, 30, 10, 10), 0.5).size == (20, 20)


class TestManualSelection:
    def test_too_small_rejected(self):
        with pytest.raises(SelectionTooSmall) as exc:
            validate_manual_selection(Rectangle(0, 0, 15, 15))
        assert exc.value.minimum == 20

    def test_exactly_minimum_rejected(self):
        with pytest.raises(SelectionTooSmall):
            validate_manual_selection(Rectangle(0, 0, 20, 40))

    def test_just_above_minimum_accepted(self):
        validate_manual_selection(Rectangle(0, 0, 21, 21))

    def test_manual_crop_has_no_padding(self):
        img = make_rgba(100, 80)
        out = crop_manual(img, Rectangle(10, 20, 25, 30))
        assert out.size == (25, 30)
        np.testing.assert_array_equal(out.pixels, img.pixels[20:50, 10:35])

    def test_manual_crop_rejects_small(self):
        with pytest.raises(SelectionTooSmall):
            crop_manual(make_rgba(100, 80), Rectangle(0, 0, 15, 15))
