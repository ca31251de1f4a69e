"""Pytest configuration for idphotocrop tests.

Provides fake recognizer and detector strategy objects plus synthetic
images, so no OCR or detection models are needed.
"""

import numpy as np
import pytest

from idphotocrop.services.backends.base import RecognitionResult, RecognizedWord
from idphotocrop.services.geometry import Rectangle
from idphotocrop.services.raster import RasterImage


def make_rgba(width=40, height=30, seed=0):
    """Random-content RGBA image, reproducible by seed."""
    rng = np.random.default_rng(seed)
    arr = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    arr[:, :, 3] = 255
    return RasterImage(arr)


def make_result(text="", confidences=()):
    """RecognitionResult with one word per confidence value."""
    words = [RecognizedWord(f"w{i}", float(c)) for i, c in enumerate(confidences)]
    return RecognitionResult(full_text=text, words=words)


class FakeRecognizer:
    """Returns canned results in call order and records what it saw."""

    def __init__(self, results=None, fail_on_call=None):
        self.results = list(results or [])
        self.fail_on_call = fail_on_call
        self.calls = []

    def recognize(self, image, language):
        self.calls.append((image.size, language))
        if self.fail_on_call is not None and len(self.calls) - 1 == self.fail_on_call:
            raise RuntimeError("engine crashed")
        if self.results:
            return self.results[len(self.calls) - 1]
        return RecognitionResult()


class FakeDetector:
    """Returns canned local rectangles per call, optionally failing some calls."""

    def __init__(self, per_call=None, fail_calls=()):
        self.per_call = list(per_call or [])
        self.fail_calls = set(fail_calls)
        self.calls = []

    def detect(self, image):
        index = len(self.calls)
        self.calls.append(image.size)
        if index in self.fail_calls:
            raise RuntimeError("detector error")
        if index < len(self.per_call):
            return list(self.per_call[index])
        return []


@pytest.fixture
def rgba_image():
    return make_rgba()


@pytest.fixture
def document():
    """500x400 page: the top-right search region starts at (300, 0)."""
    return RasterImage.blank(500, 400)


@pytest.fixture
def photo_rect():
    return Rectangle(310, 10, 100, 100)
