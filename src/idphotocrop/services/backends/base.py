"""
Collaborator interfaces consumed by the extraction pipeline.

Each collaborator is a strategy object with a single method, so any
conforming backend can be substituted without touching the core logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from idphotocrop.services.geometry import Rectangle
from idphotocrop.services.raster import RasterImage


@dataclass(frozen=True)
class RecognizedWord:
    """One recognized word.

    Attributes:
        text: Word text
        confidence: Recognition confidence in [0, 100]
        bounding_box: Word box in the recognized image, if known
    """

    text: str
    confidence: float
    bounding_box: Rectangle | None = None


@dataclass(frozen=True)
class RecognitionResult:
    """Final output of a text recognizer run."""

    full_text: str = ""
    words: list[RecognizedWord] = field(default_factory=list)


@runtime_checkable
class TextRecognizer(Protocol):
    def recognize(self, image: RasterImage, language: str) -> RecognitionResult: ...


@runtime_checkable
class RegionDetector(Protocol):
    def detect(self, image: RasterImage) -> list[Rectangle]:
        """Return rectangles in the input image's local coordinate space."""
        ...


@runtime_checkable
class PageRasterizer(Protocol):
    def render(self, file_bytes: bytes, page_index: int, scale: float) -> RasterImage: ...


@runtime_checkable
class ImageEncoder(Protocol):
    def encode(self, image: RasterImage, format: str = "png") -> bytes: ...
