"""
Immutable raster image container.

A RasterImage wraps a uint8 numpy buffer that is either single-channel
grayscale ``(h, w)`` or RGBA ``(h, w, 4)``. The buffer is copied on
construction and flagged read-only, so pipeline stages never alias each
other's pixels; every transform returns a new instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from PIL import Image


@dataclass(frozen=True, eq=False)
class RasterImage:
    """Width, height and a read-only pixel buffer."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        arr = np.asarray(self.pixels)
        if arr.dtype != np.uint8:
            raise ValueError(f"RasterImage requires uint8 pixels, got {arr.dtype}")
        if arr.ndim == 3 and arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        elif arr.ndim == 3 and arr.shape[2] == 1:
            arr = arr[:, :, 0]
        elif not (arr.ndim == 2 or (arr.ndim == 3 and arr.shape[2] == 4)):
            raise ValueError(f"Unsupported pixel buffer shape: {arr.shape}")

        buf = np.array(arr, dtype=np.uint8, copy=True, order="C")
        buf.setflags(write=False)
        object.__setattr__(self, "pixels", buf)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> RasterImage:
        """Create from a grayscale, RGB or RGBA uint8 array."""
        return cls(arr)

    @classmethod
    def from_pil(cls, img: Image.Image) -> RasterImage:
        """Create from a Pillow image of any mode."""
        if img.mode == "L":
            return cls(np.asarray(img))
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return cls(np.asarray(img))

    @classmethod
    def blank(cls, width: int, height: int, value: int = 255) -> RasterImage:
        """Opaque RGBA image filled with one gray level."""
        arr = np.full((height, width, 4), value, dtype=np.uint8)
        arr[:, :, 3] = 255
        return cls(arr)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_grayscale(self) -> bool:
        return self.pixels.ndim == 2

    def to_rgba(self) -> np.ndarray:
        """Writable RGBA copy of the pixels."""
        if self.is_grayscale:
            rgb = np.repeat(self.pixels[:, :, np.newaxis], 3, axis=2)
            alpha = np.full(self.pixels.shape + (1,), 255, dtype=np.uint8)
            return np.concatenate([rgb, alpha], axis=2)
        return self.pixels.copy()

    def to_pil(self) -> Image.Image:
        from PIL import Image

        return Image.fromarray(np.ascontiguousarray(self.pixels))

    def region(self, x: int, y: int, width: int, height: int) -> RasterImage:
        """Copy out a sub-rectangle; the caller guarantees it is inside bounds."""
        return RasterImage(self.pixels[y : y + height, x : x + width])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterImage):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(
            np.array_equal(self.pixels, other.pixels)
        )

    def __hash__(self) -> int:
        return hash((self.pixels.shape, self.pixels.tobytes()))

    def __repr__(self) -> str:
        kind = "L" if self.is_grayscale else "RGBA"
        return f"RasterImage({self.width}x{self.height}, {kind})"
