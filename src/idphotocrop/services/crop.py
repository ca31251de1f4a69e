"""
Crop computation and extraction.

A selected rectangle is grown by a padding ratio of its own size on every
side, then clipped so the crop never leaves the source image. Extraction
is a direct pixel copy.
"""

import logging
import math

from idphotocrop.config import DEFAULT_PADDING_RATIO, MIN_SELECTION_SIZE
from idphotocrop.services.geometry import CropSpec, Rectangle
from idphotocrop.services.raster import RasterImage
from idphotocrop.utils.exceptions import SelectionTooSmall

logger = logging.getLogger(__name__)


def compute_crop(
    rect: Rectangle,
    image_width: int,
    image_height: int,
    padding: float = DEFAULT_PADDING_RATIO,
) -> CropSpec:
    """Pad a rectangle and clip it to the image.

    Args:
        rect: Selected rectangle in source pixels
        image_width: Source width
        image_height: Source height
        padding: Fraction of the rectangle's width/height added on each side

    Returns:
        CropSpec with integer coordinates fully inside the image

    Raises:
        ValueError: If nothing of the padded rectangle lies inside the image
    """
    pad_x = rect.width * padding
    pad_y = rect.height * padding

    x = max(0.0, rect.x - pad_x)
    y = max(0.0, rect.y - pad_y)
    width = min(image_width - x, rect.width + 2 * pad_x)
    height = min(image_height - y, rect.height + 2 * pad_y)

    x0 = math.floor(x)
    y0 = math.floor(y)
    w = min(image_width - x0, int(round(width)))
    h = min(image_height - y0, int(round(height)))
    if w <= 0 or h <= 0:
        raise ValueError(f"Crop {rect} lies outside the {image_width}x{image_height} image")

    return CropSpec(Rectangle(x0, y0, w, h), padding)


def extract(image: RasterImage, spec: CropSpec) -> RasterImage:
    """Copy the crop rectangle's pixels into a new image."""
    x, y, w, h = spec.box
    return image.region(x, y, w, h)


def crop(
    image: RasterImage,
    rect: Rectangle,
    padding: float = DEFAULT_PADDING_RATIO,
) -> RasterImage:
    """Pad, clip and extract a rectangle from an image."""
    spec = compute_crop(rect, image.width, image.height, padding)
    logger.info(f"Cropping {spec.box} (padding {padding:.0%}) from {image.width}x{image.height}")
    return extract(image, spec)


def validate_manual_selection(rect: Rectangle, minimum: int = MIN_SELECTION_SIZE) -> None:
    """Reject selections that are not larger than ``minimum`` on both axes.

    Raises:
        SelectionTooSmall: If width or height is at most ``minimum`` pixels
    """
    if not (rect.width > minimum and rect.height > minimum):
        raise SelectionTooSmall(rect.width, rect.height, minimum)


def crop_manual(image: RasterImage, rect: Rectangle, padding: float = 0.0) -> RasterImage:
    """Extract a user-drawn selection; exactly the drawn area by default.

    Raises:
        SelectionTooSmall: If the selection is below the minimum size
    """
    validate_manual_selection(rect)
    return crop(image, rect, padding)
