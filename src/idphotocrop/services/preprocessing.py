"""
Image normalization ahead of the recognition and detection engines.

Both transforms are pure and deterministic: the same input bytes always
produce the same output bytes. Arithmetic is done in float32 and rounded
back to uint8 with clamping to [0, 255].
"""

import logging

import cv2
import numpy as np

from idphotocrop.config import ORIENTATION_MAX_SIDE
from idphotocrop.services.raster import RasterImage

logger = logging.getLogger(__name__)

# Luminance weights (ITU-R BT.601)
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

OCR_CONTRAST = 1.3
DETECTION_CONTRAST_FACTOR = 1.5
CONTRAST_MIDPOINT = 128.0


def contrast_factor(contrast: float) -> float:
    """Standard contrast-correction factor: 259*(c+255) / (255*(259-c))."""
    return (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))


def _stretch(values: np.ndarray, factor: float) -> np.ndarray:
    """Linear stretch around the midpoint, rounded and clamped to uint8."""
    stretched = factor * (values - CONTRAST_MIDPOINT) + CONTRAST_MIDPOINT
    return np.clip(np.rint(stretched), 0, 255).astype(np.uint8)


def to_grayscale(image: RasterImage) -> np.ndarray:
    """Float32 luminance plane of an image."""
    if image.is_grayscale:
        return image.pixels.astype(np.float32)
    rgb = image.pixels[:, :, :3].astype(np.float32)
    r, g, b = LUMA_WEIGHTS
    return rgb[:, :, 0] * r + rgb[:, :, 1] * g + rgb[:, :, 2] * b


def to_ocr_ready(image: RasterImage) -> RasterImage:
    """Grayscale conversion plus contrast boost for text recognition.

    Args:
        image: Grayscale or RGBA input

    Returns:
        Single-channel image with contrast 1.3 applied around 128
    """
    gray = to_grayscale(image)
    return RasterImage(_stretch(gray, contrast_factor(OCR_CONTRAST)))


def to_detection_ready(image: RasterImage) -> RasterImage:
    """Contrast boost (factor 1.5) on the color channels, no grayscale conversion.

    The alpha channel is passed through untouched.
    """
    if image.is_grayscale:
        return RasterImage(_stretch(image.pixels.astype(np.float32), DETECTION_CONTRAST_FACTOR))

    out = image.to_rgba()
    out[:, :, :3] = _stretch(out[:, :, :3].astype(np.float32), DETECTION_CONTRAST_FACTOR)
    return RasterImage(out)


def downscale_to_limit(image: RasterImage, max_side: int = ORIENTATION_MAX_SIDE) -> RasterImage:
    """Shrink so the longer side is at most ``max_side``; never upscale.

    Args:
        image: Input image
        max_side: Maximum length of the longer side

    Returns:
        The same image when already small enough, otherwise a resized copy
    """
    scale = min(1.0, max_side / max(image.width, image.height))
    if scale >= 1.0:
        return image

    new_w = max(1, int(image.width * scale))
    new_h = max(1, int(image.height * scale))
    resized = cv2.resize(image.pixels, (new_w, new_h), interpolation=cv2.INTER_AREA)
    logger.debug(
        f"Downscaled image from {image.width}x{image.height} to {new_w}x{new_h} "
        f"(factor: {scale:.3f})"
    )
    return RasterImage(resized)
