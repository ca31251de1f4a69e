"""
Right-angle rotation of raster images.

Positive angles turn the picture clockwise, as a canvas rotation with the
y axis pointing down does. Rotation is an exact pixel permutation, so any
rotation can be undone bit for bit by the opposite angle.
"""

import numpy as np

from idphotocrop.services.raster import RasterImage

RIGHT_ANGLES = (0, 90, 180, 270)


def normalize_angle(degrees: int) -> int:
    """Map any multiple of 90 into [0, 360).

    Raises:
        ValueError: If degrees is not a multiple of 90
    """
    if int(degrees) != degrees or int(degrees) % 90 != 0:
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {degrees}")
    return int(degrees) % 360


def rotate(image: RasterImage, degrees: int) -> RasterImage:
    """Rotate an image by a multiple of 90 degrees.

    Args:
        image: Input image
        degrees: Clockwise rotation (0, 90, 180, 270, -90, 360, ...)

    Returns:
        New image; width and height are swapped for 90 and 270
    """
    angle = normalize_angle(degrees)
    if angle == 0:
        return RasterImage(image.pixels)
    # np.rot90 turns counter-clockwise for positive k
    return RasterImage(np.rot90(image.pixels, k=-(angle // 90), axes=(0, 1)))
