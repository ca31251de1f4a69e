"""
OpenCV Haar cascade region detector.

Finds frontal faces in an image; the bounding boxes serve as photo
candidates. Results are in the input image's local coordinates.
"""

import logging

import cv2

from idphotocrop.services.geometry import Rectangle
from idphotocrop.services.raster import RasterImage

logger = logging.getLogger(__name__)

DEFAULT_CASCADE = "haarcascade_frontalface_default.xml"


class HaarCascadeDetector:
    """RegionDetector using a cv2.CascadeClassifier.

    Args:
        cascade_path: Cascade XML file; defaults to OpenCV's bundled frontal face model
        scale_factor: Pyramid step between detection scales
        min_neighbors: Overlapping hits required to keep a detection
        min_size: Smallest face side in pixels
    """

    def __init__(
        self,
        cascade_path: str | None = None,
        scale_factor: float = 1.1,
        min_neighbors: int = 5,
        min_size: int = 30,
    ) -> None:
        self.cascade_path = cascade_path or (cv2.data.haarcascades + DEFAULT_CASCADE)
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = min_size
        self._classifier = None

    def _get_classifier(self) -> cv2.CascadeClassifier:
        if self._classifier is None:
            classifier = cv2.CascadeClassifier(self.cascade_path)
            if classifier.empty():
                raise RuntimeError(f"Could not load cascade: {self.cascade_path}")
            self._classifier = classifier
        return self._classifier

    def detect(self, image: RasterImage) -> list[Rectangle]:
        if image.is_grayscale:
            gray = image.pixels
        else:
            gray = cv2.cvtColor(image.pixels, cv2.COLOR_RGBA2GRAY)

        if min(gray.shape[:2]) < self.min_size:
            return []

        faces = self._get_classifier().detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=(self.min_size, self.min_size),
        )
        rects = [
            Rectangle(int(x), int(y), int(w), int(h)) for (x, y, w, h) in faces if w > 0 and h > 0
        ]
        logger.debug(f"Haar cascade found {len(rects)} region(s) in {image.width}x{image.height}")
        return rects
