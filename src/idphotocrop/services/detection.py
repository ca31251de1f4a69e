"""
Region-based photo candidate detection.

ID photos sit in one of a few conventional zones depending on layout and
orientation, so the detector is run on four fixed, overlapping search
regions instead of classifying the layout first. Detections are mapped
back to full-image coordinates; duplicates from overlapping regions are
left for the candidate filter.
"""

import logging
import math
from dataclasses import dataclass

from idphotocrop.config import MAX_CANDIDATES
from idphotocrop.services.backends.base import RegionDetector
from idphotocrop.services.candidate_filter import filter_candidates
from idphotocrop.services.geometry import Candidate, Rectangle
from idphotocrop.services.preprocessing import to_detection_ready
from idphotocrop.services.raster import RasterImage
from idphotocrop.utils.exceptions import DetectionFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchRegion:
    """Search window expressed as fractions of the page size."""

    name: str
    fx: float
    fy: float
    fw: float
    fh: float

    def pixel_bounds(self, width: int, height: int) -> tuple[int, int, int, int]:
        """Integer (x, y, w, h) inside a width x height page."""
        x = min(width, math.floor(width * self.fx))
        y = min(height, math.floor(height * self.fy))
        w = min(width - x, math.floor(width * self.fw))
        h = min(height - y, math.floor(height * self.fh))
        return (x, y, w, h)


SEARCH_REGIONS: tuple[SearchRegion, ...] = (
    SearchRegion("top-right", 0.6, 0.0, 0.4, 0.5),
    SearchRegion("top-left", 0.0, 0.0, 0.4, 0.5),
    SearchRegion("right half", 0.5, 0.0, 0.5, 1.0),
    SearchRegion("left half", 0.0, 0.0, 0.5, 1.0),
)


class RegionCandidateDetector:
    """Runs a RegionDetector over every search region, one region at a time."""

    def __init__(
        self,
        detector: RegionDetector,
        regions: tuple[SearchRegion, ...] = SEARCH_REGIONS,
    ) -> None:
        self.detector = detector
        self.regions = regions

    def _detect_region(self, index: int, crop: RasterImage) -> list[Rectangle]:
        try:
            return list(self.detector.detect(to_detection_ready(crop)))
        except Exception as e:
            raise DetectionFailure(index, f"{type(e).__name__}: {e}") from e

    def detect(self, image: RasterImage) -> list[Candidate]:
        """Collect translated detections from all regions, unfiltered.

        A failing region contributes no candidates; the others still run.
        """
        collected: list[Candidate] = []

        for index, region in enumerate(self.regions):
            x, y, w, h = region.pixel_bounds(image.width, image.height)
            if w <= 0 or h <= 0:
                logger.debug(f"Skipping empty region {region.name}")
                continue

            try:
                found = self._detect_region(index, image.region(x, y, w, h))
            except DetectionFailure as e:
                logger.warning(f"{e}; continuing with remaining regions")
                continue

            for rect in found:
                if rect.width <= 0 or rect.height <= 0:
                    continue
                collected.append(Candidate(rect.translated(x, y), region_index=index))
            logger.info(f"Region {region.name} at ({x},{y}) {w}x{h}: {len(found)} detection(s)")

        return collected

    def find_candidates(self, image: RasterImage, limit: int = MAX_CANDIDATES) -> list[Candidate]:
        """Detect, filter and rank; an empty list means no plausible photo."""
        return filter_candidates(self.detect(image), image.width, image.height, limit)


def find_candidates(
    image: RasterImage,
    detector: RegionDetector,
    limit: int = MAX_CANDIDATES,
) -> list[Candidate]:
    """Filtered, ranked photo candidates for a full document image."""
    return RegionCandidateDetector(detector).find_candidates(image, limit)
