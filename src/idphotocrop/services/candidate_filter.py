"""
Plausibility filter and ranking for detected photo rectangles.

The bounds encode the size and shape envelope of a passport-style photo
relative to a full document scan.
"""

import logging
from collections.abc import Iterable

from idphotocrop.config import MAX_CANDIDATES
from idphotocrop.services.geometry import Candidate, Rectangle

logger = logging.getLogger(__name__)

MIN_AREA_RATIO = 0.005
MAX_AREA_RATIO = 0.25
MIN_ASPECT_RATIO = 0.4
MAX_ASPECT_RATIO = 2.5


def is_plausible(candidate: Candidate, image_width: int, image_height: int) -> bool:
    """Check the area-ratio and aspect-ratio bounds (both exclusive)."""
    ratio = candidate.area_ratio(image_width, image_height)
    return (
        MIN_AREA_RATIO < ratio < MAX_AREA_RATIO
        and MIN_ASPECT_RATIO < candidate.aspect_ratio < MAX_ASPECT_RATIO
    )


def filter_candidates(
    candidates: Iterable[Candidate],
    image_width: int,
    image_height: int,
    limit: int = MAX_CANDIDATES,
) -> list[Candidate]:
    """Drop implausible candidates, rank by area and cap the list.

    Args:
        candidates: Candidates in full-image coordinates
        image_width: Full image width
        image_height: Full image height
        limit: Maximum number of candidates kept

    Returns:
        Largest plausible candidates first; index 0 is the default choice.
        An empty list means nothing plausible was found.
    """
    candidates = list(candidates)
    kept = [c for c in candidates if is_plausible(c, image_width, image_height)]
    # sorted() is stable, so equal areas keep detection order
    ranked = sorted(kept, key=lambda c: c.area, reverse=True)[:limit]
    logger.info(
        f"Candidate filter: {len(candidates)} detected, {len(kept)} plausible, "
        f"{len(ranked)} kept"
    )
    return ranked


def filter_rectangles(
    rects: Iterable[Rectangle],
    image_width: int,
    image_height: int,
    limit: int = MAX_CANDIDATES,
) -> list[Rectangle]:
    """Same as filter_candidates for bare rectangles."""
    candidates = [Candidate(r) for r in rects]
    return [c.rect for c in filter_candidates(candidates, image_width, image_height, limit)]
