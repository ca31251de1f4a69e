"""
IdPhotoCrop - extract the portrait photo from a scanned identity document.

Corrects page orientation with a text-recognition readability score,
searches conventional photo zones for candidates, and crops the chosen
one. The public API works on in-memory RasterImage buffers:

- resolve_orientation(image, recognizer) -> OrientationResult
- find_candidates(image, detector) -> list[Candidate]
- crop(image, rect) -> RasterImage
- rotate(image, degrees) -> RasterImage
"""

from idphotocrop.config import APP_VERSION
from idphotocrop.services import (
    Candidate,
    OrientationResult,
    RasterImage,
    Rectangle,
    SelectionStateMachine,
    SessionMode,
    SessionState,
    crop,
    find_candidates,
    resolve_orientation,
    rotate,
)

__version__ = APP_VERSION
__license__ = "GPL-3.0"

__all__ = [
    "Candidate",
    "OrientationResult",
    "RasterImage",
    "Rectangle",
    "SelectionStateMachine",
    "SessionMode",
    "SessionState",
    "__version__",
    "crop",
    "find_candidates",
    "resolve_orientation",
    "rotate",
]
