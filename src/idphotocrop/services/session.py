"""
Interactive extraction flow.

SelectionStateMachine drives one document through orientation testing,
candidate detection, selection (click or manual drag), cropping, photo
rotation and export:

    IDLE -> LOADED -> ORIENTATION_TESTING -> LOADED -> DETECTING
         -> AWAITING_SELECTION -> CROPPED (rotate: self-loop) -> EXPORTED

Every transition stores a brand-new SessionState; states are never
patched in place. ``reset()`` or loading a new document replaces the
session wholesale.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum

from idphotocrop.config import (
    DEFAULT_OCR_LANGUAGE,
    DEFAULT_PADDING_RATIO,
    EXPORT_FORMAT,
    MAX_CANDIDATES,
    MIN_SELECTION_SIZE,
)
from idphotocrop.services.backends.base import (
    ImageEncoder,
    PageRasterizer,
    RegionDetector,
    TextRecognizer,
)
from idphotocrop.services.backends.documents import load_document
from idphotocrop.services.backends.encoder import write_export
from idphotocrop.services.crop import crop, crop_manual, validate_manual_selection
from idphotocrop.services.detection import RegionCandidateDetector
from idphotocrop.services.geometry import Candidate, Rectangle
from idphotocrop.services.orientation import (
    OrientationResolver,
    OrientationResult,
    OrientationStatus,
)
from idphotocrop.services.raster import RasterImage
from idphotocrop.services.rotation import normalize_angle, rotate
from idphotocrop.utils.exceptions import InvalidTransition, SelectionTooSmall
from idphotocrop.utils.i18n import _

logger = logging.getLogger(__name__)

PHOTO_ROTATIONS = (-90, 90, 180)
RETRY_ROTATION = -90


class SessionMode(Enum):
    IDLE = "idle"
    LOADED = "loaded"
    ORIENTATION_TESTING = "orientation_testing"
    DETECTING = "detecting"
    AWAITING_SELECTION = "awaiting_selection"
    CROPPED = "cropped"
    EXPORTED = "exported"


@dataclass(frozen=True)
class SessionState:
    """Everything known about the document currently being processed.

    Attributes:
        mode: Current step of the flow
        document: Full document image (after any orientation correction)
        photo: Extracted photo, set once a selection has been cropped
        rotation: Rotation applied to the photo since cropping, in [0, 360)
        candidates: Ranked candidates; index 0 is the best guess
        orientation: Result of the last orientation test
        message: Human-readable status for the user
        selected: Rectangle the photo was cropped from
    """

    mode: SessionMode = SessionMode.IDLE
    document: RasterImage | None = None
    photo: RasterImage | None = None
    rotation: int = 0
    candidates: tuple[Candidate, ...] = field(default_factory=tuple)
    orientation: OrientationResult | None = None
    message: str = ""
    selected: Rectangle | None = None

    @property
    def has_candidates(self) -> bool:
        return len(self.candidates) > 0


StateListener = Callable[[SessionState], None]


class SelectionStateMachine:
    """Owns the SessionState of exactly one document.

    Args:
        recognizer: Text recognizer for orientation trials
        detector: Region detector for photo candidates
        language: Recognition language
        padding: Padding ratio for crops of detected candidates
        max_candidates: Cap on the ranked candidate list
        on_change: Called with every new state, including transient ones
    """

    def __init__(
        self,
        recognizer: TextRecognizer,
        detector: RegionDetector,
        language: str = DEFAULT_OCR_LANGUAGE,
        padding: float = DEFAULT_PADDING_RATIO,
        max_candidates: int = MAX_CANDIDATES,
        on_change: StateListener | None = None,
    ) -> None:
        self.resolver = OrientationResolver(recognizer, language)
        self.region_detector = RegionCandidateDetector(detector)
        self.padding = padding
        self.max_candidates = max_candidates
        self.on_change = on_change
        self._state = SessionState(message=_("Ready to process documents"))

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def mode(self) -> SessionMode:
        return self._state.mode

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set(self, state: SessionState) -> SessionState:
        self._state = state
        logger.info(f"[{state.mode.value}] {state.message}")
        if self.on_change:
            self.on_change(state)
        return state

    def _require(self, action: str, *modes: SessionMode) -> None:
        if self._state.mode not in modes:
            raise InvalidTransition(action, self._state.mode.value)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, image: RasterImage) -> SessionState:
        """Start a new session for a document image, discarding the old one."""
        return self._set(
            SessionState(
                mode=SessionMode.LOADED,
                document=image,
                message=_("Processing document..."),
            )
        )

    def load_file(
        self, path: str | os.PathLike, rasterizer: PageRasterizer | None = None
    ) -> SessionState:
        """Validate, rasterize or decode a document file and load it.

        Raises:
            InvalidInputError: For unsupported file types
            RasterizationError: If a PDF page cannot be rendered
        """
        return self.load(load_document(path, rasterizer))

    def reset(self) -> SessionState:
        """Drop the current document and return to IDLE."""
        return self._set(SessionState(message=_("Ready to process documents")))

    # ------------------------------------------------------------------
    # Orientation and detection
    # ------------------------------------------------------------------

    def test_orientation(self) -> SessionState:
        """Run the orientation resolver on the loaded document.

        A recognizer failure keeps the original document and is reported in
        the status message; it never raises.
        """
        self._require("test_orientation", SessionMode.LOADED)
        loaded = self._state
        self._set(
            replace(
                loaded,
                mode=SessionMode.ORIENTATION_TESTING,
                message=_("Testing all orientations to find correct rotation..."),
            )
        )

        result = self.resolver.resolve(loaded.document)
        if result.status is OrientationStatus.CORRECTED:
            message = _("Document auto-corrected (rotated {angle}°)").format(angle=result.angle)
        elif result.status is OrientationStatus.ALREADY_CORRECT:
            message = _("Document orientation is correct")
        elif result.status is OrientationStatus.AMBIGUOUS:
            message = _("Keeping original orientation")
        else:
            message = _("Orientation detection failed, using original")

        return self._set(
            SessionState(
                mode=SessionMode.LOADED,
                document=result.image,
                orientation=result,
                message=message,
            )
        )

    def detect(self) -> SessionState:
        """Search the document for photo candidates.

        Zero candidates is a normal outcome: the session waits for a
        manual selection or a rotate-and-retry.
        """
        self._require("detect", SessionMode.LOADED)
        return self._run_detection(self._state)

    def _run_detection(self, base: SessionState) -> SessionState:
        self._set(
            SessionState(
                mode=SessionMode.DETECTING,
                document=base.document,
                orientation=base.orientation,
                message=_("Detecting faces..."),
            )
        )
        found = self.region_detector.find_candidates(base.document, self.max_candidates)
        candidates = tuple(found)

        if candidates:
            message = _(
                'Found {count} face(s). Click on one, or use "Rotate & Retry"/"Manual Selection".'
            ).format(count=len(candidates))
        else:
            message = _('No faces detected. Try "Rotate & Retry" or "Manual Selection".')

        return self._set(
            SessionState(
                mode=SessionMode.AWAITING_SELECTION,
                document=base.document,
                orientation=base.orientation,
                candidates=candidates,
                message=message,
            )
        )

    def process(self, auto_orientation: bool = True) -> SessionState:
        """Orientation test (optional) followed by detection."""
        if auto_orientation:
            self.test_orientation()
        return self.detect()

    def rotate_and_retry(self) -> SessionState:
        """Turn the whole document 90° counter-clockwise and detect again."""
        self._require("rotate_and_retry", SessionMode.AWAITING_SELECTION)
        current = self._state
        rotated = SessionState(
            mode=SessionMode.LOADED,
            document=rotate(current.document, RETRY_ROTATION),
            orientation=current.orientation,
            message=_("Rotated document, retrying detection"),
        )
        return self._run_detection(self._set(rotated))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def _cropped(self, photo: RasterImage, rect: Rectangle, message: str) -> SessionState:
        current = self._state
        return self._set(
            SessionState(
                mode=SessionMode.CROPPED,
                document=current.document,
                photo=photo,
                rotation=0,
                candidates=current.candidates,
                orientation=current.orientation,
                message=message,
                selected=rect,
            )
        )

    def hit_test(self, px: float, py: float) -> Candidate | None:
        """First candidate in ranked order whose rectangle contains the point."""
        for candidate in self._state.candidates:
            if candidate.rect.contains(px, py):
                return candidate
        return None

    def select_point(self, px: float, py: float) -> SessionState | None:
        """Crop the candidate under a click, if any.

        Args:
            px: Click x in document pixels
            py: Click y in document pixels

        Returns:
            The new CROPPED state, or None when the click hit no candidate
        """
        self._require("select_point", SessionMode.AWAITING_SELECTION)
        candidate = self.hit_test(px, py)
        if candidate is None:
            logger.debug(f"Click at ({px:.0f}, {py:.0f}) hit no candidate")
            return None
        return self._select(candidate)

    def select_candidate(self, index: int) -> SessionState:
        """Crop a candidate by its rank (0 is the best guess)."""
        self._require("select_candidate", SessionMode.AWAITING_SELECTION)
        candidates = self._state.candidates
        if not 0 <= index < len(candidates):
            raise IndexError(f"Candidate index {index} out of range (0..{len(candidates) - 1})")
        return self._select(candidates[index])

    def _select(self, candidate: Candidate) -> SessionState:
        photo = crop(self._state.document, candidate.rect, self.padding)
        return self._cropped(photo, candidate.rect, _("Photo extracted successfully!"))

    def select_manual(self, rect: Rectangle) -> SessionState:
        """Crop a user-drawn rectangle given in document pixels.

        Raises:
            SelectionTooSmall: If the rectangle is not larger than 20x20;
                the session stays in AWAITING_SELECTION
        """
        self._require("select_manual", SessionMode.AWAITING_SELECTION)
        try:
            validate_manual_selection(rect)
        except SelectionTooSmall:
            self._set(replace(self._state, message=_("Selection too small. Try again.")))
            raise
        photo = crop_manual(self._state.document, rect)
        return self._cropped(photo, rect, _("Manual crop successful!"))

    def select_drag(
        self,
        x0: float,
        y0: float,
        x1: float,
        y1: float,
        display_scale: float = 1.0,
    ) -> SessionState:
        """Manual selection from a drag on a scaled-down preview.

        Args:
            x0, y0: Drag start in display pixels
            x1, y1: Drag end in display pixels
            display_scale: Document pixels per display pixel
        """
        self._require("select_manual", SessionMode.AWAITING_SELECTION)
        width = abs(x1 - x0) * display_scale
        height = abs(y1 - y0) * display_scale
        if width <= 0 or height <= 0:
            self._set(replace(self._state, message=_("Selection too small. Try again.")))
            raise SelectionTooSmall(width, height, MIN_SELECTION_SIZE)
        return self.select_manual(Rectangle.from_corners(x0, y0, x1, y1).scaled(display_scale))

    # ------------------------------------------------------------------
    # Cropped photo
    # ------------------------------------------------------------------

    def rotate_photo(self, degrees: int) -> SessionState:
        """Rotate the extracted photo by -90, 90 or 180 degrees."""
        self._require("rotate_photo", SessionMode.CROPPED)
        if degrees not in PHOTO_ROTATIONS:
            raise ValueError(f"Photo rotation must be one of {PHOTO_ROTATIONS}, got {degrees}")

        current = self._state
        if degrees == -90:
            message = _("Rotated 90° left")
        elif degrees == 90:
            message = _("Rotated 90° right")
        else:
            message = _("Rotated 180°")

        return self._set(
            replace(
                current,
                photo=rotate(current.photo, degrees),
                rotation=normalize_angle(current.rotation + degrees),
                message=message,
            )
        )

    def export(
        self,
        encoder: ImageEncoder,
        path: str | os.PathLike | None = None,
        format: str = EXPORT_FORMAT,
    ) -> bytes:
        """Encode the photo and optionally write it to disk.

        The photo itself is left untouched; the session moves to EXPORTED.
        """
        self._require("export", SessionMode.CROPPED, SessionMode.EXPORTED)
        current = self._state
        data = encoder.encode(current.photo, format)
        if path is not None:
            write_export(data, path)
        self._set(replace(current, mode=SessionMode.EXPORTED, message=_("Photo saved")))
        return data
