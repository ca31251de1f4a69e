"""
Orientation detection and correction for scanned identity documents.

Tests the page at 0°, 90°, 180° and 270° against a text recognizer and
keeps the most readable rotation. Readability is a weighted score that
favors many high-confidence words over raw character volume:

    score = 30 * great_words + 15 * good_words + 2 * avg_confidence + 3 * alphanumerics

A non-zero rotation is applied only on clear evidence: it must beat the
runner-up by more than 15% or have at least two good words.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from idphotocrop.config import DEFAULT_OCR_LANGUAGE, ORIENTATION_MAX_SIDE
from idphotocrop.services.backends.base import RecognitionResult, TextRecognizer
from idphotocrop.services.preprocessing import downscale_to_limit, to_ocr_ready
from idphotocrop.services.raster import RasterImage
from idphotocrop.services.rotation import RIGHT_ANGLES, rotate
from idphotocrop.utils.exceptions import RecognitionFailure

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]

GOOD_WORD_CONFIDENCE = 50
GREAT_WORD_CONFIDENCE = 70

GREAT_WORD_WEIGHT = 30
GOOD_WORD_WEIGHT = 15
CONFIDENCE_WEIGHT = 2
ALPHANUMERIC_WEIGHT = 3

# Decision thresholds for rotating away from 0°
MIN_SCORE_RATIO = 1.15
MIN_GOOD_WORDS = 2

SAMPLE_TEXT_LENGTH = 150

TRIAL_NAMES = {
    0: "0° (original)",
    90: "90° clockwise",
    180: "180° (upside down)",
    270: "270° clockwise (90° counter-clockwise)",
}

_ALPHANUMERIC = re.compile(r"[A-Za-z0-9]")


class OrientationStatus(Enum):
    """Outcome of an orientation resolution attempt."""

    CORRECTED = "corrected"
    ALREADY_CORRECT = "already_correct"
    AMBIGUOUS = "ambiguous"
    FAILED = "failed"


@dataclass(frozen=True)
class OrientationTrial:
    """Scored result of recognizing the page at one rotation.

    Attributes:
        angle: Clockwise rotation tested (0, 90, 180, 270)
        score: Weighted readability score
        good_word_count: Words with confidence > 50
        great_word_count: Words with confidence > 70
        avg_confidence: Mean confidence of the good words (0 if none)
        alphanumeric_count: [A-Za-z0-9] characters in the full text
        sample_text: First 150 characters of the recognized text
        word_count: All recognized words
    """

    angle: int
    score: float
    good_word_count: int
    great_word_count: int
    avg_confidence: float
    alphanumeric_count: int
    sample_text: str = ""
    word_count: int = 0

    @property
    def name(self) -> str:
        return TRIAL_NAMES.get(self.angle, f"{self.angle}°")


@dataclass(frozen=True)
class OrientationResult:
    """Image to continue with plus how it was decided.

    Attributes:
        image: Rotated original on correction, otherwise the untouched original
        corrected: Whether a rotation was applied
        angle: Rotation applied (0 when not corrected)
        status: Decision outcome
        trials: Trials sorted best first (empty on failure)
        score_ratio: best / second score (999 when second scored 0)
        error: Recognizer failure that aborted the attempt, if any
    """

    image: RasterImage
    corrected: bool
    angle: int
    status: OrientationStatus
    trials: list[OrientationTrial] = field(default_factory=list)
    score_ratio: float = 0.0
    error: RecognitionFailure | None = None


def score_trial(angle: int, result: RecognitionResult) -> OrientationTrial:
    """Compute readability metrics and the weighted score for one trial."""
    good = [w for w in result.words if w.confidence > GOOD_WORD_CONFIDENCE]
    great = [w for w in result.words if w.confidence > GREAT_WORD_CONFIDENCE]
    avg_confidence = sum(w.confidence for w in good) / len(good) if good else 0.0

    text = result.full_text or ""
    alphanumeric = len(_ALPHANUMERIC.findall(text))

    score = (
        GREAT_WORD_WEIGHT * len(great)
        + GOOD_WORD_WEIGHT * len(good)
        + CONFIDENCE_WEIGHT * avg_confidence
        + ALPHANUMERIC_WEIGHT * alphanumeric
    )
    return OrientationTrial(
        angle=angle,
        score=score,
        good_word_count=len(good),
        great_word_count=len(great),
        avg_confidence=avg_confidence,
        alphanumeric_count=alphanumeric,
        sample_text=text[:SAMPLE_TEXT_LENGTH].strip(),
        word_count=len(result.words),
    )


def rank_trials(trials: list[OrientationTrial]) -> list[OrientationTrial]:
    """Sort by score descending; exact ties go to the lower angle."""
    return sorted(trials, key=lambda t: (-t.score, t.angle))


def decide(trials: list[OrientationTrial]) -> tuple[OrientationStatus, int]:
    """Apply the rotation decision rule to ranked trials.

    Returns:
        (status, angle to apply); angle is 0 unless status is CORRECTED
    """
    best, second = trials[0], trials[1]
    if best.angle != 0 and (
        best.score > second.score * MIN_SCORE_RATIO or best.good_word_count >= MIN_GOOD_WORDS
    ):
        return OrientationStatus.CORRECTED, best.angle
    if best.angle == 0:
        return OrientationStatus.ALREADY_CORRECT, 0
    return OrientationStatus.AMBIGUOUS, 0


def _log_trial(trial: OrientationTrial) -> None:
    logger.info(f"Results for {trial.name}:")
    logger.info(f"  Total words detected: {trial.word_count}")
    logger.info(f"  Good words (>50% conf): {trial.good_word_count}")
    logger.info(f"  Great words (>70% conf): {trial.great_word_count}")
    logger.info(f"  Average confidence: {trial.avg_confidence:.1f}%")
    logger.info(f"  Alphanumeric chars: {trial.alphanumeric_count}")
    logger.info(f"  SCORE: {trial.score:.1f}")
    if trial.sample_text:
        logger.debug(f'  Sample text: "{trial.sample_text[:100]}"')
    else:
        logger.debug("  Sample text: [NO TEXT DETECTED]")


class OrientationResolver:
    """Runs the four orientation trials and decides whether to rotate.

    Trials run strictly in order 0, 90, 180, 270 against the same
    recognizer instance, one rotated buffer at a time.
    """

    def __init__(
        self,
        recognizer: TextRecognizer,
        language: str = DEFAULT_OCR_LANGUAGE,
        max_side: int = ORIENTATION_MAX_SIDE,
    ) -> None:
        self.recognizer = recognizer
        self.language = language
        self.max_side = max_side

    def run_trials(
        self,
        image: RasterImage,
        progress_callback: ProgressCallback | None = None,
    ) -> list[OrientationTrial]:
        """Score every orientation of an image in trial order.

        Raises:
            RecognitionFailure: If the recognizer raises during any trial
        """
        prepared = to_ocr_ready(downscale_to_limit(image, self.max_side))
        trials = []
        total = len(RIGHT_ANGLES)

        for i, angle in enumerate(RIGHT_ANGLES):
            name = TRIAL_NAMES[angle]
            logger.info(f"=== Testing {name} ===")
            if progress_callback:
                progress_callback(i, total, f"Testing {name}...")

            candidate = prepared if angle == 0 else rotate(prepared, angle)
            try:
                result = self.recognizer.recognize(candidate, self.language)
            except Exception as e:
                raise RecognitionFailure(angle, f"{type(e).__name__}: {e}") from e

            trial = score_trial(angle, result)
            _log_trial(trial)
            trials.append(trial)

        if progress_callback:
            progress_callback(total, total, "Orientation testing complete")
        return trials

    def resolve(
        self,
        image: RasterImage,
        progress_callback: ProgressCallback | None = None,
    ) -> OrientationResult:
        """Find the most readable orientation and rotate the original if warranted.

        Recognizer failures never propagate: the original image is returned
        with status FAILED and the failure attached.
        """
        try:
            trials = rank_trials(self.run_trials(image, progress_callback))
        except RecognitionFailure as e:
            logger.error(f"Orientation detection failed: {e}")
            return OrientationResult(
                image=image,
                corrected=False,
                angle=0,
                status=OrientationStatus.FAILED,
                error=e,
            )

        best, second = trials[0], trials[1]
        ratio = best.score / second.score if second.score > 0 else 999.0

        logger.info("=== FINAL RESULTS ===")
        for i, t in enumerate(trials, 1):
            marker = " (winner)" if i == 1 else ""
            logger.info(
                f"{i}. {t.name}: Score={t.score:.1f}, Words={t.good_word_count}/{t.word_count}, "
                f"Conf={t.avg_confidence:.1f}%{marker}"
            )
        logger.info(f"Best: {best.name} (score: {best.score:.1f})")
        logger.info(f"Second: {second.name} (score: {second.score:.1f})")
        logger.info(f"Ratio: {ratio:.2f}x better")

        status, angle = decide(trials)
        if status is OrientationStatus.CORRECTED:
            logger.info(f"Auto-rotating document by {angle}°")
            return OrientationResult(
                image=rotate(image, angle),
                corrected=True,
                angle=angle,
                status=status,
                trials=trials,
                score_ratio=ratio,
            )

        if status is OrientationStatus.ALREADY_CORRECT:
            logger.info("Document is already correctly oriented")
        else:
            logger.warning("No clear best orientation, keeping original")
        return OrientationResult(
            image=image,
            corrected=False,
            angle=0,
            status=status,
            trials=trials,
            score_ratio=ratio,
        )


def resolve_orientation(
    image: RasterImage,
    recognizer: TextRecognizer,
    language: str = DEFAULT_OCR_LANGUAGE,
    progress_callback: ProgressCallback | None = None,
) -> OrientationResult:
    """Convenience wrapper around OrientationResolver.resolve."""
    return OrientationResolver(recognizer, language).resolve(image, progress_callback)
