"""
RapidOCR-backed text recognizer.

RapidOCR reports text lines with a 0-1 score. Lines are split into words,
each word inheriting its line's score scaled to 0-100 and a horizontal
slice of the line box proportional to its character offset.
"""

import logging

import cv2
import numpy as np

from idphotocrop.services.backends.base import RecognitionResult, RecognizedWord
from idphotocrop.services.geometry import Rectangle
from idphotocrop.services.raster import RasterImage

logger = logging.getLogger(__name__)

# Language codes accepted by the CLI and config, mapped to RapidOCR LangRec names
LANGUAGE_ALIASES = {
    "eng": "EN",
    "en": "EN",
    "latin": "LATIN",
    "ch": "CH",
    "chinese_cht": "CHINESE_CHT",
    "japan": "JAPAN",
    "korean": "KOREAN",
    "arabic": "ARABIC",
    "cyrillic": "CYRILLIC",
}


def _to_bgr(image: RasterImage) -> np.ndarray:
    if image.is_grayscale:
        return cv2.cvtColor(image.pixels, cv2.COLOR_GRAY2BGR)
    return cv2.cvtColor(image.pixels, cv2.COLOR_RGBA2BGR)


def split_line(text: str, box: list[list[float]] | None, score: float) -> list[RecognizedWord]:
    """Split one recognized line into words.

    Args:
        text: Line text
        box: Quadrilateral [[x1,y1], ..., [x4,y4]] or None
        score: Line confidence in [0, 1]

    Returns:
        Words with confidence in [0, 100]
    """
    confidence = max(0.0, min(100.0, float(score) * 100.0))
    tokens = text.split()
    if not tokens:
        return []

    bounds = None
    if box is not None and len(box) > 0:
        pts = np.asarray(box, dtype=np.float64)
        x0, y0 = pts[:, 0].min(), pts[:, 1].min()
        x1, y1 = pts[:, 0].max(), pts[:, 1].max()
        if x1 > x0 and y1 > y0:
            bounds = (x0, y0, x1, y1)

    words = []
    offset = 0
    n_chars = max(1, len(text))
    for token in tokens:
        start = text.index(token, offset)
        offset = start + len(token)
        word_box = None
        if bounds is not None:
            x0, y0, x1, y1 = bounds
            span = x1 - x0
            left = x0 + span * start / n_chars
            right = x0 + span * offset / n_chars
            if right > left:
                word_box = Rectangle(left, y0, right - left, y1 - y0)
        words.append(RecognizedWord(token, confidence, word_box))
    return words


class RapidOCRRecognizer:
    """TextRecognizer backed by RapidOCR.

    The engine is created on first use and reused for every later call, so
    consecutive orientation trials run with identical engine configuration.
    """

    def __init__(self, text_score: float = 0.3, params: dict | None = None) -> None:
        self.text_score = text_score
        self.extra_params = dict(params or {})
        self._engines: dict[str, object] = {}

    def _get_engine(self, language: str):
        key = LANGUAGE_ALIASES.get(language.lower(), "LATIN")
        engine = self._engines.get(key)
        if engine is not None:
            return engine

        from rapidocr import LangRec, RapidOCR

        lang_rec = getattr(LangRec, key, LangRec.LATIN)
        params = {"Global.text_score": self.text_score, "Rec.lang_type": lang_rec}
        params.update(self.extra_params)
        logger.info(f"Creating RapidOCR engine (language={key})")
        engine = RapidOCR(params=params)
        self._engines[key] = engine
        return engine

    def recognize(self, image: RasterImage, language: str) -> RecognitionResult:
        engine = self._get_engine(language)
        output = engine(_to_bgr(image))

        txts = list(getattr(output, "txts", None) or [])
        scores = list(getattr(output, "scores", None) or [])
        boxes = getattr(output, "boxes", None)
        boxes = list(boxes) if boxes is not None else [None] * len(txts)

        words: list[RecognizedWord] = []
        for text, score, box in zip(txts, scores, boxes):
            line_box = box.tolist() if hasattr(box, "tolist") else box
            words.extend(split_line(str(text), line_box, float(score)))

        logger.debug(f"RapidOCR returned {len(txts)} lines, {len(words)} words")
        return RecognitionResult(full_text="\n".join(str(t) for t in txts), words=words)
