"""
Collaborator interfaces and their default backends.

- TextRecognizer / RapidOCRRecognizer: words and confidences from RapidOCR
- RegionDetector / HaarCascadeDetector: face rectangles from OpenCV
- PageRasterizer / PdftoppmRasterizer: first PDF page via poppler-utils
- ImageEncoder / PillowEncoder: PNG export
"""

from idphotocrop.services.backends.base import (
    ImageEncoder,
    PageRasterizer,
    RecognitionResult,
    RecognizedWord,
    RegionDetector,
    TextRecognizer,
)
from idphotocrop.services.backends.detector import HaarCascadeDetector
from idphotocrop.services.backends.documents import PdftoppmRasterizer, load_document
from idphotocrop.services.backends.encoder import PillowEncoder, default_export_name
from idphotocrop.services.backends.recognizer import RapidOCRRecognizer

__all__ = [
    # Interfaces
    "ImageEncoder",
    "PageRasterizer",
    "RecognitionResult",
    "RecognizedWord",
    "RegionDetector",
    "TextRecognizer",
    # Backends
    "HaarCascadeDetector",
    "PdftoppmRasterizer",
    "PillowEncoder",
    "RapidOCRRecognizer",
    "default_export_name",
    "load_document",
]
