"""
IdPhotoCrop - Services Package

Orientation resolution, candidate detection, cropping and the
interactive selection flow.
"""

from idphotocrop.services.candidate_filter import filter_candidates, filter_rectangles
from idphotocrop.services.crop import compute_crop, crop, crop_manual
from idphotocrop.services.detection import RegionCandidateDetector, find_candidates
from idphotocrop.services.geometry import Candidate, CropSpec, Rectangle
from idphotocrop.services.orientation import (
    OrientationResolver,
    OrientationResult,
    OrientationStatus,
    OrientationTrial,
    resolve_orientation,
)
from idphotocrop.services.preprocessing import to_detection_ready, to_ocr_ready
from idphotocrop.services.raster import RasterImage
from idphotocrop.services.rotation import rotate
from idphotocrop.services.session import SelectionStateMachine, SessionMode, SessionState

__all__ = [
    "Candidate",
    "CropSpec",
    "OrientationResolver",
    "OrientationResult",
    "OrientationStatus",
    "OrientationTrial",
    "RasterImage",
    "Rectangle",
    "RegionCandidateDetector",
    "SelectionStateMachine",
    "SessionMode",
    "SessionState",
    "compute_crop",
    "crop",
    "crop_manual",
    "filter_candidates",
    "filter_rectangles",
    "find_candidates",
    "resolve_orientation",
    "rotate",
    "to_detection_ready",
    "to_ocr_ready",
]
