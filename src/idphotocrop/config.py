"""
IdPhotoCrop - Configuration Module

This module contains all configuration constants and paths used by the application.
"""

import logging
import os
from typing import Final

# ============================================================================
# Application Constants
# ============================================================================

APP_NAME: Final[str] = "ID Photo Crop"
APP_VERSION: Final[str] = "1.0.0"

# ============================================================================
# Configuration Directory
# ============================================================================

CONFIG_DIR: Final[str] = os.path.expanduser("~/.config/idphotocrop")
CONFIG_FILE_PATH: Final[str] = os.path.join(CONFIG_DIR, "settings.json")

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: int = logging.INFO
LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME: Final[str] = "IdPhotoCrop"

# ============================================================================
# Document Loading
# ============================================================================

SUPPORTED_EXTENSIONS: Final[tuple[str, ...]] = (".pdf", ".jpg", ".jpeg", ".png", ".bmp")
PDF_RENDER_SCALE: Final[float] = 3.0
PDF_BASE_DPI: Final[int] = 72

# ============================================================================
# Processing Defaults
# ============================================================================

DEFAULT_OCR_LANGUAGE: Final[str] = "eng"
ORIENTATION_MAX_SIDE: Final[int] = 1500
DEFAULT_PADDING_RATIO: Final[float] = 0.5
MAX_CANDIDATES: Final[int] = 5
MIN_SELECTION_SIZE: Final[int] = 20
EXPORT_FORMAT: Final[str] = "png"
EXPORT_PREFIX: Final[str] = "extracted_photo_"
