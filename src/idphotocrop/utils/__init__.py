"""
IdPhotoCrop - Utils Package

Utility modules for the application.
"""

from idphotocrop.utils.i18n import _
from idphotocrop.utils.logger import logger

__all__ = ["logger", "_"]
