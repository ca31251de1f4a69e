"""Pillow image encoder used when exporting the extracted photo."""

import io
import logging
import os
import time

from idphotocrop.config import EXPORT_FORMAT, EXPORT_PREFIX
from idphotocrop.services.raster import RasterImage

logger = logging.getLogger(__name__)


class PillowEncoder:
    """ImageEncoder writing any format Pillow supports (PNG by default)."""

    def encode(self, image: RasterImage, format: str = EXPORT_FORMAT) -> bytes:
        pil_format = format.upper()
        if pil_format == "JPG":
            pil_format = "JPEG"

        img = image.to_pil()
        if pil_format == "JPEG" and img.mode == "RGBA":
            img = img.convert("RGB")

        buf = io.BytesIO()
        img.save(buf, format=pil_format)
        data = buf.getvalue()
        logger.debug(
            f"Encoded {image.width}x{image.height} image as {pil_format} ({len(data)} bytes)"
        )
        return data


def default_export_name(prefix: str = EXPORT_PREFIX, format: str = EXPORT_FORMAT) -> str:
    """Timestamped file name, e.g. extracted_photo_1700000000000.png."""
    return f"{prefix}{int(time.time() * 1000)}.{format.lower()}"


def write_export(data: bytes, path: str | os.PathLike) -> str:
    """Write encoded bytes to disk, creating parent folders as needed."""
    path = os.fspath(path)
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    logger.info(f"Saved extracted photo to {path}")
    return path
