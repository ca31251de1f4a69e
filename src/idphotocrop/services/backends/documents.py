"""
Document loading: file-type validation, PDF rasterization and image decode.

Only the first page of a PDF is used. PDF pages are rendered with the
``pdftoppm`` binary (poppler-utils) at a fixed scale so the photo keeps
enough resolution for detection and cropping.
"""

import io
import logging
import os
import subprocess
import tempfile
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from idphotocrop.config import PDF_BASE_DPI, PDF_RENDER_SCALE, SUPPORTED_EXTENSIONS
from idphotocrop.services.backends.base import PageRasterizer
from idphotocrop.services.raster import RasterImage
from idphotocrop.utils.exceptions import InvalidInputError, RasterizationError

logger = logging.getLogger(__name__)

PDFTOPPM_TIMEOUT_SECONDS = 60


class PdftoppmRasterizer:
    """PageRasterizer that shells out to pdftoppm."""

    def __init__(self, binary: str = "pdftoppm", timeout: float = PDFTOPPM_TIMEOUT_SECONDS) -> None:
        self.binary = binary
        self.timeout = timeout

    def render(self, file_bytes: bytes, page_index: int, scale: float) -> RasterImage:
        """Render one page to pixels.

        Args:
            file_bytes: Raw PDF content
            page_index: 0-indexed page number
            scale: Multiple of the 72 DPI base resolution

        Returns:
            RGBA RasterImage of the page

        Raises:
            RasterizationError: If pdftoppm is missing, fails or returns no image
        """
        dpi = int(round(PDF_BASE_DPI * scale))
        page = page_index + 1
        fd, pdf_path = tempfile.mkstemp(suffix=".pdf", prefix="idphotocrop_")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(file_bytes)

            result = subprocess.run(
                [
                    self.binary,
                    "-png",
                    "-r",
                    str(dpi),
                    "-f",
                    str(page),
                    "-l",
                    str(page),
                    "-singlefile",
                    pdf_path,
                ],
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise RasterizationError("pdf", f"{self.binary} not found") from e
        except subprocess.TimeoutExpired as e:
            raise RasterizationError("pdf", f"timed out after {self.timeout}s") from e
        finally:
            try:
                os.unlink(pdf_path)
            except OSError:
                pass

        if result.returncode != 0 or not result.stdout:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise RasterizationError("pdf", stderr or f"exit code {result.returncode}")

        try:
            with Image.open(io.BytesIO(result.stdout)) as img:
                image = RasterImage.from_pil(img)
        except (UnidentifiedImageError, OSError) as e:
            raise RasterizationError("pdf", f"unreadable page image: {e}") from e

        logger.info(f"Rendered PDF page {page} at {dpi} DPI ({image.width}x{image.height})")
        return image


def validate_document_path(path: str | os.PathLike) -> Path:
    """Check that a path exists and has a supported extension.

    Raises:
        InvalidInputError: For missing files or unsupported types
    """
    p = Path(path)
    if p.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise InvalidInputError(
            str(p), f"supported types are {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    if not p.is_file():
        raise InvalidInputError(str(p), "file does not exist")
    return p


def decode_image(data: bytes, source: str = "image") -> RasterImage:
    """Decode JPEG/PNG/BMP bytes into an RGBA RasterImage."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return RasterImage.from_pil(img)
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidInputError(source, f"cannot decode image: {e}") from e


def load_document(
    path: str | os.PathLike,
    rasterizer: PageRasterizer | None = None,
    scale: float = PDF_RENDER_SCALE,
) -> RasterImage:
    """Load the first page of a PDF or an image file as a RasterImage.

    Args:
        path: Document path (.pdf, .jpg, .jpeg, .png, .bmp)
        rasterizer: PDF renderer; defaults to PdftoppmRasterizer
        scale: PDF render scale

    Returns:
        Full-page RasterImage
    """
    p = validate_document_path(path)
    data = p.read_bytes()

    if p.suffix.lower() == ".pdf":
        rasterizer = rasterizer or PdftoppmRasterizer()
        return rasterizer.render(data, 0, scale)

    image = decode_image(data, str(p))
    logger.info(f"Loaded image {p.name} ({image.width}x{image.height})")
    return image
