"""Document to image conversion.

Architecture:
    The pipeline only depends on the Converter protocol: a staged PDF goes
    in, trimmed PNG bytes come out. Pdf2ImageConverter is the stock
    implementation; it rasterizes the first page with pdf2image (poppler)
    and trims uniform margins with Pillow, all in a worker thread.

Failure modes:
    Every failure raises ConversionError with a ``reason``:
    - "start": poppler could not be launched
    - "exit": poppler rejected the document
    - "timeout": poppler did not finish in time and was killed
    - "output": no image was produced or it could not be decoded

Cancellation:
    A worker thread cannot be interrupted. A cancelled convert() waits for
    its thread to finish (bounded by ``timeout``) before re-raising, so no
    conversion outlives the pipeline run that started it.
"""

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path
from typing import Protocol

from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)
from PIL import Image, ImageChops, UnidentifiedImageError

from ..core.exceptions import ConversionError

logger = logging.getLogger(__name__)


class Converter(Protocol):
    """Conversion port used by the chunk renderer."""

    async def convert(self, source: Path) -> bytes:
        """Convert the staged document at ``source`` to image bytes."""
        ...


def trim_image(img: Image.Image) -> Image.Image:
    """Crop borders that share the top-left pixel's color.

    Images with no content beyond the border color are returned unchanged.
    """
    img = img.convert("RGB")
    background = Image.new(img.mode, img.size, img.getpixel((0, 0)))
    bbox = ImageChops.difference(img, background).getbbox()
    if bbox is None:
        return img
    return img.crop(bbox)


def encode_png(img: Image.Image) -> bytes:
    out = io.BytesIO()
    img.save(out, format="PNG")
    return out.getvalue()


def trim_uniform_margins(png_bytes: bytes) -> bytes:
    """Byte-level variant of trim_image for already encoded images."""
    try:
        with Image.open(io.BytesIO(png_bytes)) as img:
            img.load()
            return encode_png(trim_image(img))
    except (UnidentifiedImageError, OSError) as e:
        raise ConversionError(f"Cannot decode rendered image: {e}", reason="output") from e


class Pdf2ImageConverter:
    """Rasterize the first page of a PDF with pdf2image and trim the result."""

    def __init__(
        self,
        dpi: int = 150,
        timeout: float = 120.0,
        poppler_path: str | Path | None = None,
        trim: bool = True,
    ) -> None:
        self.dpi = dpi
        self.timeout = timeout
        self.poppler_path = poppler_path
        self.trim = trim

    def _rasterize(self, source: Path) -> bytes:
        try:
            pages = convert_from_path(
                str(source),
                dpi=self.dpi,
                first_page=1,
                last_page=1,
                single_file=True,
                fmt="png",
                strict=True,
                timeout=self.timeout,
                poppler_path=self.poppler_path,
            )
        except PDFInfoNotInstalledError as e:
            raise ConversionError(f"Poppler is not installed: {e}", reason="start") from e
        except PDFPopplerTimeoutError as e:
            raise ConversionError(
                f"Conversion of {source.name} timed out after {self.timeout}s", reason="timeout"
            ) from e
        except (PDFPageCountError, PDFSyntaxError) as e:
            raise ConversionError(f"Poppler rejected {source.name}: {e}", reason="exit") from e
        except OSError as e:
            raise ConversionError(f"Cannot start poppler: {e}", reason="start") from e

        if not pages:
            raise ConversionError(f"No page rendered from {source.name}", reason="output")
        try:
            image = trim_image(pages[0]) if self.trim else pages[0]
            logger.debug("Rendered %s at %dx%d", source.name, *image.size)
            return encode_png(image)
        finally:
            for page in pages:
                page.close()

    async def convert(self, source: Path) -> bytes:
        work = asyncio.ensure_future(asyncio.to_thread(self._rasterize, source))
        try:
            return await asyncio.shield(work)
        except asyncio.CancelledError:
            await asyncio.wait([work])
            if not work.cancelled():
                work.exception()
            raise
