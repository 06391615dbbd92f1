"""I/O layer: staging and document conversion."""

from .convert import Converter, Pdf2ImageConverter, encode_png, trim_image, trim_uniform_margins
from .staging import StagingArea

__all__ = [
    "Converter",
    "Pdf2ImageConverter",
    "StagingArea",
    "encode_png",
    "trim_image",
    "trim_uniform_margins",
]
