"""Google Sheets connector implementation."""

from .export import SheetExporter
from .sheets import SheetsClient

__all__ = [
    "SheetExporter",
    "SheetsClient",
]
