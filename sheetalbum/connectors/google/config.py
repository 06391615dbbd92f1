"""Shared Google Sheets connector constants.

This module centralizes URLs and export options used by the export call and
the Sheets API lookups.
"""

from __future__ import annotations

EXPORT_URL = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/export"
SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"

# Landscape A4, fit to width, no titles/page numbers/gridlines/frozen rows.
PDF_EXPORT_OPTIONS: dict[str, str] = {
    "format": "pdf",
    "portrait": "false",
    "size": "A4",
    "fitw": "true",
    "sheetnames": "false",
    "printtitle": "false",
    "pagenumbers": "false",
    "gridlines": "false",
    "fzr": "false",
}


def auth_headers(token: str) -> dict[str, str]:
    """Bearer authorization header for ``token``."""
    return {"Authorization": f"Bearer {token}"}


def a1_range(sheet_name: str, start_column: str, start_row: int, end_column: str, end_row: int) -> str:
    """Build an A1 range such as ``Sheet1!F1:AD40``."""
    return f"{sheet_name}!{start_column}{start_row}:{end_column}{end_row}"
