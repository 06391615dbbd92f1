"""Google Sheets API lookups.

Resolves what the pipeline needs before rendering: the numeric gid of each
tab, the last occupied row of a column, and the caption cells.
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote

from ...core.exceptions import ProviderError
from ...runtime.rest import HTTPClient
from .config import SHEETS_API_URL, auth_headers

logger = logging.getLogger(__name__)

_CELL_RE = re.compile(r"^([A-Z]+)([1-9][0-9]*)$")


def column_index(letters: str) -> int:
    """Zero-based index of a column name (``A`` -> 0, ``AD`` -> 29)."""
    index = 0
    for ch in letters:
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index - 1


def column_letters(index: int) -> str:
    """Inverse of column_index."""
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def parse_cell(cell: str) -> tuple[int, int]:
    """Parse ``F5`` into ``(column_index, row)``.

    Raises:
        ValueError: If ``cell`` is not a plain A1 cell reference
    """
    match = _CELL_RE.match(cell.strip().upper())
    if not match:
        raise ValueError(f"Invalid cell reference: {cell!r}")
    return column_index(match.group(1)), int(match.group(2))


def quote_sheet(sheet_name: str) -> str:
    """Quote a sheet name for use in an A1 range."""
    return "'" + sheet_name.replace("'", "''") + "'"


class SheetsClient:
    """Read-only Sheets v4 client."""

    def __init__(self, http: HTTPClient, token: str) -> None:
        self._http = http
        self._headers = auth_headers(token)

    async def fetch_sheet_ids(self, spreadsheet_id: str) -> dict[str, int]:
        """Map every tab title to its gid (one metadata call)."""
        data = await self._http.get_json(
            f"{SHEETS_API_URL}/{spreadsheet_id}",
            params={"fields": "sheets.properties(sheetId,title)"},
            headers=self._headers,
        )
        sheets: list[dict[str, Any]] = data.get("sheets") or []
        ids = {
            s["properties"]["title"]: int(s["properties"]["sheetId"])
            for s in sheets
            if "properties" in s
        }
        logger.info("Loaded metadata for %d sheets", len(ids))
        return ids

    async def fetch_values(self, spreadsheet_id: str, a1_range: str) -> list[list[str]]:
        """Fetch the formatted values of ``a1_range`` (rows of cells)."""
        data = await self._http.get_json(
            f"{SHEETS_API_URL}/{spreadsheet_id}/values/{quote(a1_range, safe='')}",
            headers=self._headers,
        )
        values = data.get("values")
        if values is None:
            return []
        if not isinstance(values, list):
            raise ProviderError(f"Unexpected values payload for {a1_range}")
        return values

    async def find_last_row(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        column: str = "K",
        scan_rows: int = 2000,
    ) -> int:
        """Last row with a non-empty cell in ``column``; at least 1."""
        values = await self.fetch_values(
            spreadsheet_id, f"{quote_sheet(sheet_name)}!{column}1:{column}{scan_rows}"
        )
        for i in range(len(values) - 1, -1, -1):
            if values[i] and values[i][0]:
                return i + 1
        return 1

    async def read_caption(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        cells: list[str],
        gate_cell: str | None = None,
        separator: str = "    ",
    ) -> str | None:
        """Join the values of ``cells`` into a caption.

        Returns None when ``gate_cell`` is given and empty, meaning the sheet
        should be skipped. All cells are read in a single range request.
        """
        refs = [parse_cell(c) for c in cells]
        gate = parse_cell(gate_cell) if gate_cell else None
        every = refs + ([gate] if gate else [])
        if not every:
            return ""

        min_col = min(c for c, _ in every)
        max_col = max(c for c, _ in every)
        min_row = min(r for _, r in every)
        max_row = max(r for _, r in every)
        values = await self.fetch_values(
            spreadsheet_id,
            f"{quote_sheet(sheet_name)}!{column_letters(min_col)}{min_row}:"
            f"{column_letters(max_col)}{max_row}",
        )

        def cell_value(ref: tuple[int, int]) -> str:
            col, row = ref
            try:
                return str(values[row - min_row][col - min_col])
            except IndexError:
                return ""

        if gate is not None and not cell_value(gate):
            return None
        return separator.join(cell_value(ref) for ref in refs)
