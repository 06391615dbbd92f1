"""Google Sheets PDF export call.

Exports one row range of a sheet as a PDF through the spreadsheet export
endpoint. HTTP status codes surface through ProviderError, and 429 through
RateLimitedError, so the retry wrapper can single out rate limiting.
"""

from __future__ import annotations

from typing import Any

from ...models import PipelineRequest, SheetRef
from ...runtime.chunking import ExportCall
from ...runtime.rest import HTTPClient
from .config import EXPORT_URL, PDF_EXPORT_OPTIONS, a1_range, auth_headers


def build_query(
    sheet: SheetRef,
    start_row: int,
    end_row: int,
    start_column: str = "F",
    end_column: str = "AD",
) -> dict[str, Any]:
    """Build query parameters for a PDF export of one row range."""
    return {
        **PDF_EXPORT_OPTIONS,
        "gid": str(sheet.gid),
        "range": a1_range(sheet.sheet_name, start_column, start_row, end_column, end_row),
    }


class SheetExporter:
    """Exports sheet ranges as PDF documents."""

    def __init__(self, http: HTTPClient) -> None:
        self._http = http

    async def export_pdf(
        self,
        sheet: SheetRef,
        start_row: int,
        end_row: int,
        *,
        token: str,
        start_column: str = "F",
        end_column: str = "AD",
    ) -> bytes:
        """Download the PDF for rows ``start_row..end_row``."""
        return await self._http.get_bytes(
            EXPORT_URL.format(spreadsheet_id=sheet.spreadsheet_id),
            params=build_query(sheet, start_row, end_row, start_column, end_column),
            headers=auth_headers(token),
        )

    def export_call_for(self, request: PipelineRequest) -> ExportCall:
        """Bind sheet, columns and credential of ``request`` into an export call.

        Usable directly as the pipeline's export call factory.
        """
        token = request.credential.get_secret_value()

        async def export_call(start_row: int, end_row: int) -> bytes:
            return await self.export_pdf(
                request.sheet,
                start_row,
                end_row,
                token=token,
                start_column=request.start_column,
                end_column=request.end_column,
            )

        return export_call
