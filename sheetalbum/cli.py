"""Command line entry point.

Usage:
    # Render and send every sheet listed in SHEET_NAMES
    python -m sheetalbum

    # Only some sheets, two renders at a time
    python -m sheetalbum --sheet Ladi --sheet Mydu --concurrency 2

    # Write the PNGs to a directory instead of sending them
    python -m sheetalbum --output-dir ./out
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .api import AlbumAPI
from .config import Settings
from .connectors.google import SheetsClient
from .core.exceptions import AlbumError, PipelineError
from .io.convert import Pdf2ImageConverter
from .models import PipelineRequest, RowRange, SheetRef
from .runtime.rest import HTTPClient, RetryPolicy

logger = logging.getLogger("sheetalbum")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheetalbum",
        description="Render Google Sheets ranges to images and send them as a Telegram album.",
    )
    parser.add_argument(
        "--sheet",
        action="append",
        dest="sheets",
        metavar="NAME",
        help="Sheet to process (repeatable, overrides SHEET_NAMES)",
    )
    parser.add_argument("--concurrency", type=int, help="Chunk renders in flight")
    parser.add_argument(
        "--output-dir", type=Path, help="Write images to this directory instead of sending"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def describe_error(error: AlbumError) -> str:
    """One-line description naming the failed stage and chunk."""
    if isinstance(error, PipelineError):
        where = f" (rows {error.chunk})" if error.chunk is not None else ""
        return f"{error.stage} failed{where}: {error}"
    return str(error)


async def prepare_request(
    settings: Settings,
    sheets: SheetsClient,
    sheet_ids: dict[str, int],
    sheet_name: str,
) -> PipelineRequest | None:
    """Look up gid, caption and last row; None if the sheet is skipped."""
    gid = sheet_ids.get(sheet_name)
    if gid is None:
        logger.warning("Sheet %r not found, skipping", sheet_name)
        return None

    caption = await sheets.read_caption(
        settings.spreadsheet_id,
        sheet_name,
        settings.caption_cells,
        gate_cell=settings.caption_gate_cell,
        separator=settings.caption_separator,
    )
    if caption is None:
        logger.warning("Sheet %r: %s is empty, skipping", sheet_name, settings.caption_gate_cell)
        return None

    last_row = await sheets.find_last_row(
        settings.spreadsheet_id,
        sheet_name,
        column=settings.last_row_column,
        scan_rows=settings.last_row_scan,
    )
    logger.info("Sheet %r: last row %d (column %s)", sheet_name, last_row, settings.last_row_column)

    return PipelineRequest(
        sheet=SheetRef(spreadsheet_id=settings.spreadsheet_id, sheet_name=sheet_name, gid=gid),
        row_range=RowRange(start=1, end=last_row),
        max_rows_per_chunk=settings.max_rows_per_chunk,
        merge_threshold=settings.merge_threshold,
        caption=caption,
        credential=settings.google_token,
        concurrency=settings.concurrency,
        start_column=settings.start_column,
        end_column=settings.end_column,
    )


async def run(settings: Settings, output_dir: Path | None = None) -> int:
    """Process every configured sheet in order."""
    retry_policy = RetryPolicy(
        max_attempts=settings.retry_max_attempts,
        base_delay_s=settings.retry_base_delay,
        jitter_s=settings.retry_jitter,
        linear=settings.retry_linear,
    )
    converter = Pdf2ImageConverter(dpi=settings.render_dpi, timeout=settings.convert_timeout)

    async with HTTPClient(timeout=settings.http_timeout) as http:
        sheets = SheetsClient(http, settings.google_token.get_secret_value())
        api = AlbumAPI(
            bot_token=settings.telegram_bot_token.get_secret_value(),
            http=http,
            converter=converter,
            retry_policy=retry_policy,
            pace_small_chunks=settings.pace_small_chunks,
        )
        sheet_ids = await sheets.fetch_sheet_ids(settings.spreadsheet_id)

        for sheet_name in settings.sheet_names:
            logger.info("Processing sheet %r", sheet_name)
            request = await prepare_request(settings, sheets, sheet_ids, sheet_name)
            if request is None:
                continue
            if output_dir is None:
                await api.send_sheet(request, chat_id=settings.telegram_chat_id)
                continue

            result = await api.render(request)
            output_dir.mkdir(parents=True, exist_ok=True)
            for artifact in result.artifacts:
                (output_dir / artifact.display_name).write_bytes(artifact.image_bytes)
            logger.info("Wrote %d image(s) to %s", len(result), output_dir)

    logger.info("All sheets processed")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_env()
        overrides: dict[str, object] = {}
        if args.sheets:
            overrides["sheet_names"] = args.sheets
        if args.concurrency is not None:
            if args.concurrency < 1:
                logger.error("--concurrency must be >= 1")
                return 2
            overrides["concurrency"] = args.concurrency
        if overrides:
            settings = settings.model_copy(update=overrides)
        return asyncio.run(run(settings, output_dir=args.output_dir))
    except AlbumError as e:
        logger.error("%s", describe_error(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
