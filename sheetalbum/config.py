"""Runtime settings loaded from the environment.

Only the CLI reads the environment; the pipeline itself receives typed
parameters.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from .connectors.google.sheets import parse_cell
from .core.exceptions import ConfigurationError

_REQUIRED = {
    "spreadsheet_id": "SPREADSHEET_ID",
    "google_token": "GOOGLE_ACCESS_TOKEN",
    "telegram_bot_token": "TELEGRAM_BOT_TOKEN",
    "telegram_chat_id": "TELEGRAM_CHAT_ID",
}

_OPTIONAL = {
    "sheet_names": "SHEET_NAMES",
    "start_column": "START_COL",
    "end_column": "END_COL",
    "max_rows_per_chunk": "MAX_ROWS_PER_FILE",
    "merge_threshold": "MERGE_THRESHOLD",
    "concurrency": "CONCURRENCY",
    "last_row_column": "LAST_ROW_COLUMN",
    "last_row_scan": "LAST_ROW_SCAN",
    "caption_cells": "CAPTION_CELLS",
    "caption_gate_cell": "CAPTION_GATE_CELL",
    "render_dpi": "RENDER_DPI",
    "retry_max_attempts": "RETRY_MAX_ATTEMPTS",
    "retry_base_delay": "RETRY_BASE_DELAY",
    "retry_jitter": "RETRY_JITTER",
    "retry_linear": "RETRY_LINEAR",
    "http_timeout": "HTTP_TIMEOUT",
    "convert_timeout": "CONVERT_TIMEOUT",
    "pace_small_chunks": "PACE_SMALL_CHUNKS",
}

_LIST_FIELDS = {"sheet_names", "caption_cells"}


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseModel):
    """Deployment settings for one CLI run."""

    spreadsheet_id: str = Field(..., min_length=1)
    google_token: SecretStr
    telegram_bot_token: SecretStr
    telegram_chat_id: str = Field(..., min_length=1)

    sheet_names: list[str] = Field(default_factory=lambda: ["Ladi", "Mydu"])
    start_column: str = Field(default="F", pattern=r"^[A-Z]+$")
    end_column: str = Field(default="AD", pattern=r"^[A-Z]+$")
    max_rows_per_chunk: int = Field(default=40, ge=1)
    merge_threshold: int = Field(default=9, ge=1)
    concurrency: int = Field(default=1, ge=1)

    last_row_column: str = Field(default="K", pattern=r"^[A-Z]+$")
    last_row_scan: int = Field(default=2000, ge=1)
    caption_cells: list[str] = Field(default_factory=lambda: ["F5", "J5", "K5"])
    caption_gate_cell: str | None = "K6"
    caption_separator: str = "    "

    render_dpi: int = Field(default=150, ge=36, le=1200)
    retry_max_attempts: int = Field(default=5, ge=1, le=5)
    retry_base_delay: float = Field(default=3.0, ge=0)
    retry_jitter: float = Field(default=3.0, ge=0)
    retry_linear: bool = False
    http_timeout: float = Field(default=60.0, gt=0)
    convert_timeout: float = Field(default=120.0, gt=0)
    pace_small_chunks: bool = True

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_validator("caption_cells")
    @classmethod
    def validate_caption_cells(cls, v: list[str]) -> list[str]:
        """Validate every caption cell is a plain A1 reference."""
        for cell in v:
            parse_cell(cell)
        return [cell.upper() for cell in v]

    @field_validator("caption_gate_cell")
    @classmethod
    def validate_gate_cell(cls, v: str | None) -> str | None:
        """Validate the gate cell is a plain A1 reference."""
        if v is None:
            return v
        parse_cell(v)
        return v.upper()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Raises:
            ConfigurationError: If required variables are missing or any
                value fails validation
        """
        env = os.environ if environ is None else environ
        missing = [name for name in _REQUIRED.values() if not env.get(name, "").strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        values: dict[str, object] = {field: env[name] for field, name in _REQUIRED.items()}
        for field, name in _OPTIONAL.items():
            raw = env.get(name)
            if raw is None or not raw.strip():
                continue
            values[field] = _split(raw) if field in _LIST_FIELDS else raw.strip()

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
