"""Pipeline input model."""

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from .rows import RowRange, SheetRef


class PipelineRequest(BaseModel):
    """Everything one rendering run needs.

    The credential is an already minted bearer token for the export endpoint.
    """

    sheet: SheetRef
    row_range: RowRange
    max_rows_per_chunk: int = Field(default=40, ge=1)
    merge_threshold: int = Field(default=9, ge=1)
    caption: str = ""
    credential: SecretStr
    concurrency: int = Field(default=1, ge=1)
    start_column: str = Field(default="F", pattern=r"^[A-Z]+$")
    end_column: str = Field(default="AD", pattern=r"^[A-Z]+$")

    model_config = ConfigDict(frozen=True)
