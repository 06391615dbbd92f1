"""Row range and sheet reference models."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RowRange(BaseModel):
    """Inclusive range of 1-based sheet rows."""

    start: int = Field(..., ge=1)
    end: int = Field(..., ge=1)

    @field_validator("end")
    @classmethod
    def validate_end(cls, v: int, info) -> int:
        """Validate end >= start."""
        if "start" in info.data and v < info.data["start"]:
            raise ValueError("end must be >= start")
        return v

    @property
    def size(self) -> int:
        """Number of rows covered."""
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"

    model_config = ConfigDict(frozen=True)


class SheetRef(BaseModel):
    """Identifies one tab of a spreadsheet."""

    spreadsheet_id: str = Field(..., min_length=1)
    sheet_name: str = Field(..., min_length=1)
    gid: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
