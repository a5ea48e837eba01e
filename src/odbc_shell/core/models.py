"""Result and diagnostic models for ODBC Shell.

Pydantic models for column metadata, the per-statement bound column
descriptors, and driver diagnostic records.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

NULL_LABEL = "<NULL>"

# Indicator value the driver reports for a NULL column (SQL_NULL_DATA).
NULL_DATA = -1

DEFAULT_DISPLAY_MAX = 20
MAX_NAME_LENGTH = 63


class ReturnStatus(StrEnum):
    """Outcome class of a driver call."""

    SUCCESS = "success"
    SUCCESS_WITH_INFO = "success_with_info"
    ERROR = "error"
    INVALID_HANDLE = "invalid_handle"


class DiagnosticRecord(BaseModel):
    """One entry of a handle's diagnostic chain."""

    state: str
    native_error: int = 0
    message: str


class ColumnMeta(BaseModel):
    """Driver-reported metadata for a single result column."""

    name: str
    type_name: str
    display_size: int | None = None


class ColumnDescriptor(BaseModel):
    """A result column with its bound display buffer and indicator."""

    name: str
    display_width: int
    is_character: bool = False
    buffer: str = ""
    indicator: int = 0

    @property
    def is_null(self) -> bool:
        return self.indicator == NULL_DATA

    def fill(self, text: str | None) -> None:
        """Store a fetched value the way a bound buffer receives it.

        NULL only touches the indicator. Text wider than the buffer is
        truncated; the indicator still reports the full length.
        """
        if text is None:
            self.indicator = NULL_DATA
            return
        self.indicator = len(text)
        self.buffer = text[: self.display_width]

    def display_text(self) -> str:
        return NULL_LABEL if self.is_null else self.buffer


class ResultSet(BaseModel):
    """Bound columns of one row-producing statement plus a running row count."""

    columns: list[ColumnDescriptor] = Field(default_factory=list)
    row_count: int = 0
