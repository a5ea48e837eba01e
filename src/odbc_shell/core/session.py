"""ODBC session for ODBC Shell.

Wraps a pyodbc connection and one reusable cursor (the statement handle)
with handle lifecycle, statement execution, catalog queries, column
binding, and exception mapping to the OdbcShellError hierarchy.
"""

from __future__ import annotations

import datetime
import decimal
import time
import uuid
from typing import TYPE_CHECKING, Any

import pyodbc
import sentry_sdk
import structlog

from odbc_shell.core.diagnostics import parse_error, parse_messages
from odbc_shell.core.exceptions import (
    ConnectionFailedError,
    DriverError,
    InvalidHandleError,
)
from odbc_shell.core.models import MAX_NAME_LENGTH, ColumnMeta

if TYPE_CHECKING:
    from odbc_shell.core.config import ResolvedConfig
    from odbc_shell.core.models import ColumnDescriptor, DiagnosticRecord

# Display sizes of fixed-width types, as SQL_DESC_DISPLAY_SIZE reports them.
_FIXED_DISPLAY_SIZES: dict[type, int] = {
    float: 24,
    datetime.date: 10,
    uuid.UUID: 36,
}


def _display_size(
    type_code: Any, internal_size: int | None, precision: int | None, scale: int | None
) -> int | None:
    """Character cells needed to show a column, following the ODBC display size rules.

    pyodbc leaves the description's display_size empty, so it is derived
    from the column size, precision and scale.
    """
    size = internal_size if internal_size and internal_size > 0 else None
    if type_code is bool:
        return 1
    if type_code is int:
        return size + 1 if size else 20
    if type_code is decimal.Decimal:
        digits = precision if precision and precision > 0 else size
        return digits + 2 if digits else None
    if type_code is datetime.datetime:
        return size or 26
    if type_code is datetime.time:
        return 8 + (scale + 1 if scale and scale > 0 else 0)
    if type_code in (bytes, bytearray):
        return size * 2 if size else None
    if type_code in _FIXED_DISPLAY_SIZES:
        return _FIXED_DISPLAY_SIZES[type_code]
    return size


def as_text(value: Any) -> str | None:
    """Character form of a fetched value, as the driver converts to SQL_C_WCHAR."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (bytes, bytearray)):
        return value.hex().upper()
    if isinstance(value, datetime.datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


# pyodbc's own messages for a released cursor or connection.
_CLOSED_HANDLE_MESSAGES = frozenset(
    {
        "Attempt to use a closed cursor.",
        "The cursor's connection has been closed.",
        "Attempt to use a closed connection.",
    }
)


def _is_closed_handle_error(exc: pyodbc.Error) -> bool:
    return isinstance(exc, pyodbc.ProgrammingError) and any(
        str(arg) in _CLOSED_HANDLE_MESSAGES for arg in exc.args
    )


class OdbcSession:
    """A connection to an ODBC data source with a single statement handle."""

    def __init__(self, config: ResolvedConfig) -> None:
        self.config = config
        self._environment = False
        self._connection: pyodbc.Connection | None = None
        self._cursor: pyodbc.Cursor | None = None
        self._bound: list[ColumnDescriptor] = []

    def __enter__(self) -> OdbcSession:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._cursor is not None

    def open(self, connection_string: str) -> None:
        """Declare the API version, connect, and allocate the statement handle."""
        log = structlog.get_logger()

        # Environment attributes only take effect before the first connect.
        pyodbc.odbcversion = self.config.odbc_version
        pyodbc.pooling = self.config.pooling
        self._environment = True

        log.debug("connecting", odbc_version=self.config.odbc_version)
        try:
            self._connection = pyodbc.connect(
                connection_string,
                autocommit=self.config.autocommit,
                timeout=self.config.connect_timeout,
            )
        except pyodbc.Error as e:
            diagnostics = parse_error(e)
            log.debug("connect failed", state=diagnostics[0].state)
            raise ConnectionFailedError(
                f"Connection failed: {diagnostics[0].message}", diagnostics
            ) from e

        self._cursor = self._connection.cursor()
        log.debug("connected")

    def _statement(self) -> pyodbc.Cursor:
        if self._cursor is None:
            raise InvalidHandleError("Invalid statement handle")
        return self._cursor

    def _run(self, operation: str, call: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return call(*args, **kwargs)
        except pyodbc.Error as e:
            if _is_closed_handle_error(e):
                raise InvalidHandleError(f"{operation}: {e}") from e
            diagnostics = parse_error(e)
            raise DriverError(
                f"{operation} failed: {diagnostics[0].message}", diagnostics
            ) from e

    def _info(self) -> list[DiagnosticRecord]:
        return parse_messages(getattr(self._cursor, "messages", None))

    def execute(self, sql: str) -> list[DiagnosticRecord]:
        """Execute a statement directly. Returns informational diagnostics."""
        log = structlog.get_logger()
        cursor = self._statement()

        sql_normalized = " ".join(sql.split())
        log.debug("executing statement", sql=sql_normalized)
        with sentry_sdk.start_span(
            op="db.query", name=sql_normalized[:100]
        ) as span:
            start_time = time.monotonic()
            try:
                self._run("execute", cursor.execute, sql)
            except DriverError as e:
                span.set_status("internal_error")
                log.debug("statement failed", sql=sql_normalized, error=e.message)
                raise
            duration_ms = (time.monotonic() - start_time) * 1000
            span.set_data("duration_ms", duration_ms)
            log.debug("statement complete", duration_ms=f"{duration_ms:.1f}")
        return self._info()

    def tables(self) -> list[DiagnosticRecord]:
        """Run the table catalog query on the statement handle."""
        cursor = self._statement()
        structlog.get_logger().debug("listing tables")
        self._run("tables", cursor.tables)
        return self._info()

    def columns(self, table: str | None = None) -> list[DiagnosticRecord]:
        """Run the column catalog query, optionally filtered by table name."""
        cursor = self._statement()
        structlog.get_logger().debug("listing columns", table=table)
        self._run("columns", cursor.columns, table=table)
        return self._info()

    def column_count(self) -> int:
        description = self._statement().description
        return len(description) if description else 0

    def row_count(self) -> int:
        return self._statement().rowcount

    def describe(self) -> list[ColumnMeta]:
        """Metadata of every result column, in driver order."""
        columns: list[ColumnMeta] = []
        for desc in self._statement().description or ():
            name, type_code, _, internal_size, precision, scale, _ = desc
            columns.append(
                ColumnMeta(
                    name=str(name)[:MAX_NAME_LENGTH],
                    type_name=getattr(type_code, "__name__", str(type_code)),
                    display_size=_display_size(
                        type_code, internal_size, precision, scale
                    ),
                )
            )
        return columns

    def bind_columns(self, columns: list[ColumnDescriptor]) -> None:
        """Bind one descriptor per result column of the current statement."""
        count = self.column_count()
        if len(columns) != count:
            msg = f"Expected {count} column bindings, got {len(columns)}"
            raise ValueError(msg)
        self._bound = list(columns)

    def fetch(self) -> bool:
        """Fetch the next row into the bound columns. False when no rows remain."""
        row = self._run("fetch", self._statement().fetchone)
        if row is None:
            return False
        for column, value in zip(self._bound, row, strict=False):
            column.fill(as_text(value))
        return True

    def close_cursor(self) -> None:
        """Unbind columns and discard pending results so the handle can be reused."""
        self._bound = []
        cursor = self._cursor
        if cursor is None:
            return
        try:
            while cursor.nextset():
                pass
        except pyodbc.Error as e:
            structlog.get_logger().debug("close cursor", error=str(e))

    def close(self) -> None:
        """Release statement, connection and environment, in that order."""
        log = structlog.get_logger()
        self._bound = []
        if self._cursor is not None:
            try:
                self._cursor.close()
            except pyodbc.Error as e:
                log.debug("statement release failed", error=str(e))
            self._cursor = None
        if self._connection is not None:
            try:
                self._connection.close()
            except pyodbc.Error as e:
                log.debug("disconnect failed", error=str(e))
            self._connection = None
            log.debug("disconnected")
        if self._environment:
            self._environment = False
            log.debug("environment released")
