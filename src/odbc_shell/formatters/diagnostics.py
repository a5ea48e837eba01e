"""Rendering of driver diagnostic records to stderr."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from rich.console import Console

from odbc_shell.core.models import DiagnosticRecord, ReturnStatus

_HEADERS: dict[ReturnStatus, str] = {
    ReturnStatus.SUCCESS_WITH_INFO: "Warning!",
    ReturnStatus.ERROR: "Error!",
    ReturnStatus.INVALID_HANDLE: "Error!",
}


def format_diagnostics(
    records: Sequence[DiagnosticRecord],
    status: ReturnStatus = ReturnStatus.ERROR,
) -> Iterator[str]:
    """Yield the report lines for one failing (or warning) driver call.

    An invalid handle has no diagnostic chain to walk.
    """
    yield _HEADERS.get(status, "Error!")
    if status is ReturnStatus.INVALID_HANDLE:
        yield "Invalid handle!"
        return
    for i, record in enumerate(records, start=1):
        yield (
            f"Status record: {i}, SQLSTATE: {record.state}, "
            f"Native error code: {record.native_error}, "
            f"Diagnostic message: {record.message}."
        )
    yield ""


def report_diagnostics(
    records: Sequence[DiagnosticRecord],
    status: ReturnStatus = ReturnStatus.ERROR,
    console: Console | None = None,
) -> None:
    if console is None:
        console = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)
    lines = format_diagnostics(records, status)
    style = "bold yellow" if status is ReturnStatus.SUCCESS_WITH_INFO else "bold red"
    console.print(next(lines), style=style, markup=False)
    for line in lines:
        console.print(line, markup=False)
