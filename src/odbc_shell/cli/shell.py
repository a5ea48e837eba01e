"""Interactive command loop: read a line, dispatch it, render the result."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

import typer

from odbc_shell.cli.output import write_banner, write_output, write_prompt
from odbc_shell.core.commands import Command, CommandKind, parse_command
from odbc_shell.core.config import DEFAULT_MAX_LINE_LENGTH
from odbc_shell.core.exceptions import DriverError, InputError
from odbc_shell.core.logging import get_logger
from odbc_shell.core.models import ReturnStatus
from odbc_shell.formatters.diagnostics import report_diagnostics

if TYPE_CHECKING:
    from odbc_shell.core.models import DiagnosticRecord
    from odbc_shell.core.session import OdbcSession
    from odbc_shell.formatters.table import ResultRenderer


def read_line(stream: TextIO, limit: int = DEFAULT_MAX_LINE_LENGTH) -> str | None:
    """Read one line of at most ``limit`` characters. None at end of input.

    The line terminator, ``\\n`` or ``\\r\\n``, does not count toward the
    limit. An over-long line is consumed entirely and rejected with InputError.
    """
    line = stream.readline(limit + 2)
    if line == "":
        return None
    truncated = len(line) == limit + 2 and not line.endswith("\n")
    if truncated or len(line.rstrip("\r\n")) > limit:
        if not line.endswith("\n"):
            stream.readline()
        msg = f"Input line exceeds {limit} characters; ignored."
        raise InputError(msg)
    return line


def _dispatch(session: OdbcSession, command: Command) -> list[DiagnosticRecord]:
    if command.kind is CommandKind.TABLES:
        return session.tables()
    if command.kind is CommandKind.COLUMNS:
        return session.columns(command.table)
    return session.execute(command.text)


def execute_command(
    session: OdbcSession, renderer: ResultRenderer, command: Command
) -> bool:
    """Run one command and print its result. False when the driver rejected it."""
    try:
        info = _dispatch(session, command)
    except DriverError as e:
        report_diagnostics(e.diagnostics, e.status)
        return False

    if info:
        report_diagnostics(info, ReturnStatus.SUCCESS_WITH_INFO)

    try:
        write_output(renderer.render(session))
    except DriverError as e:
        sys.stdout.flush()
        report_diagnostics(e.diagnostics, e.status)
    finally:
        session.close_cursor()
    return True


def run_shell(
    session: OdbcSession,
    renderer: ResultRenderer,
    *,
    stdin: TextIO | None = None,
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
) -> int:
    """Prompt for commands until ``quit`` or end of input.

    Returns the number of commands sent to the driver.
    """
    log = get_logger("shell")
    stream = stdin if stdin is not None else sys.stdin
    dispatched = 0

    write_banner()
    while True:
        write_prompt()
        try:
            line = read_line(stream, max_line_length)
        except InputError as e:
            log.warning("input discarded", limit=max_line_length)
            typer.echo(e.message, err=True)
            continue

        if line is None:
            write_output([""])
            break

        command = parse_command(line)
        if command.kind is CommandKind.EMPTY:
            continue
        if command.kind is CommandKind.QUIT:
            break

        dispatched += 1
        log.debug("dispatching", kind=command.kind.value)
        execute_command(session, renderer, command)

    log.debug("command loop finished", commands=dispatched)
    return dispatched
