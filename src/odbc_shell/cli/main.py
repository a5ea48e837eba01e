"""ODBC Shell main entry point."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import typer

from odbc_shell.__about__ import __version__
from odbc_shell.cli.shell import run_shell
from odbc_shell.core.config import load_config, resolve_config
from odbc_shell.core.exceptions import ConnectionFailedError, OdbcShellError
from odbc_shell.core.logging import get_logger, setup_logging
from odbc_shell.core.models import ReturnStatus
from odbc_shell.core.monitoring import setup_sentry
from odbc_shell.core.session import OdbcSession
from odbc_shell.formatters.diagnostics import report_diagnostics
from odbc_shell.formatters.table import ResultRenderer

app = typer.Typer(
    help="ODBC Shell - interactive SQL client for ODBC data sources",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"odbc-shell {__version__}")
        raise typer.Exit()


@app.command()
def main(
    connection_string: Annotated[
        str,
        typer.Argument(help="ODBC connection string, e.g. 'DSN=mydb;UID=me;PWD=secret'"),
    ],
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    display_max: Annotated[
        int | None,
        typer.Option("--display-max", help="Maximum column width in cells"),
    ] = None,
    max_line_length: Annotated[
        int | None,
        typer.Option("--max-line-length", help="Longest accepted input line"),
    ] = None,
) -> None:
    """Connect to an ODBC data source and run SQL typed at the prompt."""
    setup_logging(verbose)
    config = resolve_config(
        load_config(config_file),
        display_max=display_max,
        max_line_length=max_line_length,
    )
    log = get_logger("main")
    log.debug("configuration resolved", sources=config.sources)
    setup_sentry(config)

    renderer = ResultRenderer(
        display_max=config.display_max,
        character_types=config.character_types,
    )

    with sentry_sdk.start_transaction(op="cli", name="odbc-shell"):
        with OdbcSession(config) as session:
            try:
                session.open(connection_string)
            except ConnectionFailedError as e:
                report_diagnostics(e.diagnostics, ReturnStatus.ERROR)
                raise typer.Exit(e.exit_code) from e
            commands = run_shell(
                session, renderer, max_line_length=config.max_line_length
            )

    log.debug("session closed", commands=commands)


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except OdbcShellError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None
