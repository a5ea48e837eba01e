"""Shared test fixtures for ODBC Shell."""

from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import pyodbc
import pytest
from typer.testing import CliRunner

from odbc_shell.cli.main import app
from odbc_shell.core.config import ResolvedConfig
from odbc_shell.core.logging import setup_logging
from odbc_shell.core.session import OdbcSession
from tests.fakes import FakeConnection, FakeCursor


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep user config, env overrides and pyodbc module attributes out of tests."""
    setup_logging()
    monkeypatch.setattr(
        "odbc_shell.core.config.DEFAULT_CONFIG_PATH", tmp_path / "missing.toml"
    )
    for var in ("ODBC_SHELL_DISPLAY_MAX", "ODBC_SHELL_MAX_LINE_LENGTH", "SENTRY_DSN"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(pyodbc, "odbcversion", pyodbc.odbcversion)
    monkeypatch.setattr(pyodbc, "pooling", pyodbc.pooling)


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_cursor():
    return FakeCursor()


@pytest.fixture
def fake_connection(fake_cursor):
    return FakeConnection(fake_cursor)


@pytest.fixture
def fake_connect(fake_connection):
    """Patch pyodbc.connect to hand out the fake connection."""
    with patch("odbc_shell.core.session.pyodbc.connect") as connect:
        connect.return_value = fake_connection
        yield connect


@pytest.fixture
def session(fake_connect):
    """An opened OdbcSession backed by the fake connection."""
    with OdbcSession(ResolvedConfig()) as s:
        s.open("DSN=test")
        yield s
