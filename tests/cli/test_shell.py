"""Tests for the interactive command loop."""

from io import StringIO

import pyodbc
import pytest

from odbc_shell.cli.output import PROMPT
from odbc_shell.cli.shell import execute_command, read_line, run_shell
from odbc_shell.core.commands import parse_command
from odbc_shell.core.exceptions import InputError
from odbc_shell.formatters.table import ResultRenderer
from tests.fakes import FakeResult, col

# -- read_line --


@pytest.mark.unit
class TestReadLine:
    def test_reads_one_line(self):
        stream = StringIO("SELECT 1\nSELECT 2\n")
        assert read_line(stream) == "SELECT 1\n"
        assert read_line(stream) == "SELECT 2\n"
        assert read_line(stream) is None

    def test_last_line_without_newline(self):
        assert read_line(StringIO("quit")) == "quit"

    def test_line_at_limit(self):
        assert read_line(StringIO("x" * 10 + "\n"), limit=10) == "x" * 10 + "\n"

    def test_crlf_line_at_limit(self):
        stream = StringIO("x" * 10 + "\r\nquit\r\n")
        assert read_line(stream, limit=10) == "x" * 10 + "\r\n"
        assert read_line(stream, limit=10) == "quit\r\n"

    def test_crlf_line_over_limit_discarded(self):
        stream = StringIO("x" * 11 + "\r\nquit\r\n")
        with pytest.raises(InputError, match="exceeds 10 characters"):
            read_line(stream, limit=10)
        assert read_line(stream, limit=10) == "quit\r\n"

    def test_line_one_over_limit_discarded(self):
        stream = StringIO("x" * 11 + "\nquit\n")
        with pytest.raises(InputError, match="exceeds 10 characters"):
            read_line(stream, limit=10)
        assert read_line(stream, limit=10) == "quit\n"

    def test_over_long_line_discarded(self):
        stream = StringIO("x" * 30 + "\nquit\n")
        with pytest.raises(InputError, match="exceeds 10 characters"):
            read_line(stream, limit=10)
        assert read_line(stream, limit=10) == "quit\n"


# -- run_shell --


def _run(session, text, **kwargs):
    return run_shell(session, ResultRenderer(), stdin=StringIO(text), **kwargs)


@pytest.mark.unit
def test_quit_first_dispatches_nothing(session, fake_cursor, capsys):
    assert _run(session, "quit\n") == 0
    assert fake_cursor.calls == []
    out = capsys.readouterr().out
    assert out.count(PROMPT) == 1


@pytest.mark.unit
def test_prompt_per_line(session, capsys):
    assert _run(session, "SELECT 1\nSELECT 2\nquit\n") == 2
    assert capsys.readouterr().out.count(PROMPT) == 3


@pytest.mark.unit
def test_blank_lines_reprompt(session, fake_cursor):
    assert _run(session, "\n   \nquit\n") == 0
    assert fake_cursor.calls == []


@pytest.mark.unit
def test_stops_at_end_of_input(session, fake_cursor):
    assert _run(session, "tables\n") == 1
    assert fake_cursor.calls == ["tables"]


@pytest.mark.unit
def test_lines_after_quit_ignored(session, fake_cursor):
    _run(session, "quit\nSELECT 1\n")
    assert fake_cursor.calls == []


@pytest.mark.unit
def test_over_long_line_reported(session, fake_cursor, capsys):
    assert _run(session, "y" * 40 + "\nquit\n", max_line_length=20) == 0
    assert fake_cursor.calls == []
    assert "exceeds 20 characters" in capsys.readouterr().err


@pytest.mark.unit
def test_handle_reset_after_each_statement(session, fake_cursor):
    fake_cursor.results["SELECT a"] = FakeResult(description=[col("a")], rows=[("x",)])
    _run(session, "SELECT a\nSELECT a\nquit\n")
    assert fake_cursor.nextset_calls == 2


# -- execute_command --


@pytest.mark.unit
def test_hard_error_skips_rendering(session, fake_cursor, capsys):
    fake_cursor.results["bogus"] = FakeResult(
        error=pyodbc.ProgrammingError("42000", "[42000] [driver]Syntax error (1) (SQLExecDirectW)")
    )
    assert execute_command(session, ResultRenderer(), parse_command("bogus")) is False
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error!" in captured.err
    assert "SQLSTATE: 42000, Native error code: 1" in captured.err
    assert fake_cursor.nextset_calls == 0


@pytest.mark.unit
def test_invalid_handle_reported(session, fake_cursor, capsys):
    fake_cursor.closed = True
    assert execute_command(session, ResultRenderer(), parse_command("SELECT 1")) is False
    err = capsys.readouterr().err
    assert "Invalid handle!" in err
    assert "SQLSTATE" not in err


@pytest.mark.unit
def test_driver_error_mentioning_closed_reports_records(session, fake_cursor, capsys):
    fake_cursor.results["SELECT * FROM closed_orders"] = FakeResult(
        error=pyodbc.ProgrammingError(
            "42S02",
            "[42S02] [driver]Invalid object name 'closed_orders'. (208) (SQLExecDirectW)",
        )
    )
    command = parse_command("SELECT * FROM closed_orders")
    assert execute_command(session, ResultRenderer(), command) is False
    err = capsys.readouterr().err
    assert "Invalid handle!" not in err
    assert "SQLSTATE: 42S02, Native error code: 208" in err


@pytest.mark.unit
def test_fetch_error_reported_and_handle_reset(session, fake_cursor, capsys):
    fake_cursor.results["SELECT a"] = FakeResult(description=[col("a")], rows=[("x",)])

    def broken_fetch():
        raise pyodbc.Error("HY000", "[HY000] [driver]Fetch failed (7) (SQLFetch)")

    fake_cursor.fetchone = broken_fetch
    assert execute_command(session, ResultRenderer(), parse_command("SELECT a")) is True
    captured = capsys.readouterr()
    assert "Native error code: 7" in captured.err
    assert "row(s) returned" not in captured.out
    assert fake_cursor.nextset_calls == 1


@pytest.mark.unit
def test_columns_without_table(session, fake_cursor):
    execute_command(session, ResultRenderer(), parse_command("columns"))
    assert fake_cursor.calls == ["columns:None"]
