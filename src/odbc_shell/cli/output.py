"""Terminal output helpers: stdout for tables and prompts, stderr for reports."""

from __future__ import annotations

import sys
from collections.abc import Iterable

PROMPT = "SQL> "

BANNER = (
    "Enter SQL commands.\n"
    "Type 'tables' to list the tables.\n"
    "Type 'columns <table>' to list the columns of <table>.\n"
    "Type 'quit' to quit.\n"
)


def write_output(lines: Iterable[str]) -> None:
    """Write lines to stdout as they are produced."""
    for line in lines:
        sys.stdout.write(line + "\n")
    sys.stdout.flush()


def write_prompt() -> None:
    sys.stdout.write(PROMPT)
    sys.stdout.flush()


def write_banner() -> None:
    write_output([BANNER])
