"""Classification of terminal input lines.

A line is a meta-command when it starts with one of the keywords
(case-sensitive, at the very start of the line); anything else is a
statement passed verbatim to the driver.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class CommandKind(StrEnum):
    TABLES = "tables"
    COLUMNS = "columns"
    QUIT = "quit"
    STATEMENT = "statement"
    EMPTY = "empty"


class Command(BaseModel):
    kind: CommandKind
    text: str = ""
    table: str | None = None


_KEYWORDS = (CommandKind.TABLES, CommandKind.COLUMNS, CommandKind.QUIT)


def parse_command(line: str) -> Command:
    """Classify one input line with its trailing newline already read."""
    text = line.rstrip("\r\n")
    if not text.strip():
        return Command(kind=CommandKind.EMPTY, text=text)

    for keyword in _KEYWORDS:
        if text.startswith(keyword.value):
            if keyword is CommandKind.COLUMNS:
                tokens = text.split()
                table = tokens[1] if len(tokens) > 1 else None
                return Command(kind=keyword, text=text, table=table)
            return Command(kind=keyword, text=text)

    return Command(kind=CommandKind.STATEMENT, text=text)
