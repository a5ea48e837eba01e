"""Pipe-delimited fixed-width table rendering of a statement's results."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

import structlog

from odbc_shell.core.models import (
    DEFAULT_DISPLAY_MAX,
    NULL_LABEL,
    ColumnDescriptor,
    ColumnMeta,
    ResultSet,
)

if TYPE_CHECKING:
    from odbc_shell.core.session import OdbcSession


def display_width(
    display_size: int | None, name: str, display_max: int = DEFAULT_DISPLAY_MAX
) -> int:
    """Cells reserved for a column.

    The driver's display size is clamped to [len(NULL_LABEL), display_max],
    then widened to fit the column name without passing display_max.
    """
    size = display_size if display_size and display_size > 0 else display_max
    width = max(len(NULL_LABEL), min(size, display_max))
    return max(width, min(len(name), display_max))


def format_field(text: str, width: int, *, left: bool = True) -> str:
    cell = text[:width]
    return f" {cell:<{width}} |" if left else f" {cell:>{width}} |"


def format_separator(width: int) -> str:
    return "-" * (width + 3 - 1) + "|"


class ResultRenderer:
    """Renders the current result of an OdbcSession as output lines.

    Lines are yielded as rows are fetched, so large results stream.
    """

    def __init__(
        self,
        display_max: int = DEFAULT_DISPLAY_MAX,
        character_types: Iterable[str] = ("str",),
    ) -> None:
        self.display_max = display_max
        self.character_types = frozenset(character_types)

    def build_result_set(self, columns: list[ColumnMeta]) -> ResultSet:
        return ResultSet(
            columns=[
                ColumnDescriptor(
                    name=meta.name,
                    display_width=display_width(
                        meta.display_size, meta.name, self.display_max
                    ),
                    is_character=meta.type_name in self.character_types,
                )
                for meta in columns
            ]
        )

    def header(self, result: ResultSet) -> str:
        return "".join(format_field(c.name, c.display_width) for c in result.columns)

    def separator(self, result: ResultSet) -> str:
        return "".join(format_separator(c.display_width) for c in result.columns)

    def row(self, result: ResultSet) -> str:
        return "".join(
            format_field(c.display_text(), c.display_width, left=c.is_character)
            for c in result.columns
        )

    def render(self, session: OdbcSession) -> Iterator[str]:
        log = structlog.get_logger()
        yield ""

        if session.column_count() <= 0:
            affected = session.row_count()
            log.debug("no result set", rows_affected=affected)
            if affected >= 0:
                yield f"{affected} row(s) affected."
                yield ""
            return

        result = self.build_result_set(session.describe())
        session.bind_columns(result.columns)

        yield self.header(result)
        yield self.separator(result)

        while session.fetch():
            yield self.row(result)
            result.row_count += 1

        log.debug("result set drained", row_count=result.row_count)
        yield ""
        yield f"{result.row_count} row(s) returned."
        yield ""
