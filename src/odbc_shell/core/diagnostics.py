"""Diagnostic record extraction from pyodbc errors and cursor messages.

pyodbc walks SQLGetDiagRec itself and flattens the chain into the
exception message::

    [42S02] [vendor][driver]Invalid object name 'x'. (208) (SQLExecDirectW); [42000] ... (8180)

Informational records of a successful call are exposed as
``cursor.messages``: a list of ``('[01000] (5701)', 'text')`` tuples.
"""

from __future__ import annotations

import re
from typing import Any

from odbc_shell.core.models import DiagnosticRecord

_FALLBACK_STATE = "HY000"

_RECORD_RE = re.compile(
    r"\[(?P<state>[0-9A-Z]{5})\] (?P<message>.*?) \((?P<native>-?\d+)\)"
    r"(?: \(SQL\w+\))?(?=; \[[0-9A-Z]{5}\] |\s*$)",
    re.DOTALL,
)

_MESSAGE_HEADER_RE = re.compile(r"\[(?P<state>[0-9A-Z]{5})\](?: \((?P<native>-?\d+)\))?")


def _is_state(value: Any) -> bool:
    return isinstance(value, str) and len(value) == 5 and value.isalnum()


def parse_error(exc: BaseException) -> list[DiagnosticRecord]:
    """Split a pyodbc exception into its diagnostic records.

    Always returns at least one record.
    """
    args = getattr(exc, "args", ())
    if len(args) >= 2 and _is_state(args[0]):
        state, text = args[0], str(args[1])
    elif args:
        state, text = _FALLBACK_STATE, str(args[-1])
    else:
        state, text = _FALLBACK_STATE, str(exc) or type(exc).__name__

    records = [
        DiagnosticRecord(
            state=m.group("state"),
            native_error=int(m.group("native")),
            message=m.group("message").strip(),
        )
        for m in _RECORD_RE.finditer(text)
    ]
    if records:
        return records
    return [DiagnosticRecord(state=state, native_error=0, message=text.strip())]


def parse_messages(messages: list[tuple[Any, Any]] | None) -> list[DiagnosticRecord]:
    records: list[DiagnosticRecord] = []
    for header, text in messages or []:
        m = _MESSAGE_HEADER_RE.search(str(header))
        if m is None:
            records.append(DiagnosticRecord(state=_FALLBACK_STATE, message=str(text)))
            continue
        native = m.group("native")
        records.append(
            DiagnosticRecord(
                state=m.group("state"),
                native_error=int(native) if native else 0,
                message=str(text),
            )
        )
    return records
