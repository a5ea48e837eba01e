"""Exception hierarchy for ODBC Shell.

All exceptions carry an exit_code for CLI return value mapping.
Driver errors additionally carry the diagnostic records of the failing handle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from odbc_shell.core.exit_codes import ExitCode
from odbc_shell.core.models import ReturnStatus

if TYPE_CHECKING:
    from odbc_shell.core.models import DiagnosticRecord


class OdbcShellError(Exception):
    """Base exception for all ODBC Shell errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NetworkError(OdbcShellError):
    """Connection failures, unreachable data source."""

    exit_code: int = ExitCode.NETWORK_ERROR


class InputError(OdbcShellError):
    """Unusable terminal input."""

    exit_code: int = ExitCode.INPUT_ERROR


class ConfigError(OdbcShellError):
    """Malformed config file, invalid setting."""

    exit_code: int = ExitCode.CONFIG_ERROR


class DriverError(OdbcShellError):
    """A driver call ended in the generic error class."""

    status: ReturnStatus = ReturnStatus.ERROR

    def __init__(
        self, message: str, diagnostics: list[DiagnosticRecord] | None = None
    ) -> None:
        super().__init__(message)
        self.diagnostics: list[DiagnosticRecord] = list(diagnostics or [])


class InvalidHandleError(DriverError):
    """A statement or connection handle was used after release (or never acquired)."""

    status: ReturnStatus = ReturnStatus.INVALID_HANDLE


class ConnectionFailedError(NetworkError):
    """The driver refused the connection string."""

    def __init__(
        self, message: str, diagnostics: list[DiagnosticRecord] | None = None
    ) -> None:
        super().__init__(message)
        self.diagnostics: list[DiagnosticRecord] = list(diagnostics or [])
