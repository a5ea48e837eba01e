"""Output formatters for ODBC Shell."""

from odbc_shell.formatters.diagnostics import format_diagnostics, report_diagnostics
from odbc_shell.formatters.table import ResultRenderer, display_width
