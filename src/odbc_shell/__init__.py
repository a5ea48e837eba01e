"""ODBC Shell - interactive SQL client for ODBC data sources."""

from odbc_shell.__about__ import __version__

__all__ = ["__version__"]
