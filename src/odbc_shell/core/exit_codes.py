"""Standard exit codes for ODBC Shell.

Exit codes follow Unix conventions; 2 matches Click's usage error code.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for the odbc-shell process."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    NETWORK_ERROR = 5
    CONFIG_ERROR = 7
