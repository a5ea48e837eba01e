"""Sentry integration for error tracking.

Sentry stays disabled unless a DSN is configured.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import sentry_sdk

from odbc_shell.__about__ import __version__

if TYPE_CHECKING:
    from odbc_shell.core.config import ResolvedConfig


def setup_sentry(config: ResolvedConfig) -> bool:
    """Initialize Sentry when a DSN is configured. Returns True if enabled."""
    if not config.sentry_dsn:
        return False
    sentry_sdk.init(
        dsn=config.sentry_dsn,
        traces_sample_rate=0.03,
        environment=config.environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    return True
