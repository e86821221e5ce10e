"""
Lathe Logging - loguru sink configuration

Console logging goes to stderr. Set LATHE_QUIET=1 to silence it and
LATHE_LOG_LEVEL to change the threshold.
"""

from __future__ import annotations

import os
import sys

from loguru import logger

_logging_configured = False


def setup_logging(
    level: str | None = None,
    suppress_console: bool | None = None,
    force: bool = False,
) -> None:
    """
    Configure the global logger.

    Args:
        level: Minimum level for the console sink. Defaults to LATHE_LOG_LEVEL or WARNING.
        suppress_console: Drop the console sink entirely. Defaults to LATHE_QUIET.
        force: Reconfigure even if logging was already set up.
    """
    global _logging_configured

    if _logging_configured and not force:
        return
    _logging_configured = True

    logger.remove()

    if level is None:
        level = os.getenv("LATHE_LOG_LEVEL", "WARNING").upper()
    if suppress_console is None:
        suppress_console = os.getenv("LATHE_QUIET", "").lower() in ("1", "true", "yes")

    if not suppress_console:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
            colorize=True,
        )


setup_logging()

__all__ = ["logger", "setup_logging"]
