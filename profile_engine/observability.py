"""
Logging setup for the cultural profile engine.

Modules log through ``logging.getLogger(__name__)``; this module only
installs the root handler and format once per process.
"""

from __future__ import annotations
import logging
import os
import sys
from typing import Optional, Union

_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "uvicorn", "uvicorn.access")


def configure_logging(
    level: Optional[Union[int, str]] = None,
    handler: Optional[logging.Handler] = None
) -> logging.Logger:
    """
    Configure root logging with a consistent format.

    Args:
        level: Logging level name or number. Read from LOG_LEVEL when None.
        handler: Optional handler; defaults to a stdout stream handler.

    Returns:
        The configured root logger.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), None)
        if not isinstance(numeric_level, int):
            numeric_level = logging.INFO
    else:
        numeric_level = level

    root = logging.getLogger()
    root.setLevel(numeric_level)

    # Avoid duplicated lines when called more than once
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = handler or logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root