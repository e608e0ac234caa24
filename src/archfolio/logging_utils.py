"""Logging configuration helpers.

Library modules only ever call ``logging.getLogger(__name__)``; the embedding
application decides where records go by calling :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from archfolio.config import settings


def configure_logging(
    level: str | None = None, format_string: str | None = None, filename: str | None = None
) -> None:
    """Configure the root logger.

    Args:
        level: Logging level name, case-insensitive. Defaults to ``settings.log_level``.
        format_string: Custom format; defaults to timestamp, logger name and level.
        filename: Log file path. Logs to stdout when None.
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers: list[logging.Handler] = []
    if filename:
        handlers.append(logging.FileHandler(filename))
    else:
        handlers.append(logging.StreamHandler(sys.stdout))

    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format=format_string,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str, **context: Any) -> logging.Logger | logging.LoggerAdapter:
    """Return a logger, wrapped in a LoggerAdapter when context is given.

    Context (e.g. ``session_id``) is attached to every record as ``extra``.
    """
    logger = logging.getLogger(name)
    if context:
        return logging.LoggerAdapter(logger, context)
    return logger
