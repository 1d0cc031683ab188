"""Logging for the ``erp_finance`` package.

Library modules log through ``get_logger(__name__)`` and never add handlers;
the package logger carries a ``NullHandler`` so nothing is printed until an
entry point calls :func:`configure_logging`.  Streamlit re-executes the
dashboard script on every interaction, so that call is idempotent: the first
call attaches a stderr handler and later calls only adjust the level.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "erp_finance"
LOG_LEVEL_ENV = "ERP_FINANCE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

_handler: Optional[logging.Handler] = None


def resolve_level(level: Union[int, str, None] = None) -> int:
    """Level from ``level``, else ``ERP_FINANCE_LOG_LEVEL``, else INFO.

    Accepts level numbers, numeric strings and level names in any case;
    unknown names resolve to INFO.
    """
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: Union[int, str, None] = None) -> logging.Logger:
    """Send package log records to stderr at ``level``."""
    global _handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
        logger.propagate = False
    logger.setLevel(resolve_level(level))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, nested under the package logger.

    Modules executed as scripts (``__main__``) get ``erp_finance.__main__`` so
    their records still reach the configured handler.
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
