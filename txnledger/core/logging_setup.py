"""
txnledger/core/logging_setup.py

Package logging for txnledger.

Library modules take a logger from get_logger() and never attach handlers.
The "txnledger" package logger carries a NullHandler until an entrypoint
calls configure_logging() with the level resolved by LedgerConfig
(log_level field, TXNLEDGER_LOG_LEVEL in the environment).
"""

import logging
import sys
from typing import IO, Optional, Union

_PKG_LOGGER_NAME = "txnledger"
_DEFAULT_FORMAT  = "%(asctime)s %(name)s %(levelname)s %(message)s"

LEVEL_NAMES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

_handler: Optional[logging.Handler] = None


def parse_level(level: Union[int, str]) -> int:
    """
    Resolve a level name ("debug", "INFO") or number to a logging level.

    Raises ValueError for anything else.
    """
    if isinstance(level, bool):
        raise ValueError(f"invalid log level {level!r}")
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        if name in LEVEL_NAMES:
            return getattr(logging, name)
    raise ValueError(
        f"invalid log level {level!r}, expected one of {', '.join(LEVEL_NAMES)}"
    )


def configure_logging(
    level: Union[int, str] = "INFO",
    *,
    fmt: Optional[str] = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """
    Attach the package StreamHandler, or change its level on later calls.

    The handler is installed once per process; repeated calls only move the
    level, so a CLI invoked several times in one process keeps one handler.
    """
    global _handler
    numeric = parse_level(level)
    logger  = logging.getLogger(_PKG_LOGGER_NAME)

    if _handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        _handler = logging.StreamHandler(stream)
        _handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
        logger.addHandler(_handler)
        logger.propagate = False

    _handler.setLevel(numeric)
    logger.setLevel(numeric)


def get_logger(name: str) -> logging.Logger:
    """Module logger; silent until configure_logging() runs."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
