"""Logging utilities for modtrack commands and service mode.

Progress lines from scanning, analysis, history and export go to the
``modtrack`` logger hierarchy. The console level comes from ``--verbose``,
then ``MODTRACK_LOG_LEVEL``, then INFO.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

_LOGGER_NAME = "modtrack"
LEVEL_ENV_VAR = "MODTRACK_LOG_LEVEL"
CONSOLE_FORMAT = "[modtrack] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the modtrack hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def resolve_level(verbose: bool = False, env_value: str | None = None) -> tuple[int, str | None]:
    """Return the effective level and the rejected env value, if any."""
    if verbose:
        return logging.DEBUG, None
    if not env_value:
        return logging.INFO, None
    level = logging.getLevelName(env_value.strip().upper())
    if isinstance(level, int):
        return level, None
    return logging.INFO, env_value


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the modtrack logger with console output and optional file sink."""
    level, rejected = resolve_level(verbose, os.environ.get(LEVEL_ENV_VAR))
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    if rejected is not None:
        logger.warning("Unknown %s value %r; using INFO", LEVEL_ENV_VAR, rejected)

    return logger


__all__ = ["LEVEL_ENV_VAR", "configure_logging", "get_logger", "resolve_level"]
