"""Console and file logging shared by the CLI, scheduler and service."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "designreport"
_CONSOLE_FORMAT = "[designreport] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``designreport.<name>``, or the package logger when ``name`` is empty."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route package log records to stderr and, when given, to ``log_file``.

    ``verbose`` lowers the threshold to DEBUG, which also turns on tracebacks
    in :func:`log_exception`.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False

    # main() may run more than once per process (tests, service reloads).
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()

    handlers: list[tuple[logging.Handler, str]] = [(logging.StreamHandler(), _CONSOLE_FORMAT)]
    if log_file is not None:
        handlers.append((logging.FileHandler(log_file, encoding="utf-8"), _FILE_FORMAT))
    for handler, fmt in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
    return logger


def log_exception(logger: logging.Logger, message: str, exc: BaseException) -> None:
    """Log ``exc`` with a traceback only when debug output is enabled."""
    if logger.isEnabledFor(logging.DEBUG):
        logger.error("%s: %s", message, exc, exc_info=exc)
    else:
        logger.error("%s: %s", message, exc)


__all__ = ["configure_logging", "get_logger", "log_exception"]
