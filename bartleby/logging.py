"""Console and file logging for ``bartleby build`` and ``bartleby serve``."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "bartleby"

# Dev-server dependencies that log every request and reconnect at INFO.
SERVE_NOISY_LOGGERS = ("watchdog", "livereload", "tornado.access", "tornado.general")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the bartleby hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class ConsoleFormatter(logging.Formatter):
    """``[bartleby] message`` lines; only non-INFO records name their level.

    In serve mode each line carries the wall-clock time so consecutive
    rebuild cycles can be told apart.
    """

    def __init__(self, *, timestamps: bool = False) -> None:
        super().__init__(datefmt="%H:%M:%S")
        self.timestamps = timestamps

    def format(self, record: logging.LogRecord) -> str:
        prefix = _LOGGER_NAME
        if self.timestamps:
            prefix = f"{prefix} {self.formatTime(record, self.datefmt)}"
        message = record.getMessage()
        if record.levelno != logging.INFO:
            message = f"{record.levelname} {message}"
        text = f"[{prefix}] {message}"
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    serve: bool = False,
) -> logging.Logger:
    """Install console and optional file handlers for one CLI invocation.

    The log file always records DEBUG detail. ``serve`` adds timestamps to
    console lines and, unless ``verbose``, raises the dev-server libraries
    to WARNING.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(ConsoleFormatter(timestamps=serve))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    if serve:
        for name in SERVE_NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    return logger


__all__ = ["ConsoleFormatter", "SERVE_NOISY_LOGGERS", "configure_logging", "get_logger"]
