"""Logger hierarchy for the compiler (``zephyr`` and ``zephyr.<stage>``)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

ROOT_LOGGER = "zephyr"
CONSOLE_FORMAT = "[zephyr] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(stage: str | None = None) -> logging.Logger:
    """Return the logger of one pipeline stage, or the root compiler logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{stage}" if stage else ROOT_LOGGER)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Send compiler logs to ``stream`` (stderr by default) and optionally a file.

    Per-stage debug messages are only emitted when ``verbose`` is set. Calling
    this again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["ROOT_LOGGER", "configure_logging", "get_logger"]
