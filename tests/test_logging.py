from __future__ import annotations

import io
import logging
from pathlib import Path

from zephyr.logging import configure_logging, get_logger


def test_get_logger_uses_zephyr_namespace() -> None:
    assert get_logger().name == "zephyr"
    assert get_logger("style").name == "zephyr.style"


def test_configure_logging_sets_level_and_file_sink(restore_logger, tmp_path: Path) -> None:
    log_file = tmp_path / "zephyr.log"
    logger = configure_logging(verbose=True, log_file=log_file)

    assert logger is restore_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    get_logger("test").debug("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")


def test_configure_logging_does_not_duplicate_handlers(restore_logger) -> None:
    configure_logging()
    logger = configure_logging()
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1


def test_configure_logging_writes_to_given_stream(restore_logger) -> None:
    stream = io.StringIO()
    configure_logging(stream=stream)

    get_logger("orchestrator").info("compiled")
    get_logger("orchestrator").debug("hidden")

    assert stream.getvalue() == "[zephyr] INFO compiled\n"
