from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.component_builder import ComponentBuilder


@pytest.fixture
def components(tmp_path: Path) -> ComponentBuilder:
    """Provide a component tree builder rooted at the pytest tmp_path."""
    return ComponentBuilder(tmp_path)


@pytest.fixture
def restore_logger():
    """Undo handler and level changes made to the ``zephyr`` logger."""
    logger = logging.getLogger("zephyr")
    level, propagate, handlers = logger.level, logger.propagate, list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate
