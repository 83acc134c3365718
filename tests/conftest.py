from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.rules_builder import RulesBuilder


@pytest.fixture
def rules_builder(tmp_path: Path) -> RulesBuilder:
    """Provide a reusable rules project rooted at the pytest tmp_path."""
    return RulesBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_rulesync_logger() -> Iterator[None]:
    """Undo CLI logging configuration so caplog keeps seeing rulesync records."""
    yield
    logger = logging.getLogger("rulesync")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
