"""Shared pytest fixtures for the fieldconf test suite."""

from __future__ import annotations

from collections.abc import Iterator

from loguru import logger
import pytest


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Capture `fieldconf` log messages emitted during one test."""

    messages: list[str] = []
    logger.enable("fieldconf")
    sink_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    try:
        yield messages
    finally:
        logger.remove(sink_id)
        logger.disable("fieldconf")
