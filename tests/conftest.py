"""Shared test fixtures."""

from __future__ import annotations

import logging

import pytest

from tally import CommandProcessor, Ledger, TokenReader


@pytest.fixture
def ledger():
    return Ledger()


@pytest.fixture
def processor(ledger):
    return CommandProcessor(ledger)


@pytest.fixture
def reader_for():
    def _make(text: str) -> TokenReader:
        return TokenReader.from_text(text)

    return _make


@pytest.fixture(autouse=True)
def _restore_tally_logger():
    """Undo handlers and levels the CLI installs with --verbose."""
    logger = logging.getLogger("tally")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
