"""Pytest configuration shared across the suite."""

from __future__ import annotations

import logging

import pytest

from pachi_ocr.logging import reset_logging


@pytest.fixture(autouse=True)
def restore_root_logging():
    # configure_logging binds a handler to the stderr of the test that called it
    level = logging.getLogger().level
    yield
    reset_logging()
    logging.getLogger().setLevel(level)
