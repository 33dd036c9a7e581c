"""Fixtures for CLI tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_wirebuild_logging():
    """Drop handlers installed by setup_logging so each test gets a fresh stream."""
    yield
    logger = logging.getLogger("wirebuild")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
