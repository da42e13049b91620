"""Shared test configuration."""

import sys

import pytest
import structlog


@pytest.fixture(autouse=True)
def structlog_to_stderr():
    """Keep log output off stdout, which carries the host report."""
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(sys.stderr))
    yield
    structlog.reset_defaults()
