"""Shared pytest fixtures."""

from collections.abc import Iterator

import pytest
from structlog.testing import capture_logs
from structlog.typing import EventDict


@pytest.fixture()
def log_records() -> Iterator[list[EventDict]]:
    """Capture structlog events emitted during the test."""
    with capture_logs() as records:
        yield records
