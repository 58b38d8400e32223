"""Shared fixtures for the scanprep test suite."""

from collections.abc import Iterator

import pytest

from scanprep.utils.logger import get_logger


@pytest.fixture(autouse=True)
def reset_logger() -> Iterator[None]:
    """Let every test configure logging from scratch."""
    yield
    get_logger().reset()
