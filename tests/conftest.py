"""Shared fixtures for kube-status tests."""

import pytest

from .fakes import FakeWatchSource


@pytest.fixture
def source() -> FakeWatchSource:
    """Provides a watch source whose streams end after their events."""
    return FakeWatchSource()


@pytest.fixture
def held_source() -> FakeWatchSource:
    """Provides a watch source whose streams stay open after their events."""
    return FakeWatchSource(hold_open=True)
