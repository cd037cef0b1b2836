"""Provider test fixtures."""

from __future__ import annotations

import pytest
import requests


@pytest.fixture(autouse=True)
def no_retry_sleep(monkeypatch):
    """tenacity backs off through time.sleep; skip the wait in tests."""
    monkeypatch.setattr("time.sleep", lambda _s: None)


@pytest.fixture
def connection_error() -> requests.exceptions.ConnectionError:
    return requests.exceptions.ConnectionError("connection refused")
