"""Shared fixtures for unit tests."""

import pytest
from fake_server import FakeSmarthome


@pytest.fixture
def server() -> FakeSmarthome:
    """A compatible Smarthome server with default routes."""
    return FakeSmarthome()
