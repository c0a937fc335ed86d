"""Pytest configuration - shared fixtures for the pipeline tests.

Nothing here touches an audio device: the signal chain is driven by calling
render() directly and live input is replaced by FakeLiveSource.
"""
from __future__ import annotations

import pytest

from lab import Lab
from state import AppState
from tests.helpers.signal_helpers import SAMPLE_RATE


@pytest.fixture
def sample_rate():
    return SAMPLE_RATE


@pytest.fixture
def app_state():
    return AppState()


@pytest.fixture
def lab(app_state):
    """Headless lab: no device, tests render the chain themselves."""
    instance = Lab(app_state=app_state)
    yield instance
    instance.stop()
