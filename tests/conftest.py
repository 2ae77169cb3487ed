# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Shared fixtures for logchain tests."""

from typing import List

import pytest

from logchain import stream
from logchain.factory import reset_default

_ENV_VARS = (
    "LOG_TYPE",
    "LOG_LEVEL",
    "LOG_NAME",
    "LOG_CALLER",
    "LOG_CALLER_DEPTH",
    "LOG_EXIT_CODE",
    "LOG_TIMESTAMPS",
)


@pytest.fixture(autouse=True)
def reset_default_logger(monkeypatch):
    """Reset the process-wide default and logging env vars around each test."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_default()
    yield
    reset_default()


@pytest.fixture
def events() -> List[str]:
    """List collecting events from the ``buffered`` stream."""
    return []


@pytest.fixture
def buffered(events):
    """BufferedStream appending each successful event to ``events``."""
    return stream.BufferedStream(stream.append_to(events))
