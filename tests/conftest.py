"""
Shared pytest fixtures for Amalgam tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import unittest.mock as _mock

import pytest as _pytest

import amalgam.config as config
import amalgam.logging as amalgam_logging

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "AMALGAM_DEFAULT_STRATEGY",
    "AMALGAM_DUMP_OPERANDS",
    "AMALGAM_LOG_CONFLICTS",
]


@_pytest.fixture(autouse=True)
def isolated_state():
    """
    Isolate every test from the environment and from global state.

    Clears AMALGAM_* variables, drops cached settings and restores the
    default sink afterwards.
    """
    clean = {k: v for k, v in _os.environ.items() if k not in ENV_KEYS_TO_CLEAR}
    with _mock.patch.dict(_os.environ, clean, clear=True):
        config.reset_settings()
        previous = amalgam_logging.set_sink(None)
        try:
            yield
        finally:
            amalgam_logging.set_sink(previous)
            config.reset_settings()


@_pytest.fixture
def recording_sink() -> amalgam_logging.RecordingSink:
    """Install a RecordingSink for the duration of the test."""
    sink = amalgam_logging.RecordingSink()
    amalgam_logging.set_sink(sink)
    return sink


@_pytest.fixture
def calls() -> list[str]:
    """Shared list for recording call order in chain and hook tests."""
    return []
