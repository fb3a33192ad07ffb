"""
Shared pytest fixtures for envconfig tests.

Provides cache cleanup so every test compiles parsers and loads settings
from a clean slate, and a recording lookup for asserting which keys the
engine asked for.
"""

import sys
from pathlib import Path

import pytest

# Ensure envconfig package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from envconfig.compiler import clear_parser_cache
from envconfig.settings import clear_settings_cache


@pytest.fixture(autouse=True)
def clean_caches():
    """Clear parser and settings caches before and after each test."""
    clear_parser_cache()
    clear_settings_cache()
    yield
    clear_parser_cache()
    clear_settings_cache()


class RecordingLookup:
    """Mapping-backed lookup that remembers every key it was asked for."""

    def __init__(self, values=None):
        self.values = dict(values or {})
        self.calls = []

    def __call__(self, key):
        self.calls.append(key)
        if key in self.values:
            return self.values[key], True
        return "", False


@pytest.fixture
def recording_lookup():
    """Factory for :class:`RecordingLookup` instances."""
    return RecordingLookup
