"""Shared fixtures for TraceSpec tests."""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tracespec.config import TraceConfig


@pytest.fixture
def config(tmp_path):
    """Enabled config writing a single file under tmp_path."""
    return TraceConfig(
        environment='test',
        output='openapi.yaml',
        root=str(tmp_path),
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove TRACESPEC_* variables from the environment."""
    for key in list(os.environ):
        if key.startswith('TRACESPEC_'):
            monkeypatch.delenv(key, raising=False)
    # Plugin hooks write these directly; register them so they are restored
    for key in ('TRACESPEC_ENV', 'TRACESPEC_OUTPUT'):
        monkeypatch.setenv(key, '')
        monkeypatch.delenv(key)
    return monkeypatch
