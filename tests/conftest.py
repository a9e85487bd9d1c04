"""Pytest configuration for test suite.

Ensures the project root is on ``sys.path`` so imports like ``import utilkit``
resolve correctly regardless of the working directory pytest chooses.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_syspath() -> None:
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        # Prepend to prefer local sources over site-packages
        sys.path.insert(0, project_root_str)


_ensure_project_root_on_syspath()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove UTILKIT_* variables so settings tests see only what they set."""
    for name in list(os.environ):
        if name.startswith("UTILKIT_"):
            monkeypatch.delenv(name, raising=False)
    yield monkeypatch
