"""
Root-level shared test fixtures.

Isolates every test from the kvrotator and GitHub Actions environment of
the machine running the suite.
"""

from __future__ import annotations

import os

import pytest

from kvrotator.config import reset_settings

ENV_PREFIXES = ("KVROTATOR_", "INPUT_")
ACTIONS_FILES = ("GITHUB_OUTPUT", "GITHUB_STEP_SUMMARY")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove kvrotator settings and Actions output files that leak between tests."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIXES) or key in ACTIONS_FILES:
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()
