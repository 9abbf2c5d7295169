"""
Pytest configuration for config tests.
"""

import pytest

from cutrelease.config.settings import ENV_ALIASES


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate from the developer's environment, home and working directory."""
    for names in ENV_ALIASES.values():
        for name in names:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    return tmp_path
