"""
Pytest configuration for CLI tests.
"""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from cutrelease.config.settings import ENV_ALIASES
from tests.helpers import FakeHostingClient


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Tokens in the environment, no config file or developer settings leaking in."""
    for names in ENV_ALIASES.values():
        for name in names:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    return tmp_path


@pytest.fixture
def fake_client(cli_env, newest_first):
    client = FakeHostingClient([newest_first])
    with patch('cutrelease.cli.main.create_hosting_client', return_value=client) as factory:
        client.factory = factory
        yield client
