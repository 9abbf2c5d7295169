"""Configuration module."""

from .settings import (
    Config,
    get_config,
    load_json_config,
    find_config_file,
    create_sample_config,
)
from .credentials import (
    TokenSpec,
    TokenResolution,
    GITHUB_TOKEN,
    GITLAB_TOKEN,
    OPENAI_TOKEN,
    resolve_token,
)

__all__ = [
    "Config",
    "get_config",
    "load_json_config",
    "find_config_file",
    "create_sample_config",
    "TokenSpec",
    "TokenResolution",
    "GITHUB_TOKEN",
    "GITLAB_TOKEN",
    "OPENAI_TOKEN",
    "resolve_token",
]
