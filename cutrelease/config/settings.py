"""Configuration management for Cutrelease."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)

SUPPORTED_HOSTS = ("github", "gitlab")

# Conventional variable names honoured besides the CUTRELEASE_ prefixed ones
ENV_ALIASES = {
    'github_token': ('CUTRELEASE_GITHUB_TOKEN', 'GITHUB_TOKEN'),
    'gitlab_token': ('CUTRELEASE_GITLAB_TOKEN', 'GITLAB_TOKEN'),
    'openai_api_key': ('CUTRELEASE_OPENAI_API_KEY', 'OPENAI_API_KEY'),
    'openai_base_url': ('CUTRELEASE_OPENAI_BASE_URL', 'OPENAI_BASE_URL'),
    'openai_model': ('CUTRELEASE_OPENAI_MODEL',),
    'host': ('CUTRELEASE_HOST',),
    'github_api_url': ('CUTRELEASE_GITHUB_API_URL',),
    'gitlab_host': ('CUTRELEASE_GITLAB_HOST',),
    'owner': ('CUTRELEASE_OWNER',),
    'repo': ('CUTRELEASE_REPO',),
    'base_branch': ('CUTRELEASE_BASE_BRANCH',),
}


class Config(BaseSettings):
    """Configuration settings for Cutrelease."""

    model_config = SettingsConfigDict(env_prefix="CUTRELEASE_", case_sensitive=False)

    host: str = "github"
    github_api_url: str = "https://api.github.com"
    gitlab_host: str = "https://gitlab.com"
    github_token: Optional[str] = None
    gitlab_token: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_base_url: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None
    base_branch: Optional[str] = None
    config_file: Optional[str] = None

    @field_validator('host')
    @classmethod
    def check_host(cls, v):
        """Only GitHub and GitLab are supported."""
        v = (v or "github").lower()
        if v not in SUPPORTED_HOSTS:
            raise ValueError(f"host must be one of {', '.join(SUPPORTED_HOSTS)}, got '{v}'")
        return v

    @field_validator('gitlab_host', 'github_api_url')
    @classmethod
    def normalize_url(cls, v):
        """Ensure host URLs have a protocol and no trailing slash."""
        if v and not v.startswith(('http://', 'https://')):
            v = f"https://{v}"
        return v.rstrip('/') if v else v


def load_json_config(config_path: str) -> dict:
    """Load configuration from JSON file.

    Args:
        config_path: Path to JSON configuration file

    Returns:
        Configuration dictionary
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Error loading config file {config_path}: {e}")
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")
    return data


def find_config_file() -> Optional[str]:
    """Find configuration file in common locations.

    Returns:
        Path to config file or None if not found
    """
    search_paths = [
        "cutrelease.json",
        ".cutrelease.json",
        "~/.cutrelease.json",
        "~/.config/cutrelease/config.json",
    ]

    for path_str in search_paths:
        path = Path(path_str).expanduser()
        if path.exists() and path.is_file():
            return str(path)

    return None


def env_overrides() -> dict:
    """Collect configuration values set in the environment."""
    overrides = {}
    for field, names in ENV_ALIASES.items():
        for name in names:
            value = os.getenv(name)
            if value:
                overrides[field] = value
                break
    return overrides


def get_config(config_file: Optional[str] = None) -> Config:
    """Load configuration from environment variables and/or JSON file.

    Args:
        config_file: Optional path to JSON config file

    Returns:
        Configuration object
    """
    config_data = {}

    json_config_path = config_file or find_config_file()
    if json_config_path:
        try:
            config_data.update(load_json_config(json_config_path))
            config_data['config_file'] = json_config_path
        except ValueError as e:
            # Environment variables still apply
            logger.warning(f"Ignoring config file: {e}")

    # Environment variables override JSON config
    config_data.update(env_overrides())

    known = set(Config.model_fields)
    unknown = sorted(k for k in config_data if k not in known)
    if unknown:
        logger.debug(f"Ignoring unknown config keys: {', '.join(unknown)}")

    return Config(**{k: v for k, v in config_data.items() if k in known})


def create_sample_config(path: str = "cutrelease.json") -> None:
    """Create a sample configuration file.

    Args:
        path: Path where to create the sample config file
    """
    sample_config = {
        "host": "github",
        "owner": "your-org",
        "repo": "your-repo",
        "base_branch": "main",
        "openai_model": "gpt-4o",
    }

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample_config, f, indent=2)
        f.write("\n")
