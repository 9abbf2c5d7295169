"""Source-control hosting clients."""

import logging
from typing import Optional

from ..config import Config
from .models import ChangeRequest, parse_timestamp
from .github import GitHubClient
from .gitlab import GitLabClient


def create_hosting_client(config: Config, token: str, logger: Optional[logging.Logger] = None):
    """Build the client for the configured host."""
    if config.host == "gitlab":
        return GitLabClient(config.gitlab_host, token, logger=logger)
    return GitHubClient(token, api_url=config.github_api_url, logger=logger)


__all__ = [
    "ChangeRequest",
    "parse_timestamp",
    "GitHubClient",
    "GitLabClient",
    "create_hosting_client",
]
