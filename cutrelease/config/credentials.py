"""Token resolution for the hosting and language-model APIs.

Tokens are resolved in three steps:

1. a value already present in the configuration (command-line option,
   environment variable or JSON config file);
2. the global git configuration (``git config --global <key>``);
3. an interactive prompt, whose answer is written back to the global git
   configuration so the next run finds it in step 2.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Optional

import click

from ..errors import CredentialError


logger = logging.getLogger(__name__)

SOURCE_CONFIG = "config"
SOURCE_GIT_CONFIG = "git-config"
SOURCE_PROMPT = "prompt"


@dataclass(frozen=True)
class TokenSpec:
    """Where to look for one service's token."""

    name: str
    git_key: str
    create_url: str
    hint: str = ""


@dataclass(frozen=True)
class TokenResolution:
    """A resolved token and the step that produced it."""

    token: str
    source: str


GITHUB_TOKEN = TokenSpec(
    name="GitHub",
    git_key="github.token",
    create_url="https://github.com/settings/tokens/new",
    hint="Make sure to enable the 'repo' scope.",
)

GITLAB_TOKEN = TokenSpec(
    name="GitLab",
    git_key="gitlab.token",
    create_url="https://gitlab.com/-/user_settings/personal_access_tokens",
    hint="Make sure to enable the 'api' scope.",
)

OPENAI_TOKEN = TokenSpec(
    name="OpenAI",
    git_key="openai.token",
    create_url="https://platform.openai.com/api-keys",
)


def read_git_config(key: str) -> Optional[str]:
    """Read a global git config value, None when unset or git is unavailable."""
    try:
        result = subprocess.run(
            ["git", "config", "--global", key],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        logger.debug(f"Could not run git config: {e}")
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def write_git_config(key: str, value: str) -> None:
    """Store a global git config value."""
    try:
        subprocess.run(
            ["git", "config", "--global", key, value],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        stderr = getattr(e, 'stderr', None) or str(e)
        raise CredentialError(f"Failed to save token to git config {key}: {stderr.strip()}")


def prompt_for_token(spec: TokenSpec) -> str:
    click.secho(f"\nNo {spec.name} token found. Let's set one up.", fg="yellow")
    click.secho(f"Create a new token at: {spec.create_url}", fg="cyan")
    if spec.hint:
        click.secho(spec.hint, fg="cyan")

    token = ""
    while not token:
        token = click.prompt(f"Enter your {spec.name} token", hide_input=True, default="", show_default=False).strip()
        if not token:
            click.echo("Token is required")
    return token


def resolve_token(spec: TokenSpec, configured: Optional[str] = None,
                  interactive: bool = True) -> TokenResolution:
    """Resolve a token for the given service.

    Args:
        spec: Service description (name, git config key, where to create one)
        configured: Token from options, environment or config file
        interactive: Whether the operator may be prompted

    Returns:
        The token together with the step that produced it

    Raises:
        CredentialError: No token could be found, or a prompted token could
            not be persisted
    """
    if configured:
        return TokenResolution(configured, SOURCE_CONFIG)

    stored = read_git_config(spec.git_key)
    if stored:
        logger.debug(f"Using {spec.name} token from git config {spec.git_key}")
        return TokenResolution(stored, SOURCE_GIT_CONFIG)

    if not interactive:
        raise CredentialError(
            f"No {spec.name} token found. Set it in the environment, the config file "
            f"or with 'git config --global {spec.git_key} <token>'"
        )

    token = prompt_for_token(spec)
    write_git_config(spec.git_key, token)
    click.secho(f"{spec.name} token saved successfully!", fg="green")
    return TokenResolution(token, SOURCE_PROMPT)
