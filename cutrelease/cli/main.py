"""Main CLI entry point for Cutrelease."""

import locale
import logging
import sys
from typing import Optional, Tuple

import click
from pydantic import ValidationError

from .. import __version__
from ..config import (
    Config,
    get_config,
    create_sample_config,
    resolve_token,
    GITHUB_TOKEN,
    GITLAB_TOKEN,
)
from ..errors import CredentialError
from ..hosting import create_hosting_client
from .release import release
from .candidates import candidates
from .repos import repos


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--config-file', '-c', help='Path to JSON configuration file')
@click.option('--host', type=click.Choice(['github', 'gitlab']), help='Hosting service (default: github)')
@click.option('--github-token', help='GitHub API token')
@click.option('--gitlab-host', help='GitLab host URL')
@click.option('--gitlab-token', help='GitLab API token')
@click.option('--openai-key', help='OpenAI API key (alternative to env/git config)')
@click.option('--openai-model', help='OpenAI model to use (default: "gpt-4o")')
@click.option('--openai-base-url', help='Custom OpenAI-compatible API base URL')
@click.version_option(version=__version__, prog_name="cutrelease")
@click.pass_context
def cli(ctx, debug, config_file, host, github_token, gitlab_host, gitlab_token,
        openai_key, openai_model, openai_base_url):
    """Cutrelease - assemble a release pull request from merged pull requests."""

    # Setup logging
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger('cutrelease')

    # Dates in summaries follow the user's locale
    try:
        locale.setlocale(locale.LC_TIME, '')
    except locale.Error as e:
        logger.debug(f"Could not activate user locale: {e}")

    # Command line options win over environment and config file
    overrides = {
        'host': host,
        'github_token': github_token,
        'gitlab_host': gitlab_host,
        'gitlab_token': gitlab_token,
        'openai_api_key': openai_key,
        'openai_model': openai_model,
        'openai_base_url': openai_base_url,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}

    try:
        base_config = get_config(config_file)
        config = Config(**{**base_config.model_dump(), **overrides})
    except ValidationError as e:
        fail(f"Invalid configuration: {e}")

    ctx.ensure_object(dict)
    ctx.obj['config'] = config
    ctx.obj['logger'] = logger


def fail(message: str):
    """Report a fatal error and stop with a non-zero status."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def create_client(ctx, interactive: bool = True):
    """Create the hosting client, resolving its token first."""
    config = ctx.obj['config']
    if config.host == "gitlab":
        spec, configured = GITLAB_TOKEN, config.gitlab_token
    else:
        spec, configured = GITHUB_TOKEN, config.github_token

    try:
        resolution = resolve_token(spec, configured, interactive=interactive)
    except CredentialError as e:
        fail(str(e))

    ctx.obj['logger'].debug(f"Using {spec.name} token from {resolution.source}")
    return create_hosting_client(config, resolution.token, ctx.obj['logger'])


def resolve_repository(config: Config, owner: Optional[str], repo: Optional[str]) -> Tuple[str, str]:
    """Pick repository coordinates from options, config, or a prompt."""
    owner = owner or config.owner or click.prompt("Enter repository owner")
    repo = repo or config.repo or click.prompt("Enter repository name")
    return owner.strip(), repo.strip()


@cli.command()
@click.option('--path', '-p', default='cutrelease.json', help='Path for the config file')
def init_config(path):
    """Create a sample configuration file."""
    try:
        create_sample_config(path)
    except OSError as e:
        fail(f"Error creating config file: {e}")
    click.echo(f"Sample configuration file created at: {path}")
    click.echo("Edit it with your repository details. Keep tokens in the environment or git config.")


@cli.command()
def version():
    """Show version information."""
    click.echo(f"Cutrelease version {__version__}")


# Add subcommands
cli.add_command(release)
cli.add_command(candidates)
cli.add_command(repos)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == '__main__':
    main()
