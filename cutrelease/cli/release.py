"""Release command implementation."""

import re
import sys
from typing import List

import click

from ..config import OPENAI_TOKEN, resolve_token
from ..errors import CandidateFetchError, CredentialError, HostingError, SummaryError
from ..releasenote import (
    ReleaseSummarizer,
    build_release_body,
    build_release_title,
    compose_fallback_summary,
    create_openai_client,
    fetch_candidates,
    is_valid_release_version,
)


def parse_selection(text: str, count: int) -> List[int]:
    """Turn '1,3-5' or 'all' into zero-based indexes, in the order given."""
    text = (text or '').strip().lower()
    if text == 'all':
        return list(range(count))

    indexes = []
    for token in re.split(r'[,\s]+', text):
        if not token:
            continue
        match = re.match(r'^(\d+)(?:-(\d+))?$', token)
        if not match:
            raise click.BadParameter(f"'{token}' is not a number or range")
        start = int(match.group(1))
        end = int(match.group(2) or start)
        if start > end:
            start, end = end, start
        if start < 1 or end > count:
            raise click.BadParameter(f"'{token}' is outside 1-{count}")
        for number in range(start, end + 1):
            if number - 1 not in indexes:
                indexes.append(number - 1)

    if not indexes:
        raise click.BadParameter("Select at least one pull request")
    return indexes


def prompt_selection(changes):
    click.echo("\nSelect pull requests to include in the release:")
    for i, change in enumerate(changes, start=1):
        click.echo(f"  {i:>3}. {change.describe()}")

    indexes = click.prompt(
        "Pull requests to include (e.g. 1,3-5 or 'all')",
        default='all',
        value_proc=lambda value: parse_selection(value, len(changes)),
    )
    return [changes[i] for i in indexes]


def check_version(value: str) -> str:
    value = value.strip()
    if not is_valid_release_version(value):
        raise click.BadParameter("Please enter a valid version number in the format x.y.z (e.g., 1.2.3)")
    return value


def validate_version_option(ctx, param, value):
    return check_version(value) if value else value


def generate_ai_summary(ctx, selected) -> str:
    """Summarize with the language model, offering the plain list on failure."""
    from .main import fail

    config = ctx.obj['config']
    logger = ctx.obj['logger']

    try:
        resolution = resolve_token(OPENAI_TOKEN, config.openai_api_key)
    except CredentialError as e:
        fail(str(e))

    summarizer = ReleaseSummarizer(
        create_openai_client(resolution.token, config.openai_base_url),
        model=config.openai_model,
    )

    click.secho("Generating release summary...", fg='cyan')
    try:
        summary = summarizer.summarize(selected)
    except SummaryError as e:
        logger.debug(f"Summary failed: {e}")
        click.secho("Failed to generate summary", fg='red', err=True)
        if 'Invalid API response' in str(e):
            click.secho("Error: The AI service returned an unexpected response format.", fg='red', err=True)
            click.secho("This might be due to:", fg='yellow', err=True)
            click.echo("- Service temporarily unavailable\n- Rate limiting\n- Model configuration issues", err=True)
            click.secho("Please try again in a few moments.", fg='cyan', err=True)
        else:
            click.echo(f"Error: {e}", err=True)

        if click.confirm("Would you like to use a simple list format instead?", default=True):
            return compose_fallback_summary(selected)
        sys.exit(1)

    click.secho("Summary generated successfully", fg='green')
    return summary


@click.command()
@click.option('--owner', help='Repository owner (user or organization)')
@click.option('--repo', help='Repository name')
@click.option('--base-branch', '-b', help='Only consider pull requests merged into this branch')
@click.option('--summary', 'summary_type', type=click.Choice(['ai', 'list']),
              help='Summarize with AI or simply list the selected pull requests')
@click.option('--version-number', callback=validate_version_option,
              help='Version for this release (x.y.z)')
@click.option('--source-branch', help='Branch the release pull request is opened from')
@click.option('--target-branch', help='Branch the release pull request targets')
@click.option('--dry-run', is_flag=True, help='Show the release pull request without creating it')
@click.option('--output', '-o', help='Also write the release body to this markdown file')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation before creating the pull request')
@click.pass_context
def release(ctx, owner, repo, base_branch, summary_type, version_number, source_branch,
            target_branch, dry_run, output, yes):
    """Select merged pull requests and open a draft release pull request."""

    # Import here to avoid circular dependency
    from .main import create_client, fail, resolve_repository

    config = ctx.obj['config']
    logger = ctx.obj['logger']

    client = create_client(ctx)
    owner, repo = resolve_repository(config, owner, repo)
    base_branch = base_branch or config.base_branch

    logger.info(f"Preparing release for {owner}/{repo}" + (f" into {base_branch}" if base_branch else ""))

    click.secho("Fetching pull requests...", fg='cyan')
    try:
        result = fetch_candidates(client, owner, repo, base_branch)
    except CandidateFetchError as e:
        click.secho("Failed to fetch pull requests", fg='red', err=True)
        fail(str(e))
    click.secho(result.message, fg='green')

    if not result.candidates:
        click.echo("No pull requests to release.")
        return

    selected = prompt_selection(result.candidates)

    if not summary_type:
        summary_type = click.prompt(
            "How would you like to summarize the pull requests? (ai = generate with AI, list = simple list)",
            type=click.Choice(['ai', 'list']),
            default='ai',
        )

    if summary_type == 'ai':
        summary = generate_ai_summary(ctx, selected)
    else:
        summary = compose_fallback_summary(selected)

    click.secho("\nSummary:", fg='cyan')
    click.echo(summary)

    body = build_release_body(summary)
    if output:
        try:
            with open(output, 'w', encoding='utf-8') as f:
                f.write(body + "\n")
        except OSError as e:
            fail(f"Error writing to file {output}: {e}")
        click.echo(f"Release summary saved to: {output}")

    if not version_number:
        version_number = click.prompt(
            "Enter the version number for this release (e.g., 1.2.3)",
            value_proc=check_version,
        )

    if dry_run:
        click.echo(f"\nWould create draft pull request: {build_release_title(version_number)}")
        click.echo("(Dry run - no changes made)")
        return

    if not yes and not click.confirm("Would you like to create a release PR with this summary?", default=True):
        click.echo("Release PR not created.")
        return

    source_branch = source_branch or click.prompt("Enter source branch name")
    target_branch = target_branch or click.prompt("Enter target branch name", default=base_branch)

    click.secho("Creating release PR...", fg='cyan')
    try:
        pr = client.create_pull_request(
            owner,
            repo,
            title=build_release_title(version_number),
            head=source_branch,
            base=target_branch,
            body=body,
            draft=True,
        )
    except HostingError as e:
        click.secho("Failed to create release PR", fg='red', err=True)
        fail(str(e))

    click.secho(f"Release PR #{pr.number} created successfully", fg='green')
    click.echo(f"\nSuccess! Release PR created: {pr.url}")
