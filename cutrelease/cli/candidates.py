"""Candidates command implementation."""

import click

from ..errors import CandidateFetchError
from ..releasenote import compose_fallback_summary, fetch_candidates


@click.command()
@click.option('--owner', help='Repository owner (user or organization)')
@click.option('--repo', help='Repository name')
@click.option('--base-branch', '-b', help='Only consider pull requests merged into this branch')
@click.option('--format', 'output_format', type=click.Choice(['table', 'markdown']), default='table',
              help='Output format')
@click.pass_context
def candidates(ctx, owner, repo, base_branch, output_format):
    """List the merged pull requests not yet part of a release."""

    # Import here to avoid circular dependency
    from .main import create_client, fail, resolve_repository

    config = ctx.obj['config']
    client = create_client(ctx)
    owner, repo = resolve_repository(config, owner, repo)

    try:
        result = fetch_candidates(client, owner, repo, base_branch or config.base_branch)
    except CandidateFetchError as e:
        fail(str(e))

    click.echo(result.message, err=True)
    if result.marker:
        click.echo(f"Last release: #{result.marker.number} {result.marker.title}", err=True)

    if output_format == 'markdown':
        if result.candidates:
            click.echo(compose_fallback_summary(result.candidates))
        return

    for change in result.candidates:
        merged = change.merged_at.strftime('%Y-%m-%d') if change.merged_at else ''
        click.echo(f"#{change.number:<6} {merged:<10}  @{change.author:<20} {change.title}")
