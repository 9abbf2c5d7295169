"""Repos command implementation."""

import click

from ..errors import HostingError
from ..releasenote import rank_repositories


@click.command()
@click.option('--owner', required=True, help='User or organization whose repositories are ranked')
@click.option('--days', default=30, show_default=True, help='Activity window in days')
@click.option('--workers', default=4, show_default=True, help='Number of concurrent lookups')
@click.option('--limit', default=20, show_default=True, help='Number of repositories to show')
@click.pass_context
def repos(ctx, owner, days, workers, limit):
    """Rank an owner's repositories by recently merged pull requests."""

    # Import here to avoid circular dependency
    from .main import create_client, fail

    client = create_client(ctx)
    ctx.obj['logger'].info(f"Ranking repositories of {owner} over the last {days} days")

    try:
        ranking = rank_repositories(client, owner, days=days, workers=workers)
    except HostingError as e:
        fail(str(e))

    if not ranking:
        click.echo(f"No repositories found for {owner}")
        return

    for repo, count in ranking[:limit]:
        click.echo(f"{count:>5}  {owner}/{repo}")
