"""
Test helpers: change request factory and an in-memory hosting client.
"""

from datetime import datetime, timezone

from cutrelease.errors import HostingError
from cutrelease.hosting.models import ChangeRequest


def day(n, hour=12):
    """Timestamp on day ``n`` of January 2024 (UTC)."""
    return datetime(2024, 1, n, hour, 0, tzinfo=timezone.utc)


def make_change(number, title="Change", merged_day=None, body="", base_branch="main",
                author="alice", merged_at=None, created_at=None, updated_at=None):
    """Build a ChangeRequest; ``merged_day=None`` and no ``merged_at`` means unmerged."""
    if merged_at is None and merged_day is not None:
        merged_at = day(merged_day)
    return ChangeRequest(
        number=number,
        title=title,
        author=author,
        author_url=f"https://github.com/{author}",
        created_at=created_at or day(1, hour=8),
        merged_at=merged_at,
        updated_at=updated_at or merged_at,
        body=body,
        url=f"https://github.com/acme/widgets/pull/{number}",
        base_branch=base_branch,
    )


class FakeHostingClient:
    """In-memory client serving fixed pages, optionally failing on given traversals."""

    def __init__(self, pages, fail_on=(), message="Bad credentials (HTTP 401)"):
        self.pages = pages
        self.fail_on = set(fail_on)
        self.message = message
        self.traversals = 0
        self.created = []

    def iter_closed_pages(self, owner, repo, per_page=100):
        self.traversals += 1
        traversal = self.traversals
        for page in self.pages:
            if traversal in self.fail_on:
                raise HostingError(self.message)
            yield list(page)

    def create_pull_request(self, owner, repo, title, head, base, body, draft=True):
        self.created.append({
            'owner': owner, 'repo': repo, 'title': title, 'head': head,
            'base': base, 'body': body, 'draft': draft,
        })
        return make_change(99, title=title, body=body, base_branch=base)


