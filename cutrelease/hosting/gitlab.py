"""GitLab client wrapper using python-gitlab library."""

import logging
from datetime import datetime
from typing import Dict, Iterator, List, Optional

import gitlab
import requests
from gitlab.v4.objects import Project, ProjectMergeRequest

from ..errors import HostingError
from .models import ChangeRequest, parse_timestamp


DEFAULT_PAGE_SIZE = 100
DRAFT_PREFIX = "Draft: "
FINISHED_STATES = ('merged', 'closed')


class GitLabClient:
    """Wrapper for GitLab merge requests using python-gitlab library."""

    def __init__(self, host: str, token: str, timeout: int = 300,
                 logger: Optional[logging.Logger] = None):
        """Initialize GitLab client.

        Args:
            host: GitLab instance URL
            token: Personal access token
            timeout: Per-request timeout in seconds
            logger: Logger instance
        """
        self.host = host.rstrip('/')
        self.logger = logger or logging.getLogger(__name__)

        self.gl = gitlab.Gitlab(
            url=self.host,
            private_token=token,
            timeout=timeout
        )

        # Cache for project instance
        self._project_cache: Dict[str, Project] = {}

    def profile_url(self, login: str) -> str:
        return f"{self.host}/{login}"

    def _get_project(self, owner: str, repo: str) -> Project:
        """Get project instance with caching."""
        path = f"{owner}/{repo}"
        if path not in self._project_cache:
            try:
                self._project_cache[path] = self.gl.projects.get(path)
            except (gitlab.exceptions.GitlabError, requests.RequestException) as e:
                raise HostingError(f"Could not load GitLab project {path}: {e}") from e
        return self._project_cache[path]

    def _to_change_request(self, mr: ProjectMergeRequest) -> ChangeRequest:
        author = mr.author or {}
        username = author.get('username', '')
        return ChangeRequest(
            number=mr.iid,
            title=mr.title or '',
            author=username,
            author_url=author.get('web_url') or self.profile_url(username),
            created_at=parse_timestamp(mr.created_at),
            merged_at=parse_timestamp(getattr(mr, 'merged_at', None)),
            updated_at=parse_timestamp(getattr(mr, 'updated_at', None)),
            body=mr.description or '',
            url=mr.web_url,
            base_branch=mr.target_branch,
        )

    def iter_closed_pages(self, owner: str, repo: str,
                          per_page: int = DEFAULT_PAGE_SIZE) -> Iterator[List[ChangeRequest]]:
        """Iterate finished merge requests page by page, most recently updated first.

        GitLab keeps merged and closed-unmerged requests in separate states, so
        every state is listed and open ones are dropped. A release request that
        was closed without merging can still mark the last release.

        Raises:
            HostingError: A page could not be fetched
        """
        proj = self._get_project(owner, repo)
        page = 1
        while True:
            try:
                mrs = proj.mergerequests.list(
                    state='all',
                    order_by='updated_at',
                    sort='desc',
                    per_page=per_page,
                    page=page,
                    get_all=False,
                )
            except (gitlab.exceptions.GitlabError, requests.RequestException) as e:
                raise HostingError(f"Error listing merge requests: {e}") from e

            self.logger.debug(f"Fetched page {page} of merge requests for {owner}/{repo} ({len(mrs)} items)")
            finished = [mr for mr in mrs if mr.state in FINISHED_STATES]
            if finished:
                yield [self._to_change_request(mr) for mr in finished]
            if len(mrs) < per_page:
                return
            page += 1

    def create_pull_request(self, owner: str, repo: str, title: str, head: str,
                            base: str, body: str, draft: bool = True) -> ChangeRequest:
        """Create a merge request; drafts are marked with the title prefix.

        Raises:
            HostingError: GitLab rejected the request
        """
        proj = self._get_project(owner, repo)
        if draft and not title.startswith(DRAFT_PREFIX):
            title = f"{DRAFT_PREFIX}{title}"
        try:
            mr = proj.mergerequests.create({
                'source_branch': head,
                'target_branch': base,
                'title': title,
                'description': body,
            })
        except (gitlab.exceptions.GitlabError, requests.RequestException) as e:
            raise HostingError(f"Error creating merge request: {e}") from e
        return self._to_change_request(mr)

    def list_repositories(self, owner: str) -> List[str]:
        """List project paths in a group, falling back to a user's projects."""
        try:
            try:
                projects = self.gl.groups.get(owner).projects.list(get_all=True, archived=False)
            except gitlab.exceptions.GitlabGetError:
                users = self.gl.users.list(username=owner)
                if not users:
                    raise HostingError(f"No GitLab group or user named {owner}")
                projects = users[0].projects.list(get_all=True, archived=False)
        except (gitlab.exceptions.GitlabError, requests.RequestException) as e:
            raise HostingError(f"Error listing projects for {owner}: {e}") from e
        return [p.path for p in projects]

    def count_merged_since(self, owner: str, repo: str, since: datetime) -> int:
        """Count merge requests merged at or after ``since``."""
        proj = self._get_project(owner, repo)
        try:
            mrs = proj.mergerequests.list(
                state='merged',
                updated_after=since.isoformat(),
                get_all=True,
            )
        except (gitlab.exceptions.GitlabError, requests.RequestException) as e:
            raise HostingError(f"Error listing merge requests: {e}") from e

        count = 0
        for mr in mrs:
            merged_at = parse_timestamp(getattr(mr, 'merged_at', None))
            if merged_at and merged_at >= since:
                count += 1
        return count
