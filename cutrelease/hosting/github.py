"""GitHub REST API client built on requests."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import requests

from ..errors import HostingError
from .models import ChangeRequest, parse_timestamp


GITHUB_WEB_URL = "https://github.com"
DEFAULT_PAGE_SIZE = 100
ERROR_BODY_LIMIT = 200


def make_headers(token: str) -> Dict[str, str]:
    """Build standard GitHub HTTP headers for a PAT."""
    return {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github.v3+json",
    }


def error_message(response: requests.Response) -> str:
    """Extract the API's error message from a failed response.

    The JSON ``message`` field is returned verbatim. Bodies that are not
    JSON (proxy or gateway pages) are cut to the first ``ERROR_BODY_LIMIT``
    characters so a full HTML page does not end up in the terminal.
    """
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get('message'):
        return f"{payload['message']} (HTTP {response.status_code})"
    return f"HTTP {response.status_code}: {response.text[:ERROR_BODY_LIMIT]}"


def decode_json(response: requests.Response) -> Any:
    """Decode a successful response body.

    Raises:
        HostingError: The body is not JSON
    """
    try:
        return response.json()
    except ValueError as e:
        raise HostingError(f"Invalid JSON from GitHub: {e}") from e


class GitHubClient:
    """Wrapper for the GitHub pull request endpoints."""

    def __init__(self, token: str, api_url: str = "https://api.github.com",
                 timeout: int = 30, logger: Optional[logging.Logger] = None,
                 session: Optional[requests.Session] = None):
        """Initialize GitHub client.

        Args:
            token: Personal access token
            api_url: REST API root, override for GitHub Enterprise
            timeout: Per-request timeout in seconds
            logger: Logger instance
            session: Optional pre-built requests session
        """
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.session.headers.update(make_headers(token))

    def profile_url(self, login: str) -> str:
        return f"{GITHUB_WEB_URL}/{login}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise HostingError(f"GitHub request failed: {e}") from e
        if not response.ok:
            raise HostingError(error_message(response))
        return response

    def _to_change_request(self, pr: Dict[str, Any]) -> ChangeRequest:
        user = pr.get('user') or {}
        login = user.get('login', '')
        return ChangeRequest(
            number=pr['number'],
            title=pr.get('title') or '',
            author=login,
            author_url=self.profile_url(login),
            created_at=parse_timestamp(pr['created_at']),
            merged_at=parse_timestamp(pr.get('merged_at')),
            updated_at=parse_timestamp(pr.get('updated_at')),
            body=pr.get('body') or '',
            url=pr.get('html_url', ''),
            base_branch=(pr.get('base') or {}).get('ref', ''),
        )

    def _paginate(self, url: str, params: Optional[Dict[str, Any]] = None) -> Iterator[List[Dict[str, Any]]]:
        """Yield raw JSON pages, following the Link rel="next" header."""
        while url:
            response = self._request("GET", url, params=params)
            yield decode_json(response)
            url = response.links.get('next', {}).get('url')
            # The next link already carries the query string
            params = None

    def iter_closed_pages(self, owner: str, repo: str,
                          per_page: int = DEFAULT_PAGE_SIZE) -> Iterator[List[ChangeRequest]]:
        """Iterate closed pull requests page by page, most recently updated first.

        Every call starts a fresh traversal from the first page.

        Raises:
            HostingError: A page could not be fetched
        """
        params = {
            'state': 'closed',
            'sort': 'updated',
            'direction': 'desc',
            'per_page': per_page,
        }
        url = f"{self.api_url}/repos/{owner}/{repo}/pulls"
        for page_number, page in enumerate(self._paginate(url, params), start=1):
            self.logger.debug(f"Fetched page {page_number} of closed pull requests for {owner}/{repo} ({len(page)} items)")
            yield [self._to_change_request(pr) for pr in page]

    def create_pull_request(self, owner: str, repo: str, title: str, head: str,
                            base: str, body: str, draft: bool = True) -> ChangeRequest:
        """Create a pull request.

        Raises:
            HostingError: GitHub rejected the request
        """
        response = self._request(
            "POST",
            f"{self.api_url}/repos/{owner}/{repo}/pulls",
            json={
                'title': title,
                'head': head,
                'base': base,
                'body': body,
                'draft': draft,
            },
        )
        return self._to_change_request(decode_json(response))

    def list_repositories(self, owner: str) -> List[str]:
        """List repository names for a user or organization."""
        url = f"{self.api_url}/users/{owner}/repos"
        names = []
        for page in self._paginate(url, {'per_page': DEFAULT_PAGE_SIZE, 'sort': 'pushed'}):
            names.extend(repo['name'] for repo in page if not repo.get('archived'))
        return names

    def count_merged_since(self, owner: str, repo: str, since: datetime) -> int:
        """Count pull requests merged at or after ``since``."""
        count = 0
        for page in self.iter_closed_pages(owner, repo):
            for change in page:
                if change.merged_at and change.merged_at >= since:
                    count += 1
            # Sorted by update time, so nothing older can follow
            if page and all(c.updated_at and c.updated_at < since for c in page):
                break
        return count
