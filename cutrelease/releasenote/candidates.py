"""Release candidate discovery.

A release is marked by a pull request whose title names a semantic version
(``Release: Version 1.4.0``). The candidates for the next release are the
merged pull requests that came in at or after that marker and that its
description does not already announce.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from ..errors import CandidateFetchError, HostingError
from ..hosting.models import ChangeRequest


logger = logging.getLogger(__name__)

# MAJOR.MINOR.PATCH with optional pre-release and build metadata, no leading zeros
SEMVER_RE = re.compile(
    r'\b(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)'
    r'(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?'
    r'(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?\b'
)

# Version typed by the operator for the release being prepared
RELEASE_VERSION_RE = re.compile(r'^\d+\.\d+\.\d+$')

# "#123" and "(#123)"
HASH_REFERENCE_RE = re.compile(r'#(\d+)')
# "PR 123", "PR: 123", "pr:123"
LABEL_REFERENCE_RE = re.compile(r'\bPR:?\s*(\d+)', re.IGNORECASE)


@dataclass
class CandidateResult:
    """Outcome of a candidate scan."""

    candidates: List[ChangeRequest]
    marker: Optional[ChangeRequest] = None
    announced: Set[int] = field(default_factory=set)

    @property
    def message(self) -> str:
        if self.marker:
            return (f"Found {len(self.candidates)} new merged pull requests "
                    f"(excluding {len(self.announced)} PRs from last release)")
        return f"Found {len(self.candidates)} merged pull requests"


def is_version_title(text: Optional[str]) -> bool:
    """Check whether text mentions a semantic version anywhere."""
    if not text:
        return False
    return SEMVER_RE.search(text) is not None


def is_valid_release_version(text: str) -> bool:
    """Check an operator-supplied release version (x.y.z)."""
    return bool(RELEASE_VERSION_RE.match(text or ''))


def extract_announced_numbers(text: Optional[str]) -> Set[int]:
    """Collect pull request numbers cited in a release description.

    Args:
        text: Free-form markdown, may be None

    Returns:
        Set of numbers cited as ``#N``, ``(#N)``, ``PR N`` or ``PR: N``
    """
    if not text:
        return set()
    numbers = {int(m) for m in HASH_REFERENCE_RE.findall(text)}
    numbers.update(int(m) for m in LABEL_REFERENCE_RE.findall(text))
    return numbers


def filter_candidates(changes: Iterable[ChangeRequest],
                      marker: Optional[ChangeRequest] = None,
                      announced: Optional[Set[int]] = None,
                      base_branch: Optional[str] = None) -> List[ChangeRequest]:
    """Select the merged changes that belong to the next release.

    Args:
        changes: Change requests in any order
        marker: Latest release pull request, if one was found
        announced: Numbers already listed in the marker's description
        base_branch: Only keep changes merged into this branch

    Returns:
        Accepted changes, in input order
    """
    announced = announced or set()
    since = marker.merged_at if marker else None

    result = []
    for change in changes:
        if not change.is_merged:
            continue
        if base_branch and change.base_branch != base_branch:
            continue
        if marker is not None:
            if change.number == marker.number:
                continue
            # Changes merged together with the marker stay in
            if since is not None and change.merged_at < since:
                continue
        if change.number in announced:
            continue
        result.append(change)
    return result


def find_release_marker(client, owner: str, repo: str) -> Optional[ChangeRequest]:
    """Find the most recently updated closed pull request with a version title.

    A failing scan is logged and reported as "no marker".
    """
    try:
        for page in client.iter_closed_pages(owner, repo):
            for change in page:
                if is_version_title(change.title):
                    logger.info(f"Latest release pull request: #{change.number} {change.title}")
                    return change
    except HostingError as e:
        logger.warning(f"Failed to fetch latest release PR: {e}")
        return None

    logger.info(f"No release pull request found in {owner}/{repo}")
    return None


def fetch_candidates(client, owner: str, repo: str,
                     base_branch: Optional[str] = None) -> CandidateResult:
    """Collect the release candidates for a repository.

    Args:
        client: Hosting client providing ``iter_closed_pages``
        owner: Repository owner
        repo: Repository name
        base_branch: Only keep changes merged into this branch

    Returns:
        Candidates with the marker and announced numbers used to pick them

    Raises:
        CandidateFetchError: The pull request listing could not be read
    """
    marker = find_release_marker(client, owner, repo)
    announced = extract_announced_numbers(marker.body if marker else None)
    if marker:
        logger.debug(f"Release #{marker.number} announces {len(announced)} pull requests")

    candidates: List[ChangeRequest] = []
    try:
        for page in client.iter_closed_pages(owner, repo):
            candidates.extend(filter_candidates(page, marker, announced, base_branch))
    except HostingError as e:
        raise CandidateFetchError(str(e)) from e

    return CandidateResult(candidates=candidates, marker=marker, announced=announced)
