"""Release candidate discovery and release note generation."""

from .candidates import (
    CandidateResult,
    is_version_title,
    is_valid_release_version,
    extract_announced_numbers,
    filter_candidates,
    find_release_marker,
    fetch_candidates,
)
from .summary import (
    ReleaseSummarizer,
    compose_fallback_summary,
    create_openai_client,
    build_release_title,
    build_release_body,
)
from .activity import rank_repositories

__all__ = [
    "CandidateResult",
    "is_version_title",
    "is_valid_release_version",
    "extract_announced_numbers",
    "filter_candidates",
    "find_release_marker",
    "fetch_candidates",
    "ReleaseSummarizer",
    "compose_fallback_summary",
    "create_openai_client",
    "build_release_title",
    "build_release_body",
    "rank_repositories",
]
