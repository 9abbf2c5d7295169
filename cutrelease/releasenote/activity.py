"""Rank an owner's repositories by recently merged pull requests."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from ..errors import HostingError


logger = logging.getLogger(__name__)

DEFAULT_WORKER_COUNT = 4
DEFAULT_DISPATCH_DELAY = 0.2


def rank_repositories(client, owner: str, days: int = 30,
                      workers: int = DEFAULT_WORKER_COUNT,
                      dispatch_delay: float = DEFAULT_DISPATCH_DELAY,
                      now: Optional[datetime] = None) -> List[Tuple[str, int]]:
    """Count merged pull requests per repository over the last ``days`` days.

    Lookups run on a small thread pool; submissions are spaced by
    ``dispatch_delay`` seconds to stay under the hosting API's rate limits.

    Args:
        client: Hosting client
        owner: User or organization
        days: Size of the activity window
        workers: Maximum concurrent lookups
        dispatch_delay: Pause between submissions, in seconds
        now: Reference time, defaults to the current UTC time

    Returns:
        (repository, merged count) pairs, busiest first

    Raises:
        HostingError: The repository list could not be read
    """
    since = (now or datetime.now(timezone.utc)) - relativedelta(days=days)
    repos = client.list_repositories(owner)
    if not repos:
        return []

    counts = {}
    max_workers = max(1, min(workers, len(repos)))

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_repo = {}
        for i, repo in enumerate(repos):
            if i and dispatch_delay:
                time.sleep(dispatch_delay)
            future_to_repo[executor.submit(client.count_merged_since, owner, repo, since)] = repo

        for future in as_completed(future_to_repo):
            repo = future_to_repo[future]
            try:
                counts[repo] = future.result()
            except HostingError as e:
                logger.warning(f"Error counting merged pull requests for {owner}/{repo}: {e}")
                counts[repo] = 0

    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))
