"""
Shared fixtures for cutrelease tests.
"""

import pytest

from tests.helpers import make_change


@pytest.fixture
def release_history():
    """PR#10 fix, PR#11 release 1.0.0 announcing #9 and #10, PR#12 feature."""
    return [
        make_change(10, "Fix bug", merged_day=1),
        make_change(11, "Release: Version 1.0.0", merged_day=2, body="Includes #9, #10"),
        make_change(12, "Add feature", merged_day=3),
    ]


@pytest.fixture
def newest_first(release_history):
    """The same history as the API returns it, most recently updated first."""
    return list(reversed(release_history))
