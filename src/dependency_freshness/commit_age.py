"""Resolution of commit distance and age for a consumed commit.

The age of a consumed commit is the committer timestamp of its mainline
successor: the commit on the tracked branch's first-parent chain whose first
parent is the consumed commit. That is the change which made the consumed
commit stale. Neither the build's production time nor the oldest commit in
the compare window is used: builds lag behind the branch, and a compare
window also contains side-branch commits brought in by merges.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Optional, Set

from .models import (
    CommitComparison,
    CommitInfo,
    ComparisonCommit,
    ComparisonNotFound,
    ComparisonResult,
    FreshnessState,
)

logger = logging.getLogger(__name__)


def find_mainline_successor(
    comparison: CommitComparison,
    consumed_sha: str,
) -> Optional[ComparisonCommit]:
    """Walk first-parent links from the newest commit back to ``consumed_sha``.

    Returns the commit whose first parent is ``consumed_sha``, or ``None`` when
    the first-parent chain leaves the window (or loops) before reaching it.
    """
    if not comparison.commits:
        return None

    by_sha: Dict[str, ComparisonCommit] = {commit.sha: commit for commit in comparison.commits}
    visited: Set[str] = set()
    current: Optional[ComparisonCommit] = comparison.commits[-1]

    while current is not None and current.sha not in visited:
        visited.add(current.sha)
        parent = current.first_parent
        if parent == consumed_sha:
            return current
        if parent is None:
            return None
        current = by_sha.get(parent)

    return None


def resolve_commit_age(comparison: ComparisonResult, consumed_sha: str) -> CommitInfo:
    """Derive distance and age for ``consumed_sha`` from a compare result.

    The compare is requested with the consumed commit as base and the branch
    as head, so ``aheadBy`` is how far the branch has moved past the consumed
    commit, which is how many commits the dependency is behind.
    """
    if isinstance(comparison, ComparisonNotFound):
        return CommitInfo(state=FreshnessState.NOT_FOUND)

    distance = comparison.aheadBy

    if not comparison.commits:
        # Nothing newer than the consumed commit, so there is no successor.
        return CommitInfo(state=FreshnessState.RESOLVED, distance=distance)

    successor = find_mainline_successor(comparison, consumed_sha)
    if successor is None:
        logger.warning(
            "Could not find mainline successor of commit %s in a window of %d commits",
            consumed_sha,
            len(comparison.commits),
            extra={
                "base": consumed_sha,
                "ahead_by": distance,
                "window_size": len(comparison.commits),
            },
        )
        return CommitInfo(state=FreshnessState.DIVERGED, distance=distance)

    age: datetime = successor.committerDate
    return CommitInfo(state=FreshnessState.RESOLVED, distance=distance, age=age)
