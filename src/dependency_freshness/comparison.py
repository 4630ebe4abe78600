"""History comparison with "not found" converted into a recoverable outcome."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from .cancellation import CancellationToken
from .errors import NotFoundError
from .models import CommitComparison, ComparisonNotFound, ComparisonResult

logger = logging.getLogger(__name__)


class HistoryProvider(Protocol):
    def compare(
        self,
        owner: str,
        repo: str,
        base: str,
        head: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> CommitComparison: ...


class CommitComparisonClient:
    """Compares a consumed commit against the tip of its tracked branch."""

    def __init__(self, provider: HistoryProvider) -> None:
        self._provider = provider

    def compare(
        self,
        owner: str,
        repo: str,
        base_sha: str,
        head_ref: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ComparisonResult:
        """Return the comparison, or ``ComparisonNotFound`` if either side is unresolvable.

        Only ``NotFoundError`` is recovered here; every other failure
        propagates to the caller.
        """
        try:
            return self._provider.compare(owner, repo, base_sha, head_ref, cancel_token=cancel_token)
        except NotFoundError as exc:
            logger.warning(
                "Failed to compare commit history for '%s/%s' between '%s' and '%s'.",
                owner,
                repo,
                base_sha,
                head_ref,
                extra={
                    "owner": owner,
                    "repo": repo,
                    "base": base_sha,
                    "head": head_ref,
                    "error": str(exc),
                },
            )
            return ComparisonNotFound(owner=owner, repo=repo, base=base_sha, head=head_ref)
