"""GitHub REST API client for commit history comparison."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .cancellation import CancellationToken
from .errors import ApiError, DataValidationError, NotFoundError, RateLimitError
from .models import ApiInfo, CommitComparison, ComparisonCommit, RateLimit
from .rest import RestClient, parse_datetime


class GitHubClient(RestClient):
    """Client for the GitHub compare API that tracks the caller's rate limit."""

    _SERVICE_NAME = "GitHub"

    def __init__(
        self,
        base_url: str = "https://api.github.com",
        token: Optional[str] = None,
        timeout_seconds: int = 30,
    ) -> None:
        super().__init__(base_url, timeout_seconds=timeout_seconds)
        self._session.headers.update({"Accept": "application/vnd.github+json"})
        if token:
            self._session.headers.update({"Authorization": f"token {token}"})

        self._api_info_lock = threading.Lock()
        self._last_api_info: Optional[ApiInfo] = None

    def get_last_api_info(self) -> Optional[ApiInfo]:
        """Return metadata from the most recent response, or ``None`` before any call."""
        with self._api_info_lock:
            return self._last_api_info

    def _on_response(self, response: requests.Response) -> None:
        rate_limit = self._parse_rate_limit(response)
        with self._api_info_lock:
            self._last_api_info = ApiInfo(rateLimit=rate_limit)

    def _check_response(self, response: requests.Response, url: str) -> None:
        """Raise ``RateLimitError`` when the primary quota is exhausted.

        Exhausted quota shows up as 403 or 429 with ``X-RateLimit-Remaining: 0``;
        retrying before the reset time cannot succeed.
        """
        if response.status_code not in (403, 429):
            return
        if response.headers.get("X-RateLimit-Remaining") != "0":
            return

        rate_limit = self._parse_rate_limit(response)
        reset_time = rate_limit.resetTime if rate_limit else None
        raise RateLimitError(
            f"GitHub API rate limit exhausted: GET {url} (resets at {reset_time})",
            status_code=response.status_code,
            reset_time=reset_time,
        )

    def _parse_rate_limit(self, response: requests.Response) -> Optional[RateLimit]:
        headers = response.headers
        try:
            limit = int(headers["X-RateLimit-Limit"])
            remaining = int(headers["X-RateLimit-Remaining"])
            reset = int(headers["X-RateLimit-Reset"])
        except (KeyError, TypeError, ValueError):
            return None

        return RateLimit(
            limit=limit,
            remaining=remaining,
            resetTime=datetime.fromtimestamp(reset, tz=timezone.utc),
        )

    def compare(
        self,
        owner: str,
        repo: str,
        base: str,
        head: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> CommitComparison:
        """Compare ``base`` against ``head`` in ``owner/repo``.

        GitHub answers 422 (not 404) when one side of the range does not
        exist in the repository; both are reported as ``NotFoundError``.

        Returns:
            The comparison with commits ordered oldest first.

        Raises:
            NotFoundError: If the repository, base or head cannot be resolved.
            RateLimitError: If the GitHub quota is exhausted.
            ApiError: For any other failed request.
        """
        path = f"repos/{quote(owner)}/{quote(repo)}/compare/{quote(base, safe='/')}...{quote(head, safe='/')}"
        try:
            payload = self._get_json(path, cancel_token=cancel_token)
        except ApiError as exc:
            if exc.status_code == 422:
                raise NotFoundError(str(exc), status_code=422) from exc
            raise

        return self._parse_comparison(payload)

    def _parse_comparison(self, payload: Dict[str, Any]) -> CommitComparison:
        ahead_by = payload.get("ahead_by")
        if not isinstance(ahead_by, int) or ahead_by < 0:
            raise DataValidationError(f"GitHub compare payload has invalid ahead_by: {ahead_by!r}")

        raw_commits = payload.get("commits") or []
        if not isinstance(raw_commits, list):
            raise DataValidationError(f"GitHub compare payload has invalid commits: {raw_commits!r}")

        commits: List[ComparisonCommit] = []
        for item in raw_commits:
            if not isinstance(item, dict):
                raise DataValidationError(f"GitHub compare commit has unexpected shape: {item!r}")

            sha = item.get("sha")
            commit_data = item.get("commit") or {}
            committer = commit_data.get("committer") if isinstance(commit_data, dict) else None
            raw_date = committer.get("date") if isinstance(committer, dict) else None
            try:
                committer_date = parse_datetime(raw_date)
            except ValueError as exc:
                raise DataValidationError(
                    f"GitHub compare commit {sha} has an invalid committer date: {raw_date!r}"
                ) from exc

            if not sha or committer_date is None:
                raise DataValidationError(
                    f"GitHub compare commit is missing required fields: payload={item}"
                )

            raw_parents = item.get("parents") or []
            if not isinstance(raw_parents, list) or not all(
                isinstance(parent, dict) for parent in raw_parents
            ):
                raise DataValidationError(
                    f"GitHub compare commit {sha} has invalid parents: {raw_parents!r}"
                )

            parents = tuple(str(parent["sha"]) for parent in raw_parents if parent.get("sha"))
            commits.append(
                ComparisonCommit(sha=str(sha), parentShas=parents, committerDate=committer_date)
            )

        return CommitComparison(aheadBy=ahead_by, commits=tuple(commits))
