"""Freshness analysis of the direct dependencies of a repository's latest build.

For the latest build of a repository on a channel, every direct dependency
edge is resolved to its build, mapped to a GitHub repository, compared
against the tip of its tracked branch and turned into a
``DependencyFreshnessEntry``. Dependencies are evaluated concurrently on a
bounded thread pool; entries are returned in the graph's edge order.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Protocol, Tuple

from .cancellation import CancellationToken
from .commit_age import resolve_commit_age
from .comparison import CommitComparisonClient
from .errors import ApiError, AuthenticationError, DataValidationError, RateLimitError
from .maestro_client import MaestroClient
from .models import (
    ApiInfo,
    Build,
    CommitInfo,
    DependencyFreshnessEntry,
    FreshnessReport,
    FreshnessState,
    RateLimit,
    RepoReference,
)
from .repo_reference import RepoExclusionPolicy, resolve_repo_reference

logger = logging.getLogger(__name__)


class QuotaSource(Protocol):
    def get_last_api_info(self) -> Optional[ApiInfo]: ...


def render_commit_url(build: Build, reference: Optional[RepoReference]) -> str:
    """Link to the consumed commit on GitHub, or on Azure DevOps when no GitHub reference exists."""
    if reference is not None and build.gitHubRepository:
        return f"{build.gitHubRepository.rstrip('/')}/commits/{build.commit}"
    if build.azureDevOpsRepository:
        return (
            f"{build.azureDevOpsRepository.rstrip('/')}/commits"
            f"?itemPath=%2F&itemVersion=GC{build.commit}"
        )
    return ""


def render_build_url(build: Build) -> str:
    """Link to the Azure DevOps build results page, or ``""`` if the build is not from Azure DevOps."""
    if not (build.azureDevOpsAccount and build.azureDevOpsProject and build.azureDevOpsBuildId):
        return ""
    return (
        f"https://dev.azure.com/{build.azureDevOpsAccount}/{build.azureDevOpsProject}"
        f"/_build/results?buildId={build.azureDevOpsBuildId}&view=results"
    )


class IncomingAnalyzer:
    """Builds a freshness report for the dependencies flowing into a repository."""

    def __init__(
        self,
        maestro_client: MaestroClient,
        comparison_client: CommitComparisonClient,
        exclusion_policy: Optional[RepoExclusionPolicy] = None,
        quota_source: Optional[QuotaSource] = None,
        max_workers: int = 4,
    ) -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be greater than 0")

        self._maestro = maestro_client
        self._comparison_client = comparison_client
        self._exclusion_policy = exclusion_policy or RepoExclusionPolicy()
        self._quota_source = quota_source
        self._max_workers = max_workers

    def current_rate_limit(self) -> Optional[RateLimit]:
        """Latest history-provider quota snapshot, if any call has been made."""
        if self._quota_source is None:
            return None
        api_info = self._quota_source.get_last_api_info()
        return api_info.rateLimit if api_info else None

    def analyze(
        self,
        repository: str,
        channel_id: int,
        cancel_token: Optional[CancellationToken] = None,
    ) -> FreshnessReport:
        """Analyze the latest build of ``repository`` on ``channel_id``.

        Raises:
            DataIntegrityError: If a dependency edge targets a build missing
                from the graph.
            AnalysisCancelled: If ``cancel_token`` is cancelled before the
                report is complete.
            ApiError: If the latest build or its graph cannot be fetched.
        """
        token = cancel_token or CancellationToken()

        latest = self._maestro.get_latest(repository, channel_id, cancel_token=token)
        graph = self._maestro.get_build_graph(latest.id, cancel_token=token)
        root = graph.root

        # Resolve every edge up front so a broken graph fails before any GitHub calls.
        dependencies = [graph.get(edge.buildId) for edge in root.dependencies]

        work: List[Tuple[Build, Optional[RepoReference]]] = []
        for build in dependencies:
            reference = resolve_repo_reference(build.gitHubRepository)
            if not self._exclusion_policy.should_include(reference):
                logger.debug(
                    "Skipping excluded repository",
                    extra={"build_id": build.id, "repository": build.gitHubRepository},
                )
                continue
            work.append((build, reference))

        entries = self._evaluate_all(work, token)
        token.raise_if_cancelled()

        logger.info(
            "Analyzed incoming dependencies",
            extra={
                "repository": repository,
                "channel_id": channel_id,
                "root_build_id": root.id,
                "dependencies_total": len(dependencies),
                "entries": len(entries),
            },
        )

        return FreshnessReport(
            root=root,
            entries=tuple(entries),
            rate_limit=self.current_rate_limit(),
        )

    def _evaluate_all(
        self,
        work: List[Tuple[Build, Optional[RepoReference]]],
        token: CancellationToken,
    ) -> List[DependencyFreshnessEntry]:
        """Evaluate dependencies on the thread pool and return them in input order."""
        if not work:
            return []

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(work))) as executor:
            futures: List[Future[DependencyFreshnessEntry]] = [
                executor.submit(self.evaluate_dependency, build, reference, token)
                for build, reference in work
            ]
            try:
                return [future.result() for future in futures]
            except BaseException:
                token.cancel()
                for future in futures:
                    future.cancel()
                raise

    def evaluate_dependency(
        self,
        build: Build,
        reference: Optional[RepoReference],
        token: Optional[CancellationToken] = None,
    ) -> DependencyFreshnessEntry:
        """Build the freshness entry for a single dependency build.

        Provider failures are recorded on the entry instead of propagating, so
        one dependency cannot blank the whole report.
        """
        info = self._resolve_commit_info(build, reference, token)

        return DependencyFreshnessEntry(
            build=build,
            repo_reference=reference,
            commit_url=render_commit_url(build, reference),
            build_url=render_build_url(build),
            state=info.state,
            commit_distance=info.distance,
            commit_age=info.age,
            error=info.error,
        )

    def _resolve_commit_info(
        self,
        build: Build,
        reference: Optional[RepoReference],
        token: Optional[CancellationToken],
    ) -> CommitInfo:
        if reference is None:
            return CommitInfo(state=FreshnessState.NO_REPOSITORY)
        if not build.gitHubBranch:
            return CommitInfo(state=FreshnessState.NO_BRANCH)

        context = {
            "build_id": build.id,
            "owner": reference.owner,
            "repo": reference.repo,
            "base": build.commit,
            "head": build.gitHubBranch,
        }
        try:
            comparison = self._comparison_client.compare(
                reference.owner,
                reference.repo,
                build.commit,
                build.gitHubBranch,
                cancel_token=token,
            )
        except RateLimitError as exc:
            logger.warning("GitHub quota exhausted; freshness unknown", extra={**context, "error": str(exc)})
            return CommitInfo(state=FreshnessState.RATE_LIMITED, error=str(exc))
        except (ApiError, AuthenticationError, DataValidationError) as exc:
            logger.warning("Commit comparison failed", extra={**context, "error": str(exc)})
            return CommitInfo(state=FreshnessState.FAILED, error=str(exc))

        return resolve_commit_age(comparison, build.commit)
