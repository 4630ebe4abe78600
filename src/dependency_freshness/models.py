"""Domain models for dependency freshness analysis.

Provider-facing dataclasses mirror the payload field names of the Maestro and
GitHub APIs and model only the subset of fields the analysis consumes. All of
them are immutable once parsed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, NewType, Optional, Tuple, Union

from .errors import DataIntegrityError

BuildId = NewType("BuildId", int)


@dataclass(frozen=True, slots=True)
class BuildDependency:
    """A dependency edge from one build to another build in the same graph."""

    buildId: BuildId
    isProduct: bool = True


@dataclass(frozen=True, slots=True)
class Build:
    """Represents a build produced by the build-graph provider."""

    id: BuildId
    commit: str
    dateProduced: datetime
    gitHubRepository: Optional[str] = None
    gitHubBranch: Optional[str] = None
    azureDevOpsRepository: Optional[str] = None
    azureDevOpsBranch: Optional[str] = None
    azureDevOpsAccount: Optional[str] = None
    azureDevOpsProject: Optional[str] = None
    azureDevOpsBuildId: Optional[int] = None
    azureDevOpsBuildNumber: Optional[str] = None
    dependencies: Tuple[BuildDependency, ...] = ()


@dataclass(frozen=True, slots=True)
class BuildSummary:
    """Represents the latest build returned for a repository on a channel."""

    id: BuildId
    commit: str


@dataclass(frozen=True, slots=True)
class BuildGraph:
    """A set of builds keyed by identity, rooted at the latest build."""

    builds: Dict[BuildId, Build]
    root_id: BuildId

    def get(self, build_id: BuildId) -> Build:
        """Return the build with ``build_id``.

        Raises:
            DataIntegrityError: If the graph does not contain the build.
        """
        try:
            return self.builds[build_id]
        except KeyError:
            raise DataIntegrityError(
                f"Build graph rooted at build {self.root_id} does not contain build {build_id}."
            ) from None

    @property
    def root(self) -> Build:
        return self.get(self.root_id)


@dataclass(frozen=True, slots=True)
class RepoReference:
    """Owner and name of a GitHub repository."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True, slots=True)
class ComparisonCommit:
    """A commit inside a compare window."""

    sha: str
    parentShas: Tuple[str, ...]
    committerDate: datetime

    @property
    def first_parent(self) -> Optional[str]:
        return self.parentShas[0] if self.parentShas else None


@dataclass(frozen=True, slots=True)
class CommitComparison:
    """Result of comparing a base commit against a head ref.

    ``commits`` keeps provider order: oldest first, head of the branch last.
    """

    aheadBy: int
    commits: Tuple[ComparisonCommit, ...] = ()


@dataclass(frozen=True, slots=True)
class ComparisonNotFound:
    """Outcome of a compare whose base or head could not be resolved."""

    owner: str
    repo: str
    base: str
    head: str


ComparisonResult = Union[CommitComparison, ComparisonNotFound]


@dataclass(frozen=True, slots=True)
class RateLimit:
    """Quota snapshot reported by the history provider."""

    limit: int
    remaining: int
    resetTime: datetime


@dataclass(frozen=True, slots=True)
class ApiInfo:
    """Metadata captured from the most recent history provider response."""

    rateLimit: Optional[RateLimit]


@dataclass(frozen=True, slots=True)
class Sla:
    """Day-count thresholds for classifying unconsumed commit age."""

    warning_unconsumed_commit_age: int
    fail_unconsumed_commit_age: int


class SlaStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    FAIL = "fail"
    UNKNOWN = "unknown"


class FreshnessState(str, Enum):
    """How far freshness resolution got for a single dependency."""

    RESOLVED = "resolved"
    NO_REPOSITORY = "no-repository"
    NO_BRANCH = "no-branch"
    NOT_FOUND = "not-found"
    DIVERGED = "diverged"
    RATE_LIMITED = "rate-limited"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CommitInfo:
    """Distance and age resolved for one consumed commit."""

    state: FreshnessState
    distance: Optional[int] = None
    age: Optional[datetime] = None
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class DependencyFreshnessEntry:
    """Freshness of one direct dependency of the root build."""

    build: Build
    repo_reference: Optional[RepoReference]
    commit_url: str
    build_url: str
    state: FreshnessState
    commit_distance: Optional[int] = None
    commit_age: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def short_name(self) -> Optional[str]:
        return self.repo_reference.repo if self.repo_reference else None


@dataclass(frozen=True, slots=True)
class FreshnessReport:
    """All dependency entries for a root build, in graph edge order."""

    root: Build
    entries: Tuple[DependencyFreshnessEntry, ...] = ()
    rate_limit: Optional[RateLimit] = None
