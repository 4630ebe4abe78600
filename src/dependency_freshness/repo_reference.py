"""Parsing of repository identifiers and the repository exclusion policy."""

from __future__ import annotations

import re
from typing import FrozenSet, Iterable, Optional
from urllib.parse import urlsplit

from .models import RepoReference

_GITHUB_HOSTS = frozenset({"github.com", "www.github.com"})
_SEGMENT = re.compile(r"^[A-Za-z0-9_.-]+$")
_SHORT_FORM = re.compile(r"^(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+)$")

DEFAULT_EXCLUDED_REPOSITORIES = ("dotnet/blazor",)


def _is_valid_segment(segment: str) -> bool:
    return bool(_SEGMENT.match(segment)) and segment not in (".", "..")


def resolve_repo_reference(repository_url: Optional[str]) -> Optional[RepoReference]:
    """Extract owner and repository name from a GitHub repository URL.

    Accepts ``http(s)://[www.]github.com/{owner}/{repo}[/...]``. Anything else,
    including ``None``, other hosts and malformed paths, yields ``None``.
    Segments after ``{repo}`` are ignored.
    """
    if not repository_url:
        return None

    try:
        parts = urlsplit(repository_url.strip())
    except ValueError:
        return None

    if parts.scheme.lower() not in ("http", "https"):
        return None
    if (parts.hostname or "").lower() not in _GITHUB_HOSTS:
        return None
    if parts.port is not None or parts.username or parts.password:
        return None

    segments = parts.path.split("/")
    # Leading "/" produces an empty first segment.
    if len(segments) < 3 or segments[0] != "":
        return None

    owner, repo = segments[1], segments[2]
    if not (_is_valid_segment(owner) and _is_valid_segment(repo)):
        return None

    return RepoReference(owner=owner, repo=repo)


def normalize_repository_argument(value: str) -> str:
    """Expand the ``owner/repo`` short form into a GitHub repository URL.

    Values that are not in short form (full URLs, Azure DevOps URLs) are
    returned unchanged apart from surrounding whitespace.
    """
    value = value.strip()
    match = _SHORT_FORM.match(value)
    if match:
        return f"https://github.com/{match.group('owner')}/{match.group('repo')}"
    return value


class RepoExclusionPolicy:
    """Case-insensitive deny-list of repositories kept out of freshness tracking.

    ``dotnet/blazor`` is excluded by default because it does not take part in
    automated dependency update pull requests.
    """

    def __init__(self, excluded: Iterable[str] = DEFAULT_EXCLUDED_REPOSITORIES) -> None:
        self._excluded: FrozenSet[str] = frozenset(
            name.strip().lower() for name in excluded if name and name.strip()
        )

    @property
    def excluded(self) -> FrozenSet[str]:
        return self._excluded

    def should_include(self, reference: Optional[RepoReference]) -> bool:
        """Return ``False`` only for references on the deny-list."""
        if reference is None:
            return True
        return reference.full_name.lower() not in self._excluded
